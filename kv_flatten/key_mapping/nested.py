"""Walking nested documents into paths and rebuilding them from paths."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from kv_flatten.errors import FlattenContractError

from .mapper import Path, PathSegment


if TYPE_CHECKING:
    from collections.abc import Iterable, Iterator, Mapping


class _IndexedNode(dict[int, Any]):
    """List under construction, keyed by element index."""


def iter_leaves(document: Mapping[str, Any], prefix: Path = ()) -> Iterator[tuple[Path, Any]]:
    """Yield ``(path, scalar)`` pairs of a document in depth-first order.

    Empty lists and maps have no leaves and yield nothing.
    """
    for key, value in document.items():
        path = (*prefix, PathSegment(str(key)))
        if isinstance(value, dict):
            yield from iter_leaves(value, path)
        elif isinstance(value, (list, tuple)):
            yield from _iter_list_leaves(value, path)
        else:
            yield path, value


def _iter_list_leaves(items: list[Any] | tuple[Any, ...], prefix: Path) -> Iterator[tuple[Path, Any]]:
    for index, value in enumerate(items):
        path = (*prefix, PathSegment(str(index), is_index=True))
        if isinstance(value, dict):
            yield from iter_leaves(value, path)
        elif isinstance(value, (list, tuple)):
            yield from _iter_list_leaves(value, path)
        else:
            yield path, value


def _child_container(cursor: dict[Any, Any], key: Any, next_segment: PathSegment) -> dict[Any, Any]:
    factory = _IndexedNode if next_segment.is_index else dict
    if key not in cursor:
        cursor[key] = factory()
    child = cursor[key]
    if type(child) is not factory:
        msg = f"cannot descend into {type(child).__name__} at segment {key!r}"
        raise FlattenContractError(msg)
    return child


def _segment_key(segment: PathSegment) -> str | int:
    return int(segment.name) if segment.is_index else segment.name


def _materialize(value: Any) -> Any:
    if isinstance(value, _IndexedNode):
        return [_materialize(value[index]) for index in sorted(value)]
    if isinstance(value, dict):
        return {key: _materialize(child) for key, child in value.items()}
    return value


def reconstruct_nested(items: Iterable[tuple[Path, Any]]) -> dict[str, Any]:
    """Reconstruct a nested document from classified path/value pairs.

    Every path starts with a map key. Intermediate containers are created on
    demand: a list when the following segment is an index, a map otherwise.
    Later pairs overwrite earlier ones at the same path.
    """
    root: dict[Any, Any] = {}
    for path, value in items:
        if not path:
            msg = "cannot assign a value to an empty path"
            raise FlattenContractError(msg)
        if path[0].is_index:
            msg = "document root must be a map"
            raise FlattenContractError(msg)

        cursor = root
        for segment, next_segment in zip(path, path[1:], strict=False):
            cursor = _child_container(cursor, _segment_key(segment), next_segment)
        cursor[_segment_key(path[-1])] = value

    return _materialize(root)
