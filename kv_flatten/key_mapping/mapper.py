"""Key mapping between document paths, flat keys and shape templates."""

from __future__ import annotations

from typing import NamedTuple

from kv_flatten.errors import FlattenContractError


class PathSegment(NamedTuple):
    """One step of a document path: a map key or a list index."""

    name: str
    is_index: bool = False


Path = tuple[PathSegment, ...]


def _is_digits(value: str) -> bool:
    return value.isascii() and value.isdigit()


class KeyMapper:
    """Map between document paths, raw/metadata/public keys and shape templates."""

    def __init__(self, field_sep: str = ".", metadata_sep: str = "/", placeholder: str = "*") -> None:
        super().__init__()
        if not field_sep:
            msg = "field separator must not be empty"
            raise ValueError(msg)
        if not metadata_sep:
            msg = "metadata separator must not be empty"
            raise ValueError(msg)
        if field_sep == metadata_sep:
            msg = "field separator and metadata separator must differ"
            raise ValueError(msg)
        if not placeholder:
            msg = "placeholder must not be empty"
            raise ValueError(msg)
        if metadata_sep in placeholder:
            msg = "placeholder must not contain metadata separator"
            raise ValueError(msg)
        if _is_digits(placeholder):
            msg = "placeholder must not be numeric"
            raise ValueError(msg)

        self.field_sep = field_sep
        self.metadata_sep = metadata_sep
        self.placeholder = placeholder

    def raw_key(self, path: Path) -> str:
        """Join every segment of a path, list indices included."""
        return self.metadata_sep.join(segment.name for segment in path)

    def metadata_key(self, path: Path) -> str:
        """Join the map-key segments of a path, dropping list indices."""
        return self.metadata_sep.join(segment.name for segment in path if not segment.is_index)

    def public_key(self, metadata_key: str) -> str:
        """Convert a metadata key into the flat key visible to storage."""
        return metadata_key.replace(self.metadata_sep, self.field_sep)

    def is_nested(self, metadata_key: str) -> bool:
        return self.metadata_sep in metadata_key

    def validate_path(self, path: Path) -> None:
        """Reject map keys that would split into several key parts."""
        for segment in path:
            if not segment.is_index and self.metadata_sep in segment.name:
                msg = f"map key {segment.name!r} must not contain metadata separator {self.metadata_sep!r}"
                raise FlattenContractError(msg)

    def template(self, path: Path) -> str:
        """Build the shape template of a path.

        Map keys become the placeholder, list indices are kept verbatim.
        """
        return self.metadata_sep.join(
            segment.name if segment.is_index else self.placeholder for segment in path
        )

    def index_count(self, template: str) -> int:
        return sum(1 for part in template.split(self.metadata_sep) if part != self.placeholder)

    def expand(self, template: str, metadata_key: str) -> Path:
        """Fill a shape template with the map keys of ``metadata_key``.

        Placeholders consume key parts left to right; digit runs become
        index segments.
        """
        key_parts = iter(metadata_key.split(self.metadata_sep))
        path: list[PathSegment] = []
        for part in template.split(self.metadata_sep):
            if part == self.placeholder:
                name = next(key_parts, None)
                if name is None:
                    msg = f"template {template!r} has more placeholders than key {metadata_key!r} has parts"
                    raise FlattenContractError(msg)
                path.append(PathSegment(name))
            elif _is_digits(part):
                path.append(PathSegment(part, is_index=True))
            else:
                msg = f"invalid segment {part!r} in template {template!r}"
                raise FlattenContractError(msg)

        if next(key_parts, None) is not None:
            msg = f"template {template!r} leaves parts of key {metadata_key!r} unused"
            raise FlattenContractError(msg)
        return tuple(path)
