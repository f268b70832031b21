"""Lossless flattening of nested documents into flat key/value maps."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from kv_flatten.codec import Metadata, decode_metadata, encode_metadata, validate_metadata
from kv_flatten.errors import FlattenContractError
from kv_flatten.key_mapping import KeyMapper, PathSegment, iter_leaves, reconstruct_nested


if TYPE_CHECKING:
    from collections.abc import Callable, Iterator, Mapping

    from kv_flatten.key_mapping import Path


class FlattenMarshaller:
    """Flatten nested documents for flat storage and restore them exactly.

    Values found below lists are merged into one list per field, e.g.
    ``{"blocks": [{"title": "A"}, {"title": "B"}]}`` becomes
    ``{"blocks.title": ["A", "B"]}``. The position of every merged value is
    recorded as a shape template in a metadata map, stored encoded under
    ``metadata_key`` so that :meth:`unflatten` can put it back.
    """

    def __init__(
        self,
        metadata_key: str = "_metadata",
        field_separator: str = ".",
        metadata_separator: str = "/",
        metadata_placeholder: str = "*",
        *,
        metadata_encoder: Callable[[Metadata], str] = encode_metadata,
        metadata_decoder: Callable[[str], Any] = decode_metadata,
    ) -> None:
        """Create a marshaller.

        Parameters
        ----------
        metadata_key
            Reserved flat key holding the encoded metadata map.
        field_separator
            Separator of the public flat keys.
        metadata_separator
            Separator of metadata keys and shape templates.
        metadata_placeholder
            Token standing for a map key inside a shape template.
        metadata_encoder, metadata_decoder
            Codec of the metadata map, compact JSON by default.
        """
        super().__init__()
        if not metadata_key:
            msg = "metadata key must not be empty"
            raise ValueError(msg)

        self.metadata_key = metadata_key
        self._keys = KeyMapper(field_separator, metadata_separator, metadata_placeholder)
        self._encode = metadata_encoder
        self._decode = metadata_decoder

    @property
    def field_separator(self) -> str:
        return self._keys.field_sep

    @property
    def metadata_separator(self) -> str:
        return self._keys.metadata_sep

    @property
    def metadata_placeholder(self) -> str:
        return self._keys.placeholder

    def flatten(self, document: Mapping[str, Any]) -> dict[str, Any]:
        """Flatten a nested document into a map of scalars and scalar lists."""
        flat: dict[str, Any] = {}
        metadata: Metadata = {}
        owners: dict[str, str] = {}
        for path, value in iter_leaves(document):
            self._keys.validate_path(path)
            metadata_key = self._keys.metadata_key(path)
            public_key = self._keys.public_key(metadata_key)
            if public_key == self.metadata_key:
                msg = f"key {self._keys.raw_key(path)!r} collides with reserved metadata key {self.metadata_key!r}"
                raise FlattenContractError(msg)

            owner = owners.setdefault(public_key, metadata_key)
            if owner != metadata_key:
                msg = f"key {self._keys.raw_key(path)!r} and key {owner!r} both flatten to {public_key!r}"
                raise FlattenContractError(msg)

            if not any(segment.is_index for segment in path):
                flat[public_key] = value
                if self._keys.is_nested(metadata_key):
                    metadata.setdefault(metadata_key, []).append(self._keys.template(path))
                continue

            flat.setdefault(public_key, []).append(value)
            metadata.setdefault(metadata_key, []).append(self._keys.template(path))

        self._drop_plain_lists(metadata)
        if metadata:
            flat[self.metadata_key] = self._encode(metadata)
        return flat

    def _drop_plain_lists(self, metadata: Metadata) -> None:
        # Top-level lists of scalars pass through unflatten as plain lists.
        nested_prefixes = {key.split(self._keys.metadata_sep, 1)[0] for key in metadata if self._keys.is_nested(key)}
        for key in list(metadata):
            if self._keys.is_nested(key) or key in nested_prefixes:
                continue
            if all(self._keys.index_count(template) == 1 for template in metadata[key]):
                del metadata[key]

    def unflatten(self, flat: Mapping[str, Any]) -> dict[str, Any]:
        """Rebuild the nested document of a map produced by :meth:`flatten`."""
        data = dict(flat)
        metadata: Metadata = {}
        if self.metadata_key in data:
            raw_metadata = data.pop(self.metadata_key)
            if not isinstance(raw_metadata, str):
                msg = f"expected metadata to be a string, got {type(raw_metadata).__name__}"
                raise FlattenContractError(msg)
            metadata = validate_metadata(self._decode(raw_metadata))

        return reconstruct_nested(self._iter_paths(data, metadata))

    def _iter_paths(self, data: dict[str, Any], metadata: Metadata) -> Iterator[tuple[Path, Any]]:
        key_mapping = {self._keys.public_key(metadata_key): metadata_key for metadata_key in metadata}
        for key, value in data.items():
            metadata_key = key_mapping.get(key)
            if metadata_key is None:
                yield (PathSegment(key),), list(value) if isinstance(value, list) else value
                continue

            if isinstance(value, dict):
                msg = f"expected value of key {key!r} to be a scalar or a list, got dict"
                raise FlattenContractError(msg)
            templates = metadata[metadata_key]
            values = value if isinstance(value, list) else [value]
            for position, sub_value in enumerate(values):
                if position >= len(templates):
                    msg = f"expected key {position} to exist in metadata of {key!r}"
                    raise FlattenContractError(msg)
                yield self._keys.expand(templates[position], metadata_key), sub_value
