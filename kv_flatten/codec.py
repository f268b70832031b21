"""JSON codec for the metadata side channel."""

from __future__ import annotations

import json
from typing import Any

from kv_flatten.errors import FlattenContractError


Metadata = dict[str, list[str]]


def encode_metadata(metadata: Metadata) -> str:
    """Encode metadata as compact JSON, preserving key and template order."""
    return json.dumps(metadata, separators=(",", ":"))


def decode_metadata(raw: str) -> Any:
    """Decode metadata JSON; decoding errors propagate unchanged."""
    return json.loads(raw)


def validate_metadata(decoded: Any) -> Metadata:
    """Return decoded metadata if it maps strings to lists of strings."""
    if not isinstance(decoded, dict):
        msg = f"expected metadata to decode to a mapping, got {type(decoded).__name__}"
        raise FlattenContractError(msg)
    for key, templates in decoded.items():
        if not isinstance(key, str):
            msg = f"expected metadata key to be a string, got {type(key).__name__}"
            raise FlattenContractError(msg)
        if not isinstance(templates, list) or not all(isinstance(template, str) for template in templates):
            msg = f"expected metadata of key {key!r} to be a list of strings"
            raise FlattenContractError(msg)
    return decoded
