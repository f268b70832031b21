"""Exception types raised by the flatten marshaller."""

from __future__ import annotations


class FlattenError(Exception):
    """Base class for kv-flatten errors."""


class FlattenContractError(FlattenError, ValueError):
    """A flat map or document breaks an invariant the marshaller relies on.

    Raised when unflatten is given data that was not produced by flatten
    (or was corrupted since), and when flatten meets colliding keys.
    """
