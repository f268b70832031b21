"""Mapping facades over flat document backends."""

from .documents import FlatDocumentMapping


__all__ = ["FlatDocumentMapping"]
