"""kv-flatten - lossless flattening of nested documents for flat KV storage"""

from ._version import version as __version__
from .backends import Backend, InMemoryAsyncBackend
from .errors import FlattenContractError, FlattenError
from .key_mapping import KeyMapper
from .mappings import FlatDocumentMapping
from .marshaller import FlattenMarshaller


__all__ = [
    "Backend",
    "FlatDocumentMapping",
    "FlattenContractError",
    "FlattenError",
    "FlattenMarshaller",
    "InMemoryAsyncBackend",
    "KeyMapper",
    "__version__",
]
