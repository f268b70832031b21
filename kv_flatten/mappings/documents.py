"""MutableMapping facade storing flattened documents in an async backend."""

from __future__ import annotations

import asyncio
import json
import logging
import threading
from collections.abc import Callable, Iterator, Mapping, MutableMapping
from typing import TYPE_CHECKING, Any, TypeVar

from typing_extensions import override

from kv_flatten.marshaller import FlattenMarshaller


if TYPE_CHECKING:
    from collections.abc import Coroutine
    from concurrent.futures import Future

    from kv_flatten.backends import Backend


logger = logging.getLogger(__name__)

_T = TypeVar("_T")


class _AsyncLoopBridge:
    """Bridge sync calls to async backend operations on a dedicated loop."""

    def __init__(self) -> None:
        super().__init__()
        self._loop_ready = threading.Event()
        self._loop: asyncio.AbstractEventLoop | None = None
        self._thread = threading.Thread(target=self._run, name="kv-flatten-documents", daemon=True)
        self._thread.start()
        _ = self._loop_ready.wait()

    def _run(self) -> None:
        loop = asyncio.new_event_loop()
        asyncio.set_event_loop(loop)
        self._loop = loop
        self._loop_ready.set()
        loop.run_forever()

    def run(self, coroutine: Coroutine[Any, Any, _T]) -> _T:
        if self._loop is None:
            coroutine.close()
            msg = "document mapping async loop not initialized"
            raise RuntimeError(msg)
        future: Future[Any] = asyncio.run_coroutine_threadsafe(coroutine, self._loop)
        return future.result()

    def close(self) -> None:
        if self._loop is None:
            return
        _ = self._loop.call_soon_threadsafe(self._loop.stop)
        self._thread.join(timeout=5)


class FlatDocumentMapping(MutableMapping[str, dict[str, Any]]):
    """Dict-like sync API storing each nested document as one flat field map.

    Documents live under ``namespace:doc_id`` backend keys. Each flat field
    value is JSON encoded, so lists of scalars and non-string scalars survive
    backends that only hold strings.
    """

    def __init__(
        self,
        backend: Backend,
        namespace: str,
        sep: str = ":",
        marshaller: FlattenMarshaller | None = None,
        json_encoder: Callable[[Any], str] = json.dumps,
        json_decoder: Callable[[str], Any] = json.loads,
    ) -> None:
        super().__init__()
        if not namespace:
            msg = "namespace must not be empty"
            raise ValueError(msg)
        if not sep:
            msg = "sep must not be empty"
            raise ValueError(msg)
        if sep in namespace:
            msg = "namespace must not contain separator"
            raise ValueError(msg)

        self._backend = backend
        self.namespace = namespace
        self.sep = sep
        self.prefix = f"{namespace}{sep}"
        self._marshaller = marshaller if marshaller is not None else FlattenMarshaller()
        self._json_encoder = json_encoder
        self._json_decoder = json_decoder
        self._bridge = _AsyncLoopBridge()

    def _backend_key(self, doc_id: str) -> str:
        if not doc_id:
            msg = "document id must not be empty"
            raise ValueError(msg)
        if self.sep in doc_id:
            msg = "document id must not contain separator"
            raise ValueError(msg)
        return self.prefix + doc_id

    def get_flat(self, doc_id: str) -> dict[str, Any]:
        """Return the flat field map of a document as stored, decoded."""
        fields = self._bridge.run(self._backend.get_fields(self._backend_key(doc_id)))
        if fields is None:
            raise KeyError(doc_id)
        return {field: self._json_decoder(raw) for field, raw in fields.items()}

    @override
    def __getitem__(self, doc_id: str) -> dict[str, Any]:
        """Return the nested document rebuilt from its stored fields."""
        return self._marshaller.unflatten(self.get_flat(doc_id))

    @override
    def __setitem__(self, doc_id: str, document: dict[str, Any]) -> None:
        """Flatten a document and replace its stored fields."""
        if not isinstance(document, Mapping):
            msg = f"documents must be mappings, got {type(document).__name__}"
            raise TypeError(msg)
        backend_key = self._backend_key(doc_id)
        flat = self._marshaller.flatten(document)
        fields = {field: self._json_encoder(value) for field, value in flat.items()}
        logger.debug("Storing %d fields under %s", len(fields), backend_key)
        self._bridge.run(self._backend.set_fields(backend_key, fields))

    @override
    def __delitem__(self, doc_id: str) -> None:
        """Delete a stored document."""
        backend_key = self._backend_key(doc_id)
        if self._bridge.run(self._backend.get_fields(backend_key)) is None:
            raise KeyError(doc_id)
        logger.debug("Deleting %s", backend_key)
        self._bridge.run(self._backend.delete(backend_key))

    @override
    def __iter__(self) -> Iterator[str]:
        """Iterate sorted document ids under the configured namespace."""
        keys = self._bridge.run(self._backend.list_keys(self.prefix))
        return iter(sorted(key.removeprefix(self.prefix) for key in keys if key.startswith(self.prefix)))

    @override
    def __len__(self) -> int:
        """Return count of stored documents."""
        return len(list(iter(self)))

    def copy(self) -> dict[str, dict[str, Any]]:
        """Return a detached plain-dict snapshot of all stored documents."""
        return {doc_id: self[doc_id] for doc_id in self}

    @override
    def __repr__(self) -> str:
        """Represent mapping as a plain dictionary string."""
        return repr(self.copy())

    def close(self) -> None:
        """Close backend and bridge resources."""
        self._bridge.run(self._backend.close())
        self._bridge.close()
