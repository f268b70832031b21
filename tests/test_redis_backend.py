import pytest

from kv_flatten.backends.redis import RedisBackend


class _FakePipeline:
    def __init__(self, client: "_FakeRedisClient", transaction: bool) -> None:
        self.client = client
        self.transaction = transaction
        self.commands: list[tuple[str, tuple[object, ...], dict[str, object]]] = []

    async def __aenter__(self) -> "_FakePipeline":
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        return

    def delete(self, key: str) -> "_FakePipeline":
        self.commands.append(("delete", (key,), {}))
        return self

    def hset(self, key: str, mapping: dict[str, str]) -> "_FakePipeline":
        self.commands.append(("hset", (key,), {"mapping": mapping}))
        return self

    async def execute(self) -> list[object]:
        self.client.executed.append((self.transaction, [name for name, _, _ in self.commands]))
        return [await getattr(self.client, name)(*args, **kwargs) for name, args, kwargs in self.commands]


class _FakeRedisClient:
    def __init__(self) -> None:
        self.store: dict[str, dict[str, str]] = {}
        self.closed = False
        self.executed: list[tuple[bool, list[str]]] = []

    def pipeline(self, transaction: bool = True) -> _FakePipeline:
        return _FakePipeline(self, transaction)

    async def hgetall(self, key: str) -> dict[str, str]:
        return dict(self.store.get(key, {}))

    async def hset(self, key: str, mapping: dict[str, str]) -> int:
        self.store.setdefault(key, {}).update(mapping)
        return len(mapping)

    async def delete(self, key: str) -> None:
        self.store.pop(key, None)

    async def scan_iter(self, match: str):
        prefix = match.removesuffix("*")
        for key in sorted(self.store.keys()):
            if key.startswith(prefix):
                yield key

    async def aclose(self) -> None:
        self.closed = True


class _FakeBytesRedisClient(_FakeRedisClient):
    async def hgetall(self, key: str) -> dict[bytes, bytes]:
        return {field.encode(): value.encode() for field, value in self.store.get(key, {}).items()}

    async def scan_iter(self, match: str):
        prefix = match.removesuffix("*")
        for key in sorted(self.store.keys()):
            if key.startswith(prefix):
                yield key.encode()


class _FakeCloseOnlyClient:
    def __init__(self) -> None:
        self.closed = False

    async def close(self) -> None:
        self.closed = True


class _FakeNoCloseClient:
    pass


@pytest.mark.asyncio
async def test_redis_backend_get_set_delete_roundtrip() -> None:
    client = _FakeRedisClient()
    backend = RedisBackend(client=client)

    await backend.set_fields("docs:1", {"title": '"Title"'})
    assert await backend.get_fields("docs:1") == {"title": '"Title"'}

    await backend.delete("docs:1")
    assert await backend.get_fields("docs:1") is None


@pytest.mark.asyncio
async def test_redis_backend_set_replaces_previous_hash() -> None:
    client = _FakeRedisClient()
    backend = RedisBackend(client=client)

    await backend.set_fields("docs:1", {"a": "1", "b": "2"})
    await backend.set_fields("docs:1", {"c": "3"})
    assert client.store["docs:1"] == {"c": "3"}


@pytest.mark.asyncio
async def test_redis_backend_empty_fields_remove_key() -> None:
    client = _FakeRedisClient()
    backend = RedisBackend(client=client)

    await backend.set_fields("docs:1", {"a": "1"})
    await backend.set_fields("docs:1", {})
    assert "docs:1" not in client.store
    assert await backend.get_fields("docs:1") is None


@pytest.mark.asyncio
async def test_redis_backend_list_keys_filters_and_sorts() -> None:
    client = _FakeRedisClient()
    backend = RedisBackend(client=client)

    await backend.set_fields("docs:z", {"a": "1"})
    await backend.set_fields("docs:a", {"a": "2"})
    await backend.set_fields("other:x", {"a": "3"})

    assert await backend.list_keys("docs:") == ["docs:a", "docs:z"]


@pytest.mark.asyncio
async def test_redis_backend_normalizes_bytes_from_client() -> None:
    client = _FakeBytesRedisClient()
    backend = RedisBackend(client=client)

    await backend.set_fields("docs:key", {"field": "value"})
    assert await backend.get_fields("docs:key") == {"field": "value"}
    assert await backend.list_keys("docs:") == ["docs:key"]


@pytest.mark.asyncio
async def test_redis_backend_close_prefers_aclose() -> None:
    client = _FakeRedisClient()
    backend = RedisBackend(client=client)

    await backend.close()
    assert client.closed is True


@pytest.mark.asyncio
async def test_redis_backend_close_falls_back_to_close() -> None:
    client = _FakeCloseOnlyClient()
    backend = RedisBackend(client=client)

    await backend.close()
    assert client.closed is True


@pytest.mark.asyncio
async def test_redis_backend_close_without_close_method_is_noop() -> None:
    backend = RedisBackend(client=_FakeNoCloseClient())
    await backend.close()


@pytest.mark.asyncio
async def test_redis_backend_set_replaces_hash_in_one_transaction() -> None:
    client = _FakeRedisClient()
    backend = RedisBackend(client=client)

    await backend.set_fields("docs:1", {"a": "1"})
    await backend.set_fields("docs:1", {})

    assert client.executed == [(True, ["delete", "hset"]), (True, ["delete"])]
