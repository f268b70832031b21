"""Minimal example for FlatDocumentMapping using a Redis-compatible backend."""

from kv_flatten.backends.redis import RedisBackend
from kv_flatten.mappings.documents import FlatDocumentMapping


def main() -> None:
    """Store documents as Redis hashes and read them back."""
    backend = RedisBackend(url="redis://redis:6379/0")
    mapping = FlatDocumentMapping(backend=backend, namespace="pages")
    try:
        mapping["home"] = {"header": {"type": "image", "media": 1}, "blocks": [{"title": "Welcome"}]}
        print("home:", mapping["home"])
        mapping.update({"about": {"title": "About", "tags": ["team", "history"]}})
        print(f"{mapping=}")

        assert mapping["about"]["tags"] == ["team", "history"]  # noqa: S101
        del mapping["about"]
        assert "about" not in mapping  # noqa: S101
    finally:
        mapping.close()


if __name__ == "__main__":
    main()
