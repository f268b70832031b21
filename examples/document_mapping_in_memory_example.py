"""Minimal example for FlatDocumentMapping using the in-memory backend."""

from kv_flatten.backends.in_memory import InMemoryAsyncBackend
from kv_flatten.mappings.documents import FlatDocumentMapping


def main() -> None:
    """Run a basic set/get/iterate flow against the in-memory backend."""
    mapping = FlatDocumentMapping(backend=InMemoryAsyncBackend(), namespace="pages")
    try:
        mapping["home"] = {"title": "Home", "blocks": [{"type": "text", "tags": ["intro"]}]}
        print("home:", mapping["home"])
        print("stored fields:", mapping.get_flat("home"))
        print(f"{mapping=}")
    finally:
        mapping.close()


if __name__ == "__main__":
    main()
