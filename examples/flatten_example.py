"""Minimal example flattening a document and restoring it."""

from kv_flatten import FlattenMarshaller


def main() -> None:
    """Flatten a document with list-of-map fields, then unflatten it."""
    marshaller = FlattenMarshaller()
    document = {
        "id": 1,
        "title": "Title",
        "blocks": [
            {"title": "Title 1", "tags": ["UI", "UX"]},
            {"title": "Title 2", "tags": ["Tech"]},
        ],
    }

    flat = marshaller.flatten(document)
    print("flat:", flat)

    restored = marshaller.unflatten(flat)
    print("restored:", restored)
    assert restored == document  # noqa: S101


if __name__ == "__main__":
    main()
