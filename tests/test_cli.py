import io
import json

import pytest

from kv_flatten.__main__ import main
from kv_flatten.errors import FlattenContractError


def test_cli_flatten_file(tmp_path, capsys: pytest.CaptureFixture[str]) -> None:
    source = tmp_path / "doc.json"
    source.write_text(json.dumps({"header": {"type": "image"}}))

    main(["flatten", str(source)])

    assert json.loads(capsys.readouterr().out) == {
        "header.type": "image",
        "_metadata": '{"header/type":["*/*"]}',
    }


def test_cli_unflatten_stdin(monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]) -> None:
    flat = {"blocks.title": ["A", "B"], "_metadata": '{"blocks/title":["*/0/*","*/1/*"]}'}
    monkeypatch.setattr("sys.stdin", io.StringIO(json.dumps(flat)))

    main(["unflatten"])

    assert json.loads(capsys.readouterr().out) == {"blocks": [{"title": "A"}, {"title": "B"}]}


def test_cli_custom_separators(tmp_path, capsys: pytest.CaptureFixture[str]) -> None:
    source = tmp_path / "doc.json"
    source.write_text(json.dumps({"a": [{"b": 1}]}))

    main(["flatten", "--field-separator", "_", "--metadata-key", "meta", str(source)])

    assert json.loads(capsys.readouterr().out) == {"a_b": [1], "meta": '{"a/b":["*/0/*"]}'}


def test_cli_rejects_invalid_configuration(tmp_path) -> None:
    source = tmp_path / "doc.json"
    source.write_text("{}")

    with pytest.raises(SystemExit):
        main(["flatten", "--field-separator", "/", str(source)])


def test_cli_rejects_non_object_input(tmp_path, capsys: pytest.CaptureFixture[str]) -> None:
    source = tmp_path / "doc.json"
    source.write_text("[1, 2]")

    with pytest.raises(SystemExit):
        main(["flatten", str(source)])
    assert "input must be a JSON object" in capsys.readouterr().err


def test_cli_version(capsys: pytest.CaptureFixture[str]) -> None:
    with pytest.raises(SystemExit):
        main(["--version"])
    assert capsys.readouterr().out.strip() == "0.1.0"


def test_cli_reports_unreadable_file(tmp_path, capsys: pytest.CaptureFixture[str]) -> None:
    with pytest.raises(SystemExit):
        main(["flatten", str(tmp_path / "missing.json")])
    assert "cannot read" in capsys.readouterr().err


def test_cli_rejects_documents_using_the_metadata_key(tmp_path) -> None:
    source = tmp_path / "doc.json"
    source.write_text(json.dumps({"_metadata": "note"}))

    with pytest.raises(FlattenContractError, match="reserved metadata key"):
        main(["flatten", str(source)])
