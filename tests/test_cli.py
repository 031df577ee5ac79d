"""Tests for the mdnb CLI."""

import io
import json
import os
import tempfile
from pathlib import Path

import pytest

from mdnotebook.cli import main


@pytest.fixture
def data():
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir) / "NotebooksData.json"


def run(data: Path, *argv: str, capsys=None) -> tuple[int, str, str]:
    with pytest.raises(SystemExit) as exc:
        main(["--data", str(data), *argv])
    out, err = capsys.readouterr() if capsys else ("", "")
    return exc.value.code, out, err


def new_page(data, capsys) -> tuple[str, str]:
    _, out, _ = run(data, "nb", "new", "Work", capsys=capsys)
    nb = out.strip()
    _, out, _ = run(data, "page", "new", nb, "--title", "Plan", capsys=capsys)
    return nb, out.strip()


def test_version(capsys):
    with pytest.raises(SystemExit) as exc:
        main(["--version"])
    assert exc.value.code == 0
    assert "mdnotebook" in capsys.readouterr().out


def test_notebook_lifecycle(data, capsys):
    """Test create, list, rename and delete."""
    code, out, _ = run(data, "nb", "new", "Work", capsys=capsys)
    assert code == 0
    nb = out.strip()

    code, out, _ = run(data, "--json", "ls", capsys=capsys)
    assert json.loads(out) == [{"id": nb, "title": "Work", "pages": 0}]

    assert run(data, "nb", "rename", nb, "Job", capsys=capsys)[0] == 0
    _, out, _ = run(data, "ls", capsys=capsys)
    assert "Job" in out

    _, out, _ = run(data, "nb", "rm", nb, "unknown", capsys=capsys)
    assert "Removed 1 notebook(s)" in out
    _, out, _ = run(data, "--json", "ls", capsys=capsys)
    assert json.loads(out) == []


def test_unknown_notebook_exits_nonzero(data, capsys):
    code, _, err = run(data, "nb", "rename", "nope", "X", capsys=capsys)
    assert code == 1
    assert "not found" in err


def test_new_page_has_placeholder(data, capsys):
    nb, pg = new_page(data, capsys)
    _, out, _ = run(data, "page", "show", nb, pg, capsys=capsys)
    assert out == "Empty content...\n\n"

    _, out, _ = run(data, "--json", "pages", nb, capsys=capsys)
    assert json.loads(out) == [{"id": pg, "title": "Plan", "blocks": 1}]


def test_page_set_from_stdin(data, capsys, monkeypatch):
    """Raw markdown replaces the page blocks."""
    nb, pg = new_page(data, capsys)
    monkeypatch.setattr("sys.stdin", io.StringIO("- [x] Buy milk\n| a | b |\n"))
    assert run(data, "page", "set", nb, pg, "-", capsys=capsys)[0] == 0

    _, out, _ = run(data, "--json", "page", "blocks", nb, pg, capsys=capsys)
    assert json.loads(out) == [
        {"type": "checkbox", "checked": True, "label": "Buy milk"},
        {"type": "table", "rows": [["a", "b"]]},
    ]


def test_block_commands(data, capsys):
    nb, pg = new_page(data, capsys)
    assert run(data, "block", "add", nb, pg, "checkbox", "Call", "mom", capsys=capsys)[0] == 0
    assert run(data, "block", "add", nb, pg, "code", "go", "fmt.Println(1)", "--at", "0", capsys=capsys)[0] == 0
    assert run(data, "block", "add", nb, pg, "table", "a|b", "c", capsys=capsys)[0] == 0
    assert run(data, "block", "add", nb, pg, "file", "https://example.com/r.pdf", capsys=capsys)[0] == 0
    assert run(data, "block", "toggle", nb, pg, "2", capsys=capsys)[0] == 0
    assert run(data, "block", "mv", nb, pg, "1", "4", capsys=capsys)[0] == 0

    _, out, _ = run(data, "page", "show", nb, pg, capsys=capsys)
    assert out == "\n".join([
        "```go",
        "fmt.Println(1)",
        "```",
        "",
        "- [x] Call mom",
        "",
        "| a | b |",
        "| c |",
        "",
        "[r.pdf](https://example.com/r.pdf)",
        "",
        "Empty content...",
        "",
    ]) + "\n"

    _, out, _ = run(data, "block", "rm", nb, pg, "0", "4", "99", capsys=capsys)
    assert "Removed 2 block(s)" in out


def test_block_errors(data, capsys):
    nb, pg = new_page(data, capsys)
    assert run(data, "block", "toggle", nb, pg, "0", capsys=capsys)[0] == 1
    assert run(data, "block", "mv", nb, pg, "0", "7", capsys=capsys)[0] == 1
    assert run(data, "block", "add", nb, pg, "file", "not a uri", capsys=capsys)[0] == 1
    assert run(data, "block", "add", nb, "nope", "text", "x", capsys=capsys)[0] == 1


def test_import_and_export(data, capsys):
    nb, pg = new_page(data, capsys)
    src = data.parent / "trip.md"
    src.write_text("# Trip\n\n- [ ] passport\n", encoding="utf-8")

    code, out, _ = run(data, "page", "import", nb, str(src), capsys=capsys)
    assert code == 0
    imported_id, title = out.split(None, 1)
    assert title.strip() == "Trip"

    dest = data.parent / "out.md"
    run(data, "page", "export", nb, imported_id, "-o", str(dest), "--front-matter", capsys=capsys)
    text = dest.read_text(encoding="utf-8")
    assert text.startswith("---\n")
    assert "\ntitle: Trip\n---\n" in text
    assert text.endswith("# Trip\n\n- [ ] passport\n")


def test_page_rm(data, capsys):
    nb, pg = new_page(data, capsys)
    _, out, _ = run(data, "page", "rm", nb, pg, capsys=capsys)
    assert "Removed 1 page(s)" in out
    _, out, _ = run(data, "--json", "ls", capsys=capsys)
    assert json.loads(out)[0]["pages"] == 0


def test_block_rm_without_matches_does_not_save(data, capsys):
    """Removing nothing leaves the data file untouched."""
    nb, pg = new_page(data, capsys)
    os.utime(data, (0, 0))
    _, out, _ = run(data, "block", "rm", nb, pg, "7", capsys=capsys)
    assert "Removed 0 block(s)" in out
    assert data.stat().st_mtime == 0

    run(data, "block", "rm", nb, pg, "0", capsys=capsys)
    assert data.stat().st_mtime > 0
