"""Tagged-record encoding of blocks, pages and notebooks.

The records are plain dicts ready for ``json.dumps``:

    {"type": "text",     "text": str}
    {"type": "code",     "lang": str, "code": str}
    {"type": "table",    "rows": [[str]]}
    {"type": "checkbox", "checked": bool, "label": str}
    {"type": "file",     "url": str}
"""

from typing import Any

from .model import (
    Block,
    CheckboxBlock,
    CodeBlock,
    FileBlock,
    Notebook,
    Page,
    TableBlock,
    TextBlock,
)
from .uri import is_valid_uri


class CodecError(ValueError):
    """A record does not have the expected shape."""


def block_to_record(block: Block) -> dict[str, Any]:
    if isinstance(block, TextBlock):
        return {"type": "text", "text": block.text}
    if isinstance(block, CodeBlock):
        return {"type": "code", "lang": block.lang, "code": block.code}
    if isinstance(block, TableBlock):
        return {"type": "table", "rows": [list(r) for r in block.rows]}
    if isinstance(block, CheckboxBlock):
        return {"type": "checkbox", "checked": block.checked, "label": block.label}
    if isinstance(block, FileBlock):
        return {"type": "file", "url": block.url}
    raise CodecError(f"Not a block: {block!r}")


def _field(rec: dict[str, Any], key: str, kind: type) -> Any:
    if key not in rec:
        raise CodecError(f"Missing field {key!r} in {rec.get('type')!r} block")
    val = rec[key]
    if not isinstance(val, kind):
        raise CodecError(f"Field {key!r} must be {kind.__name__}, got {type(val).__name__}")
    return val


def block_from_record(rec: Any) -> Block:
    """
    Decode one block record.

    A file record whose URL is not a valid URI becomes a text block describing
    the problem instead of failing the whole load.
    """
    if not isinstance(rec, dict):
        raise CodecError(f"Block record must be an object, got {type(rec).__name__}")
    kind = rec.get("type")
    if kind == "text":
        return TextBlock(_field(rec, "text", str))
    if kind == "code":
        return CodeBlock(_field(rec, "lang", str), _field(rec, "code", str))
    if kind == "table":
        rows = _field(rec, "rows", list)
        if not all(isinstance(r, list) and all(isinstance(c, str) for c in r) for r in rows):
            raise CodecError("Table rows must be lists of strings")
        return TableBlock(rows)
    if kind == "checkbox":
        return CheckboxBlock(_field(rec, "checked", bool), _field(rec, "label", str))
    if kind == "file":
        url = _field(rec, "url", str)
        if not is_valid_uri(url):
            return TextBlock(f"Invalid URL: {url}")
        return FileBlock(url)
    raise CodecError(f"Unknown block type: {kind!r}")


def page_to_record(page: Page) -> dict[str, Any]:
    return {
        "id": page.id,
        "title": page.title,
        "content": [block_to_record(b) for b in page.content],
    }


def page_from_record(rec: Any) -> Page:
    if not isinstance(rec, dict):
        raise CodecError("Page record must be an object")
    return Page(
        id=_field(rec, "id", str),
        title=_field(rec, "title", str),
        content=[block_from_record(b) for b in _field(rec, "content", list)],
    )


def notebook_to_record(nb: Notebook) -> dict[str, Any]:
    return {
        "id": nb.id,
        "title": nb.title,
        "pages": [page_to_record(p) for p in nb.pages],
    }


def notebook_from_record(rec: Any) -> Notebook:
    if not isinstance(rec, dict):
        raise CodecError("Notebook record must be an object")
    return Notebook(
        id=_field(rec, "id", str),
        title=_field(rec, "title", str),
        pages=[page_from_record(p) for p in _field(rec, "pages", list)],
    )


def collection_to_records(notebooks: list[Notebook]) -> list[dict[str, Any]]:
    return [notebook_to_record(nb) for nb in notebooks]


def collection_from_records(data: Any) -> list[Notebook]:
    if not isinstance(data, list):
        raise CodecError("Collection must be a list of notebooks")
    return [notebook_from_record(rec) for rec in data]
