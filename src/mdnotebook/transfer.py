"""Markdown file import and export for single pages."""

from pathlib import Path

from .adapters.yaml_codec import YamlFrontmatter
from .core.model import Page
from .core.ports import IdGenerator, ParserStrategy, SerializerStrategy


def extract_title(text: str) -> str | None:
    """
    Title from the first line starting with ``#``.

    Leading and trailing ``#`` and spaces are trimmed, so ``"## Plan ##"``
    gives ``"Plan"``. Returns None when no such line exists.
    """
    for line in text.splitlines():
        if line.startswith("#"):
            return line.strip("# ")
    return None


def page_from_markdown(
    text: str,
    fallback_title: str,
    parser: ParserStrategy,
    idgen: IdGenerator,
    fm: YamlFrontmatter | None = None,
) -> Page:
    """
    Build a new page from markdown text.

    Title precedence: front matter ``title``, first heading, ``fallback_title``.
    A front matter ``id`` is ignored; imported pages always get a fresh id.
    """
    fm = fm or YamlFrontmatter()
    meta, body = fm.decode(text)
    title = meta.get("title")
    if not isinstance(title, str) or not title.strip():
        title = extract_title(body) or fallback_title
    return Page(id=idgen.new_id(), title=title, content=parser.parse(body))


def import_markdown(
    path: Path,
    parser: ParserStrategy,
    idgen: IdGenerator,
    fm: YamlFrontmatter | None = None,
) -> Page:
    text = path.read_text(encoding="utf-8")
    return page_from_markdown(text, path.stem, parser, idgen, fm)


def export_markdown(
    page: Page,
    writer: SerializerStrategy,
    front_matter: bool = False,
    fm: YamlFrontmatter | None = None,
) -> str:
    body = writer.render(page.content)
    if not front_matter:
        return body
    fm = fm or YamlFrontmatter()
    return fm.encode({"id": page.id, "title": page.title}) + body
