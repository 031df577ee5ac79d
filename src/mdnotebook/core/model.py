from __future__ import annotations
from dataclasses import dataclass, field
from typing import Callable, Iterable, Union

NotebookId = str
PageId = str


@dataclass(frozen=True)
class TextBlock:
    text: str  # raw markdown-ish text, not parsed further


@dataclass(frozen=True)
class CodeBlock:
    lang: str  # free-form tag, may be ""
    code: str


@dataclass(frozen=True)
class TableBlock:
    rows: tuple[tuple[str, ...], ...] = ()

    def __post_init__(self) -> None:
        # accept lists from callers; rows may differ in length
        object.__setattr__(self, "rows", tuple(tuple(r) for r in self.rows))


@dataclass(frozen=True)
class CheckboxBlock:
    checked: bool
    label: str

    def toggled(self) -> CheckboxBlock:
        return CheckboxBlock(not self.checked, self.label)


@dataclass(frozen=True)
class FileBlock:
    url: str  # absolute string form of a validated URI


Block = Union[TextBlock, CodeBlock, TableBlock, CheckboxBlock, FileBlock]


def _move(items: list, src: int, dst: int) -> bool:
    n = len(items)
    if not (0 <= src < n and 0 <= dst < n):
        return False
    items.insert(dst, items.pop(src))
    return True


@dataclass
class Page:
    """
    Ordered blocks plus identity and title.

    Blocks are addressed by position; out-of-range positions are ignored and
    reported by a False return value.
    """

    id: PageId
    title: str
    content: list[Block] = field(default_factory=list)

    def rename(self, title: str) -> None:
        self.title = title

    def append_block(self, block: Block) -> None:
        self.content.append(block)

    def insert_block(self, index: int, block: Block) -> bool:
        if not 0 <= index <= len(self.content):
            return False
        self.content.insert(index, block)
        return True

    def move_block(self, src: int, dst: int) -> bool:
        return _move(self.content, src, dst)

    def replace_block(self, index: int, block: Block) -> bool:
        if not 0 <= index < len(self.content):
            return False
        self.content[index] = block
        return True

    def remove_block(self, index: int) -> bool:
        if not 0 <= index < len(self.content):
            return False
        del self.content[index]
        return True

    def remove_blocks(self, indices: Iterable[int]) -> int:
        drop = {i for i in indices if 0 <= i < len(self.content)}
        self.content = [b for i, b in enumerate(self.content) if i not in drop]
        return len(drop)

    def remove_blocks_where(self, predicate: Callable[[Block], bool]) -> int:
        before = len(self.content)
        self.content = [b for b in self.content if not predicate(b)]
        return before - len(self.content)


@dataclass
class Notebook:
    id: NotebookId
    title: str
    pages: list[Page] = field(default_factory=list)

    def rename(self, title: str) -> None:
        self.title = title

    def _index(self, page_id: PageId) -> int | None:
        for i, p in enumerate(self.pages):
            if p.id == page_id:
                return i
        return None

    def get_page(self, page_id: PageId) -> Page | None:
        i = self._index(page_id)
        return None if i is None else self.pages[i]

    def add_page(self, page: Page) -> None:
        self.pages.append(page)

    def insert_page(self, index: int, page: Page) -> bool:
        if not 0 <= index <= len(self.pages):
            return False
        self.pages.insert(index, page)
        return True

    def move_page(self, src: int, dst: int) -> bool:
        return _move(self.pages, src, dst)

    def replace_page(self, page: Page) -> bool:
        i = self._index(page.id)
        if i is None:
            return False
        self.pages[i] = page
        return True

    def remove_pages(self, page_ids: Iterable[PageId]) -> int:
        drop = set(page_ids)
        before = len(self.pages)
        self.pages = [p for p in self.pages if p.id not in drop]
        return before - len(self.pages)
