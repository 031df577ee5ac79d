"""Copy-on-edit sessions over a single page."""

from __future__ import annotations

from enum import Enum
from typing import TYPE_CHECKING, Callable, Iterable

from .model import Block, NotebookId, Page
from .ports import ParserStrategy, SerializerStrategy

if TYPE_CHECKING:
    from .store import NotebookStore


class EditMode(str, Enum):
    RENDERED = "rendered"  # block-level editing
    RAW = "raw"  # free text, converted on mode switch and commit


class EditSession:
    """
    Edits a private copy of a page; the store sees nothing until ``commit``.

    In raw mode the text buffer is authoritative and block edits are refused;
    in rendered mode the block list is.
    """

    def __init__(
        self,
        store: NotebookStore,
        notebook_id: NotebookId,
        page: Page,
        parser: ParserStrategy,
        writer: SerializerStrategy,
    ):
        self.store = store
        self.notebook_id = notebook_id
        self.page = page
        self.parser = parser
        self.writer = writer
        self.mode = EditMode.RENDERED
        self.raw = writer.render(page.content)
        self.closed = False

    @property
    def blocks(self) -> list[Block]:
        return self.page.content

    def set_mode(self, mode: EditMode) -> None:
        if mode == self.mode:
            return
        if mode == EditMode.RAW:
            self.raw = self.writer.render(self.page.content)
        else:
            self.page.content = self.parser.parse(self.raw)
        self.mode = mode

    def set_raw(self, text: str) -> None:
        self.set_mode(EditMode.RAW)
        self.raw = text

    def set_blocks(self, blocks: Iterable[Block]) -> None:
        self.set_mode(EditMode.RENDERED)
        self.page.content = list(blocks)

    # Block edits (rendered mode only)

    def _rendered(self) -> bool:
        return not self.closed and self.mode == EditMode.RENDERED

    def insert_block(self, index: int, block: Block) -> bool:
        return self._rendered() and self.page.insert_block(index, block)

    def append_block(self, block: Block) -> bool:
        if not self._rendered():
            return False
        self.page.append_block(block)
        return True

    def move_block(self, src: int, dst: int) -> bool:
        return self._rendered() and self.page.move_block(src, dst)

    def replace_block(self, index: int, block: Block) -> bool:
        return self._rendered() and self.page.replace_block(index, block)

    def remove_block(self, index: int) -> bool:
        return self._rendered() and self.page.remove_block(index)

    def remove_blocks(self, indices: Iterable[int]) -> int:
        if not self._rendered():
            return 0
        return self.page.remove_blocks(indices)

    def remove_blocks_where(self, predicate: Callable[[Block], bool]) -> int:
        if not self._rendered():
            return 0
        return self.page.remove_blocks_where(predicate)

    def rename(self, title: str) -> None:
        self.page.rename(title)

    # Lifecycle

    def commit(self) -> bool:
        """Write the edited copy back through the store. False if nothing was written."""
        if self.closed:
            return False
        if self.mode == EditMode.RAW:
            self.page.content = self.parser.parse(self.raw)
        self.closed = True
        return self.store.update_page(self.notebook_id, self.page)

    def discard(self) -> None:
        self.closed = True
