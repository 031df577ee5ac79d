from __future__ import annotations

import copy
import logging
from collections.abc import Iterable
from dataclasses import dataclass

from .model import Notebook, NotebookId, Page, PageId, TextBlock
from .ports import CollectionStorage, IdGenerator, ParserStrategy, SerializerStrategy
from .session import EditSession

logger = logging.getLogger(__name__)


@dataclass
class Defaults:
    """Titles and placeholder content for newly created notebooks and pages."""
    notebook_title: str = "New Notebook"
    page_title: str = "New Page"
    page_placeholder: str = "Empty content..."


class NotebookStore:
    """
    Owns the notebook collection and persists all of it after every change.

    Missing ids are not errors: the mutation is skipped, nothing is saved and
    the method returns False (or None for creators).
    """

    def __init__(
        self,
        storage: CollectionStorage,
        idgen: IdGenerator,
        defaults: Defaults | None = None,
    ):
        self.storage = storage
        self.idgen = idgen
        self.defaults = defaults or Defaults()
        self.notebooks: list[Notebook] = storage.load() or []

    def save(self) -> bool:
        ok = self.storage.save(self.notebooks)
        if not ok:
            logger.warning("Save failed; keeping %d notebooks in memory", len(self.notebooks))
        return ok

    # Lookups

    def _index(self, notebook_id: NotebookId) -> int | None:
        for i, nb in enumerate(self.notebooks):
            if nb.id == notebook_id:
                return i
        return None

    def get_notebook(self, notebook_id: NotebookId) -> Notebook | None:
        i = self._index(notebook_id)
        return None if i is None else self.notebooks[i]

    def get_page(self, notebook_id: NotebookId, page_id: PageId) -> Page | None:
        nb = self.get_notebook(notebook_id)
        return None if nb is None else nb.get_page(page_id)

    # Notebook-level mutations

    def add_notebook(self, notebook: Notebook) -> None:
        self.notebooks.append(notebook)
        self.save()

    def create_notebook(self, title: str | None = None) -> Notebook:
        nb = Notebook(id=self.idgen.new_id(), title=title or self.defaults.notebook_title)
        self.add_notebook(nb)
        return nb

    def remove_notebooks(self, notebook_ids: Iterable[NotebookId]) -> int:
        drop = set(notebook_ids)
        before = len(self.notebooks)
        self.notebooks = [nb for nb in self.notebooks if nb.id not in drop]
        removed = before - len(self.notebooks)
        if removed:
            self.save()
        return removed

    def rename_notebook(self, notebook_id: NotebookId, title: str) -> bool:
        nb = self.get_notebook(notebook_id)
        if nb is None:
            return False
        nb.rename(title)
        self.save()
        return True

    def update_notebook(self, notebook: Notebook) -> bool:
        i = self._index(notebook.id)
        if i is None:
            return False
        self.notebooks[i] = notebook
        self.save()
        return True

    # Page-level mutations

    def add_page(self, notebook_id: NotebookId, title: str | None = None) -> Page | None:
        nb = self.get_notebook(notebook_id)
        if nb is None:
            return None
        page = Page(
            id=self.idgen.new_id(),
            title=title or self.defaults.page_title,
            content=[TextBlock(self.defaults.page_placeholder)],
        )
        nb.add_page(page)
        self.save()
        return page

    def insert_page(self, notebook_id: NotebookId, page: Page, index: int | None = None) -> bool:
        """Add an already-built page; appended unless an index is given."""
        nb = self.get_notebook(notebook_id)
        if nb is None:
            return False
        if index is None:
            nb.add_page(page)
        elif not nb.insert_page(index, page):
            return False
        self.save()
        return True

    def update_page(self, notebook_id: NotebookId, page: Page) -> bool:
        nb = self.get_notebook(notebook_id)
        if nb is None or not nb.replace_page(page):
            return False
        self.save()
        return True

    def rename_page(self, notebook_id: NotebookId, page_id: PageId, title: str) -> bool:
        page = self.get_page(notebook_id, page_id)
        if page is None:
            return False
        page.rename(title)
        self.save()
        return True

    def remove_pages(self, notebook_id: NotebookId, page_ids: Iterable[PageId]) -> int:
        nb = self.get_notebook(notebook_id)
        if nb is None:
            return 0
        removed = nb.remove_pages(page_ids)
        if removed:
            self.save()
        return removed

    def begin_edit(
        self,
        notebook_id: NotebookId,
        page_id: PageId,
        parser: ParserStrategy,
        writer: SerializerStrategy,
    ) -> EditSession | None:
        """Open an editing session on a private copy of the page."""
        page = self.get_page(notebook_id, page_id)
        if page is None:
            return None
        return EditSession(self, notebook_id, copy.deepcopy(page), parser, writer)
