"""Tests for the notebook store."""

import copy
import itertools
import tempfile
from pathlib import Path

from mdnotebook.adapters.json_storage import JsonFileStorage
from mdnotebook.core.model import Notebook, Page, TextBlock
from mdnotebook.core.store import Defaults, NotebookStore


class MemoryStorage:
    """Collection storage that records every save."""

    def __init__(self, initial=None, fail=False):
        self.initial = initial
        self.fail = fail
        self.saves: list[list[Notebook]] = []

    def load(self):
        return copy.deepcopy(self.initial)

    def save(self, notebooks):
        self.saves.append(copy.deepcopy(notebooks))
        return not self.fail


class CountingId:
    def __init__(self):
        self._n = itertools.count(1)

    def new_id(self) -> str:
        return f"id{next(self._n)}"


def seeded() -> list[Notebook]:
    return [
        Notebook(id="n1", title="One", pages=[Page(id="p1", title="P1", content=[TextBlock("x")])]),
        Notebook(id="n2", title="Two"),
    ]


def make_store(initial=None, fail=False):
    storage = MemoryStorage(initial, fail)
    return NotebookStore(storage, CountingId()), storage


def test_starts_empty_without_stored_data():
    store, storage = make_store()
    assert store.notebooks == []
    assert storage.saves == []


def test_loads_stored_collection():
    store, _ = make_store(seeded())
    assert [nb.id for nb in store.notebooks] == ["n1", "n2"]


def test_create_notebook_uses_defaults_and_saves():
    store, storage = make_store()
    nb = store.create_notebook()
    assert nb.title == "New Notebook"
    assert nb.pages == []
    assert len(storage.saves) == 1
    assert storage.saves[0][0].id == nb.id


def test_add_page_has_placeholder_content():
    store, storage = make_store(seeded())
    page = store.add_page("n2")
    assert page.title == "New Page"
    assert page.content == [TextBlock("Empty content...")]
    assert store.get_page("n2", page.id) is page
    assert len(storage.saves) == 1


def test_custom_defaults():
    storage = MemoryStorage(seeded())
    store = NotebookStore(storage, CountingId(), Defaults("NB", "PG", "..."))
    assert store.create_notebook().title == "NB"
    assert store.add_page("n1").content == [TextBlock("...")]


def test_update_page_on_missing_notebook_is_noop():
    """Unknown notebook id: collection unchanged, nothing raised, nothing saved."""
    store, storage = make_store(seeded())
    before = copy.deepcopy(store.notebooks)
    assert store.update_page("missing", Page(id="p1", title="changed")) is False
    assert store.notebooks == before
    assert storage.saves == []


def test_update_page_on_missing_page_is_noop():
    store, storage = make_store(seeded())
    assert store.update_page("n1", Page(id="nope", title="?")) is False
    assert storage.saves == []


def test_update_page_replaces_and_saves():
    store, storage = make_store(seeded())
    assert store.update_page("n1", Page(id="p1", title="New", content=[TextBlock("y")]))
    assert store.get_page("n1", "p1").content == [TextBlock("y")]
    assert storage.saves[-1][0].pages[0].title == "New"


def test_update_notebook():
    store, storage = make_store(seeded())
    assert store.update_notebook(Notebook(id="n2", title="Renamed"))
    assert store.get_notebook("n2").title == "Renamed"
    assert not store.update_notebook(Notebook(id="zz", title="?"))
    assert len(storage.saves) == 1


def test_rename_notebook_and_page():
    store, storage = make_store(seeded())
    assert store.rename_notebook("n1", "Uno")
    assert store.rename_page("n1", "p1", "First")
    assert not store.rename_notebook("zz", "?")
    assert not store.rename_page("n1", "zz", "?")
    assert store.get_notebook("n1").title == "Uno"
    assert store.get_page("n1", "p1").title == "First"
    assert len(storage.saves) == 2


def test_remove_notebooks():
    store, storage = make_store(seeded())
    assert store.remove_notebooks(["n1", "missing"]) == 1
    assert [nb.id for nb in store.notebooks] == ["n2"]
    assert store.remove_notebooks(["missing"]) == 0
    assert len(storage.saves) == 1


def test_removing_every_page_keeps_notebook():
    store, _ = make_store(seeded())
    assert store.remove_pages("n1", ["p1"]) == 1
    nb = store.get_notebook("n1")
    assert nb is not None
    assert nb.pages == []


def test_remove_pages_from_missing_notebook():
    store, storage = make_store(seeded())
    assert store.remove_pages("zz", ["p1"]) == 0
    assert storage.saves == []


def test_insert_page_appends_or_places_at_index():
    store, storage = make_store(seeded())
    assert store.insert_page("n1", Page(id="p2", title="P2"))
    assert store.insert_page("n1", Page(id="p0", title="P0"), index=0)
    assert [p.id for p in store.get_notebook("n1").pages] == ["p0", "p1", "p2"]
    assert len(storage.saves) == 2


def test_insert_page_noops_do_not_save():
    store, storage = make_store(seeded())
    assert not store.insert_page("zz", Page(id="p2", title="P2"))
    assert not store.insert_page("n1", Page(id="p2", title="P2"), index=5)
    assert [p.id for p in store.get_notebook("n1").pages] == ["p1"]
    assert storage.saves == []


def test_failed_save_keeps_memory_state():
    store, storage = make_store(seeded(), fail=True)
    nb = store.create_notebook("Kept")
    assert store.get_notebook(nb.id) is nb
    assert len(storage.saves) == 1


def test_store_persists_across_instances():
    with tempfile.TemporaryDirectory() as tmpdir:
        path = Path(tmpdir) / "NotebooksData.json"
        store = NotebookStore(JsonFileStorage(path), CountingId())
        nb = store.create_notebook("Journal")
        page = store.add_page(nb.id, "Monday")

        reopened = NotebookStore(JsonFileStorage(path), CountingId())
        assert reopened.get_notebook(nb.id).title == "Journal"
        assert reopened.get_page(nb.id, page.id).content == [TextBlock("Empty content...")]
