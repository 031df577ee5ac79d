"""Runtime wiring helper for CLI and API."""

from dataclasses import dataclass
from pathlib import Path

from .adapters.idgen import HexId
from .adapters.json_storage import JsonFileStorage
from .adapters.markdown_parser import MarkdownParser
from .adapters.markdown_writer import MarkdownWriter
from .adapters.yaml_codec import YamlFrontmatter
from .config import NotebookConfig, load_config
from .core.model import NotebookId, PageId
from .core.session import EditSession
from .core.store import NotebookStore


@dataclass
class Runtime:
    """Container for all wired components."""
    store: NotebookStore
    parser: MarkdownParser
    writer: MarkdownWriter
    frontmatter: YamlFrontmatter
    idgen: HexId
    config: NotebookConfig

    def edit(self, notebook_id: NotebookId, page_id: PageId) -> EditSession | None:
        return self.store.begin_edit(notebook_id, page_id, self.parser, self.writer)


def build_runtime(
    data_path: Path | None = None,
    config_path: Path | None = None,
) -> Runtime:
    """Build and wire all components for a notebook collection."""
    config = load_config(config_path=config_path, data_path=data_path)

    if data_path is None:
        data_path = config.store.path

    idgen = HexId(nbytes=config.id.bytes)
    storage = JsonFileStorage(data_path)
    store = NotebookStore(storage, idgen, config.defaults)

    return Runtime(
        store=store,
        parser=MarkdownParser(),
        writer=MarkdownWriter(),
        frontmatter=YamlFrontmatter(),
        idgen=idgen,
        config=config,
    )
