from typing import Protocol, Sequence
from .model import Block, Notebook


class CollectionStorage(Protocol):
    """
    Whole-collection persistence: the notebook list is loaded and saved as one unit.
    """

    def load(self) -> list[Notebook] | None:
        """Return the stored collection, or None when nothing is stored yet."""
        pass

    def save(self, notebooks: list[Notebook]) -> bool:
        pass


class ParserStrategy(Protocol):
    """
    Turn markdown-ish text into blocks. MUST NOT raise on malformed input.
    """

    def parse(self, text: str) -> list[Block]:
        pass


class SerializerStrategy(Protocol):
    """
    Render blocks back to text; total and deterministic.
    """

    def render(self, blocks: Sequence[Block]) -> str:
        pass


class IdGenerator(Protocol):
    def new_id(self) -> str:
        pass
