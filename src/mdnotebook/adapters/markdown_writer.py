from typing import Sequence

from ..core.model import (
    Block,
    CheckboxBlock,
    CodeBlock,
    FileBlock,
    TableBlock,
    TextBlock,
)
from ..core.ports import SerializerStrategy
from ..core.uri import display_name


def render_block(block: Block) -> list[str]:
    """Lines for one block, including its trailing blank line."""
    if isinstance(block, TextBlock):
        return [block.text, ""]
    if isinstance(block, CodeBlock):
        return [f"```{block.lang}", block.code, "```", ""]
    if isinstance(block, TableBlock):
        return ["| " + " | ".join(row) + " |" for row in block.rows] + [""]
    if isinstance(block, CheckboxBlock):
        mark = "x" if block.checked else " "
        return [f"- [{mark}] {block.label}", ""]
    if isinstance(block, FileBlock):
        return [f"[{display_name(block.url)}]({block.url})", ""]
    raise TypeError(f"Not a block: {block!r}")


class MarkdownWriter(SerializerStrategy):
    def render(self, blocks: Sequence[Block]) -> str:
        lines: list[str] = []
        for block in blocks:
            lines.extend(render_block(block))
        return "\n".join(lines)
