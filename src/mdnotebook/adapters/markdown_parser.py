import re

from ..core.model import (
    Block,
    CheckboxBlock,
    CodeBlock,
    FileBlock,
    TableBlock,
    TextBlock,
)
from ..core.ports import ParserStrategy
from ..core.uri import is_valid_uri

FENCE = "```"
CHECKBOX_PREFIX = "- ["
LINE_BREAK_RE = re.compile(r"\r\n|\r|\n")


def split_lines(text: str) -> list[str]:
    # CRLF and lone CR count as line breaks, like LF
    return LINE_BREAK_RE.split(text)


def parse_table_row(line: str) -> list[str]:
    """
    Split a table row on ``|`` and drop empty cells.

    Examples:
        >>> parse_table_row("| a | b |")
        ['a', 'b']
        >>> parse_table_row("|a||b|")
        ['a', 'b']
    """
    return [c.strip() for c in line.split("|") if c.strip()]


def parse_checkbox(line: str) -> CheckboxBlock | None:
    close = line.find("]")
    if close == -1:
        return None  # malformed item is dropped
    return CheckboxBlock(checked="[x]" in line, label=line[close + 1 :].strip())


def parse_link(line: str) -> Block:
    """
    Read ``[label](uri)``: label up to the first ``]``, uri from the first
    ``(`` to the last ``)``. Out-of-order brackets give the raw line back.

    Examples:
        >>> parse_link("[a.pdf](https://example.com/a(1).pdf)")
        FileBlock(url='https://example.com/a(1).pdf')
        >>> parse_link("[a(b](https://example.com/f.pdf)")
        TextBlock(text='[a(b](https://example.com/f.pdf)')
    """
    close_b = line.find("]")
    open_p = line.find("(")
    close_p = line.rfind(")")
    if not -1 < close_b < open_p < close_p:
        return TextBlock(line)
    label = line[1:close_b]
    url = line[open_p + 1 : close_p]
    if not is_valid_uri(url):
        return TextBlock(label)
    return FileBlock(url)


def _is_table_line(line: str) -> bool:
    return line.strip().startswith("|")


class MarkdownParser(ParserStrategy):
    """
    Line-oriented, single-pass parser. Recognition order per line:
    fence, table, checkbox, file link, blank, text.
    """

    def parse(self, text: str) -> list[Block]:
        lines = split_lines(text)
        blocks: list[Block] = []
        i = 0
        n = len(lines)

        while i < n:
            line = lines[i]

            if line.startswith(FENCE):
                lang = line[len(FENCE) :]
                code_lines = []
                i += 1
                while i < n and not lines[i].startswith(FENCE):
                    code_lines.append(lines[i])
                    i += 1
                # an unterminated fence runs to end of input
                blocks.append(CodeBlock(lang=lang, code="\n".join(code_lines)))
                i += 1
                continue

            if _is_table_line(line):
                rows = []
                while i < n and _is_table_line(lines[i]):
                    rows.append(parse_table_row(lines[i]))
                    i += 1
                blocks.append(TableBlock(rows))
                continue

            if line.startswith(CHECKBOX_PREFIX):
                item = parse_checkbox(line)
                if item is not None:
                    blocks.append(item)
            elif line.startswith("[") and "](" in line:
                blocks.append(parse_link(line))
            elif line.strip():
                blocks.append(TextBlock(line))

            i += 1

        return blocks
