"""CLI for mdnotebook - block-structured markdown notebooks."""

import argparse
import json
import logging
import os
import platform
import subprocess
import sys
import tempfile
from pathlib import Path
from typing import Any

from . import __version__
from .adapters.markdown_parser import parse_table_row
from .core.codec import block_to_record
from .core.model import (
    Block,
    CheckboxBlock,
    CodeBlock,
    FileBlock,
    TableBlock,
    TextBlock,
)
from .core.uri import to_uri
from .runtime import build_runtime
from .transfer import export_markdown, import_markdown


def _not_found(what: str) -> int:
    print(f"Error: {what} not found", file=sys.stderr)
    return 1


def _read_input(source: str) -> str:
    if source == "-":
        return sys.stdin.read()
    return Path(source).read_text(encoding="utf-8")


def cmd_ls(args: argparse.Namespace, rt: Any) -> int:
    """List notebooks."""
    rows = [
        {"id": nb.id, "title": nb.title, "pages": len(nb.pages)}
        for nb in rt.store.notebooks
    ]
    if args.json:
        print(json.dumps(rows, indent=2, ensure_ascii=False))
    else:
        for r in rows:
            print(f"{r['id']}  {r['title']}  ({r['pages']} pages)")
    return 0


def cmd_nb_new(args: argparse.Namespace, rt: Any) -> int:
    """Create a notebook."""
    nb = rt.store.create_notebook(args.title)
    if not args.quiet:
        print(nb.id)
    return 0


def cmd_nb_rename(args: argparse.Namespace, rt: Any) -> int:
    if not rt.store.rename_notebook(args.notebook, args.title):
        return _not_found(f"Notebook {args.notebook}")
    return 0


def cmd_nb_rm(args: argparse.Namespace, rt: Any) -> int:
    """Delete notebooks; unknown ids are skipped."""
    removed = rt.store.remove_notebooks(args.notebooks)
    if not args.quiet:
        print(f"Removed {removed} notebook(s)")
    return 0


def cmd_pages(args: argparse.Namespace, rt: Any) -> int:
    """List pages of a notebook."""
    nb = rt.store.get_notebook(args.notebook)
    if nb is None:
        return _not_found(f"Notebook {args.notebook}")
    rows = [{"id": p.id, "title": p.title, "blocks": len(p.content)} for p in nb.pages]
    if args.json:
        print(json.dumps(rows, indent=2, ensure_ascii=False))
    else:
        for r in rows:
            print(f"{r['id']}  {r['title']}  ({r['blocks']} blocks)")
    return 0


def cmd_page_new(args: argparse.Namespace, rt: Any) -> int:
    page = rt.store.add_page(args.notebook, args.title)
    if page is None:
        return _not_found(f"Notebook {args.notebook}")
    if not args.quiet:
        print(page.id)
    return 0


def cmd_page_rename(args: argparse.Namespace, rt: Any) -> int:
    if not rt.store.rename_page(args.notebook, args.page, args.title):
        return _not_found(f"Page {args.notebook}/{args.page}")
    return 0


def cmd_page_rm(args: argparse.Namespace, rt: Any) -> int:
    if rt.store.get_notebook(args.notebook) is None:
        return _not_found(f"Notebook {args.notebook}")
    removed = rt.store.remove_pages(args.notebook, args.pages)
    if not args.quiet:
        print(f"Removed {removed} page(s)")
    return 0


def cmd_page_show(args: argparse.Namespace, rt: Any) -> int:
    """Print a page as markdown."""
    page = rt.store.get_page(args.notebook, args.page)
    if page is None:
        return _not_found(f"Page {args.notebook}/{args.page}")
    print(rt.writer.render(page.content))
    return 0


def cmd_page_blocks(args: argparse.Namespace, rt: Any) -> int:
    """Print the blocks of a page, one per line, with their positions."""
    page = rt.store.get_page(args.notebook, args.page)
    if page is None:
        return _not_found(f"Page {args.notebook}/{args.page}")
    records = [block_to_record(b) for b in page.content]
    if args.json:
        print(json.dumps(records, indent=2, ensure_ascii=False))
    else:
        for i, rec in enumerate(records):
            kind = rec.pop("type")
            print(f"{i:>3}  {kind:<8}  {json.dumps(rec, ensure_ascii=False)}")
    return 0


def _commit_raw(rt: Any, notebook_id: str, page_id: str, text: str) -> int:
    session = rt.edit(notebook_id, page_id)
    if session is None:
        return _not_found(f"Page {notebook_id}/{page_id}")
    session.set_raw(text)
    if not session.commit():
        return 1
    return 0


def cmd_page_set(args: argparse.Namespace, rt: Any) -> int:
    """Replace page content with parsed markdown from a file or stdin."""
    return _commit_raw(rt, args.notebook, args.page, _read_input(args.source))


def cmd_page_edit(args: argparse.Namespace, rt: Any) -> int:
    """Open the page as markdown in $EDITOR and commit the result."""
    page = rt.store.get_page(args.notebook, args.page)
    if page is None:
        return _not_found(f"Page {args.notebook}/{args.page}")

    editor = os.environ.get("EDITOR", "vi")
    fd, tmp_name = tempfile.mkstemp(suffix=".md")
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            f.write(rt.writer.render(page.content))
        result = subprocess.run([editor, tmp_name])
        if result.returncode != 0:
            print(f"Error: editor exited with {result.returncode}", file=sys.stderr)
            return 1
        text = Path(tmp_name).read_text(encoding="utf-8")
    finally:
        os.unlink(tmp_name)
    return _commit_raw(rt, args.notebook, args.page, text)


def cmd_page_import(args: argparse.Namespace, rt: Any) -> int:
    """Import markdown files as new pages."""
    if rt.store.get_notebook(args.notebook) is None:
        return _not_found(f"Notebook {args.notebook}")
    for src in args.files:
        page = import_markdown(Path(src), rt.parser, rt.idgen, rt.frontmatter)
        rt.store.insert_page(args.notebook, page)
        if not args.quiet:
            print(f"{page.id}  {page.title}")
    return 0


def cmd_page_export(args: argparse.Namespace, rt: Any) -> int:
    page = rt.store.get_page(args.notebook, args.page)
    if page is None:
        return _not_found(f"Page {args.notebook}/{args.page}")
    text = export_markdown(page, rt.writer, front_matter=args.front_matter, fm=rt.frontmatter)
    if args.output:
        Path(args.output).write_text(text, encoding="utf-8")
    else:
        print(text)
    return 0


def _build_block(args: argparse.Namespace) -> Block | None:
    values = args.values
    if args.kind == "text":
        return TextBlock(" ".join(values))
    if args.kind == "code":
        if not values:
            return None
        lang, rest = values[0], values[1:]
        source = _read_input(rest[0]) if rest == ["-"] else "\n".join(rest)
        return CodeBlock(lang, source.rstrip("\n"))
    if args.kind == "table":
        return TableBlock([parse_table_row(row) for row in values])
    if args.kind == "checkbox":
        return CheckboxBlock(args.checked, " ".join(values))
    if args.kind == "file":
        if len(values) != 1:
            return None
        uri = to_uri(values[0])
        return FileBlock(uri) if uri else None
    return None


def cmd_block_add(args: argparse.Namespace, rt: Any) -> int:
    """Append (or insert with --at) one block."""
    block = _build_block(args)
    if block is None:
        print(f"Error: invalid {args.kind} block arguments", file=sys.stderr)
        return 1
    session = rt.edit(args.notebook, args.page)
    if session is None:
        return _not_found(f"Page {args.notebook}/{args.page}")
    if args.at is None:
        session.append_block(block)
    elif not session.insert_block(args.at, block):
        session.discard()
        return _not_found(f"Position {args.at}")
    session.commit()
    return 0


def cmd_block_mv(args: argparse.Namespace, rt: Any) -> int:
    session = rt.edit(args.notebook, args.page)
    if session is None:
        return _not_found(f"Page {args.notebook}/{args.page}")
    if not session.move_block(args.src, args.dst):
        session.discard()
        return _not_found(f"Position {args.src} or {args.dst}")
    session.commit()
    return 0


def cmd_block_rm(args: argparse.Namespace, rt: Any) -> int:
    session = rt.edit(args.notebook, args.page)
    if session is None:
        return _not_found(f"Page {args.notebook}/{args.page}")
    removed = session.remove_blocks(args.indices)
    if removed:
        session.commit()
    else:
        session.discard()
    if not args.quiet:
        print(f"Removed {removed} block(s)")
    return 0


def cmd_block_toggle(args: argparse.Namespace, rt: Any) -> int:
    """Flip a checkbox block."""
    session = rt.edit(args.notebook, args.page)
    if session is None:
        return _not_found(f"Page {args.notebook}/{args.page}")
    blocks = session.blocks
    if not 0 <= args.index < len(blocks) or not isinstance(blocks[args.index], CheckboxBlock):
        session.discard()
        print(f"Error: no checkbox at position {args.index}", file=sys.stderr)
        return 1
    session.replace_block(args.index, blocks[args.index].toggled())
    session.commit()
    return 0


def cmd_serve(args: argparse.Namespace, rt: Any) -> int:
    """Start local JSON API server."""
    try:
        import uvicorn

        from .api.app import create_app, generate_token
    except ImportError as e:
        print(
            "Error: API dependencies not installed. "
            "Install with: pip install mdnotebook[api]",
            file=sys.stderr
        )
        print(f"Details: {e}", file=sys.stderr)
        return 1

    token_arg = getattr(args, 'token', 'auto')
    token = None

    if token_arg == 'auto':
        token = generate_token()
        print(f"Generated bearer token: {token}")
        print(f"Use in requests: Authorization: Bearer {token}")
    elif token_arg == 'none':
        print("Warning: Running without authentication. Only use in trusted environments.")
        token = None
    else:
        token = token_arg

    app = create_app(rt, token=token, enable_cors=args.cors)

    host = args.host or rt.config.serve.host
    port = args.port or rt.config.serve.port

    print(f"Starting server on http://{host}:{port}")
    uvicorn.run(app, host=host, port=port, log_level="info")

    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="mdnb", description="Markdown notebook CLI"
    )
    parser.add_argument(
        "--config",
        type=Path,
        default=None,
        help="Path to config file (default: search cwd/mdnb.toml, data dir/mdnb.toml)",
    )
    parser.add_argument(
        "--data",
        type=Path,
        default=None,
        help="Path to the notebooks JSON file (overrides config)",
    )
    parser.add_argument(
        "-q", "--quiet", action="store_true", help="Minimize output"
    )
    parser.add_argument(
        "--json", action="store_true", help="Machine-readable output"
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"mdnotebook {__version__} (python {platform.python_version()}, {platform.system()})",
    )

    subparsers = parser.add_subparsers(dest="cmd", required=True)

    subparsers.add_parser("ls", help="List notebooks")

    # nb command
    parser_nb = subparsers.add_parser("nb", help="Manage notebooks")
    nb_sub = parser_nb.add_subparsers(dest="nb_cmd", required=True)
    p = nb_sub.add_parser("new", help="Create a notebook")
    p.add_argument("title", nargs="?", default=None)
    p = nb_sub.add_parser("rename", help="Rename a notebook")
    p.add_argument("notebook")
    p.add_argument("title")
    p = nb_sub.add_parser("rm", help="Delete notebooks")
    p.add_argument("notebooks", nargs="+")

    p = subparsers.add_parser("pages", help="List pages of a notebook")
    p.add_argument("notebook")

    # page command
    parser_page = subparsers.add_parser("page", help="Manage pages")
    page_sub = parser_page.add_subparsers(dest="page_cmd", required=True)
    p = page_sub.add_parser("new", help="Create a page with placeholder content")
    p.add_argument("notebook")
    p.add_argument("--title", default=None)
    p = page_sub.add_parser("rename", help="Rename a page")
    p.add_argument("notebook")
    p.add_argument("page")
    p.add_argument("title")
    p = page_sub.add_parser("rm", help="Delete pages")
    p.add_argument("notebook")
    p.add_argument("pages", nargs="+")
    p = page_sub.add_parser("show", help="Print a page as markdown")
    p.add_argument("notebook")
    p.add_argument("page")
    p = page_sub.add_parser("blocks", help="List the blocks of a page")
    p.add_argument("notebook")
    p.add_argument("page")
    p = page_sub.add_parser("set", help="Replace page content from markdown")
    p.add_argument("notebook")
    p.add_argument("page")
    p.add_argument("source", help="Markdown file, or - for stdin")
    p = page_sub.add_parser("edit", help="Edit a page as markdown in $EDITOR")
    p.add_argument("notebook")
    p.add_argument("page")
    p = page_sub.add_parser("import", help="Import markdown files as pages")
    p.add_argument("notebook")
    p.add_argument("files", nargs="+")
    p = page_sub.add_parser("export", help="Export a page as markdown")
    p.add_argument("notebook")
    p.add_argument("page")
    p.add_argument("-o", "--output", default=None, help="Output file (default: stdout)")
    p.add_argument("--front-matter", action="store_true", help="Prepend YAML id/title header")

    # block command
    parser_block = subparsers.add_parser("block", help="Edit blocks of a page")
    block_sub = parser_block.add_subparsers(dest="block_cmd", required=True)
    p = block_sub.add_parser(
        "add",
        help="Add a block",
        description=(
            "text WORDS... | code LANG LINES... (or LANG -) | "
            "table 'a|b' 'c|d' | checkbox [--checked] WORDS... | file URI_OR_PATH"
        ),
    )
    p.add_argument("notebook")
    p.add_argument("page")
    p.add_argument("kind", choices=["text", "code", "table", "checkbox", "file"])
    p.add_argument("values", nargs="*")
    p.add_argument("--at", type=int, default=None, help="Insert position (default: append)")
    p.add_argument("--checked", action="store_true", help="Checkbox starts checked")
    p = block_sub.add_parser("mv", help="Move a block to a new position")
    p.add_argument("notebook")
    p.add_argument("page")
    p.add_argument("src", type=int)
    p.add_argument("dst", type=int)
    p = block_sub.add_parser("rm", help="Delete blocks by position")
    p.add_argument("notebook")
    p.add_argument("page")
    p.add_argument("indices", type=int, nargs="+")
    p = block_sub.add_parser("toggle", help="Check or uncheck a checkbox block")
    p.add_argument("notebook")
    p.add_argument("page")
    p.add_argument("index", type=int)

    # serve command
    parser_serve = subparsers.add_parser("serve", help="Start local JSON API server")
    parser_serve.add_argument("--host", default=None, help="Host to bind (default: config)")
    parser_serve.add_argument("--port", type=int, default=None, help="Port (default: config)")
    parser_serve.add_argument(
        "--token", default="auto", help="Bearer token: auto, none, or a literal token"
    )
    parser_serve.add_argument("--cors", action="store_true", help="Enable CORS")

    return parser


def main(argv: list[str] | None = None) -> None:
    """Main CLI entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    rt = build_runtime(data_path=args.data, config_path=args.config)

    level = "ERROR" if args.quiet else rt.config.log.level
    logging.basicConfig(
        level=getattr(logging, level, logging.WARNING),
        format="%(levelname)s %(name)s: %(message)s",
    )

    handlers = {
        "ls": cmd_ls,
        "pages": cmd_pages,
        "serve": cmd_serve,
    }

    if args.cmd == "nb":
        nb_handlers = {
            "new": cmd_nb_new,
            "rename": cmd_nb_rename,
            "rm": cmd_nb_rm,
        }
        handler = nb_handlers.get(args.nb_cmd)
    elif args.cmd == "page":
        page_handlers = {
            "new": cmd_page_new,
            "rename": cmd_page_rename,
            "rm": cmd_page_rm,
            "show": cmd_page_show,
            "blocks": cmd_page_blocks,
            "set": cmd_page_set,
            "edit": cmd_page_edit,
            "import": cmd_page_import,
            "export": cmd_page_export,
        }
        handler = page_handlers.get(args.page_cmd)
    elif args.cmd == "block":
        block_handlers = {
            "add": cmd_block_add,
            "mv": cmd_block_mv,
            "rm": cmd_block_rm,
            "toggle": cmd_block_toggle,
        }
        handler = block_handlers.get(args.block_cmd)
    else:
        handler = handlers.get(args.cmd)

    if handler:
        try:
            exit_code = handler(args, rt)
            sys.exit(exit_code)
        except (OSError, ValueError) as e:
            print(f"Error: {e}", file=sys.stderr)
            sys.exit(1)
    else:
        print(f"Unknown command: {args.cmd}", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
