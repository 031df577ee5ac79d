"""FastAPI application for the mdnotebook local JSON API."""

import secrets
from typing import Any

from fastapi import Depends, FastAPI, HTTPException, Security
from fastapi.middleware.cors import CORSMiddleware
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from pydantic import BaseModel

from ..core.codec import CodecError, block_from_record, page_to_record
from ..core.model import Notebook


class TitleIn(BaseModel):
    title: str | None = None


class MarkdownIn(BaseModel):
    markdown: str


class BlocksIn(BaseModel):
    blocks: list[dict[str, Any]]


def _notebook_summary(nb: Notebook) -> dict[str, Any]:
    return {
        "id": nb.id,
        "title": nb.title,
        "pages": [{"id": p.id, "title": p.title} for p in nb.pages],
    }


def create_app(runtime: Any, token: str | None = None, enable_cors: bool = False) -> Any:
    """
    Create FastAPI application with runtime injected.

    Args:
        runtime: Runtime instance with store, parser and writer
        token: Bearer token for authentication (None to disable auth)
        enable_cors: Enable CORS middleware

    Returns:
        FastAPI application instance
    """
    app = FastAPI(
        title="mdnotebook API",
        description="Local JSON API for block-structured markdown notebooks",
        version="0.1.0",
        docs_url="/docs" if token is None else None,
        redoc_url="/redoc" if token is None else None,
    )

    if enable_cors:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=["*"],
            allow_credentials=True,
            allow_methods=["*"],
            allow_headers=["*"],
        )

    store = runtime.store

    if token:
        security_scheme = HTTPBearer(auto_error=False)

        async def verify_token(
            credentials: HTTPAuthorizationCredentials | None = Security(security_scheme),  # noqa: B008
        ) -> None:
            """Verify bearer token."""
            if credentials is None or credentials.credentials != token:
                raise HTTPException(status_code=401, detail="Invalid or missing token")
    else:

        async def verify_token() -> None:
            """No-op when auth is disabled."""
            return None

    def _notebook_or_404(notebook_id: str) -> Notebook:
        nb = store.get_notebook(notebook_id)
        if nb is None:
            raise HTTPException(status_code=404, detail=f"Notebook {notebook_id} not found")
        return nb

    def _session_or_404(notebook_id: str, page_id: str) -> Any:
        session = runtime.edit(notebook_id, page_id)
        if session is None:
            raise HTTPException(status_code=404, detail=f"Page {notebook_id}/{page_id} not found")
        return session

    @app.get("/health")
    async def health(auth: None = Depends(verify_token)) -> dict[str, Any]:
        """Health check endpoint."""
        return {"status": "ok", "notebooks": len(store.notebooks)}

    @app.get("/notebooks")
    async def list_notebooks(auth: None = Depends(verify_token)) -> list[dict[str, Any]]:
        return [
            {"id": nb.id, "title": nb.title, "pages": len(nb.pages)}
            for nb in store.notebooks
        ]

    @app.post("/notebooks", status_code=201)
    async def create_notebook(
        body: TitleIn, auth: None = Depends(verify_token)
    ) -> dict[str, Any]:
        return _notebook_summary(store.create_notebook(body.title))

    @app.get("/notebooks/{notebook_id}")
    async def get_notebook(notebook_id: str, auth: None = Depends(verify_token)) -> dict[str, Any]:
        return _notebook_summary(_notebook_or_404(notebook_id))

    @app.patch("/notebooks/{notebook_id}")
    async def rename_notebook(
        notebook_id: str, body: TitleIn, auth: None = Depends(verify_token)
    ) -> dict[str, Any]:
        nb = _notebook_or_404(notebook_id)
        if body.title is not None:
            store.rename_notebook(notebook_id, body.title)
        return _notebook_summary(nb)

    @app.delete("/notebooks/{notebook_id}")
    async def delete_notebook(notebook_id: str, auth: None = Depends(verify_token)) -> dict[str, Any]:
        _notebook_or_404(notebook_id)
        return {"removed": store.remove_notebooks([notebook_id])}

    @app.post("/notebooks/{notebook_id}/pages", status_code=201)
    async def create_page(
        notebook_id: str, body: TitleIn, auth: None = Depends(verify_token)
    ) -> dict[str, Any]:
        _notebook_or_404(notebook_id)
        page = store.add_page(notebook_id, body.title)
        return page_to_record(page)

    @app.get("/notebooks/{notebook_id}/pages/{page_id}")
    async def get_page(
        notebook_id: str, page_id: str, auth: None = Depends(verify_token)
    ) -> dict[str, Any]:
        page = store.get_page(notebook_id, page_id)
        if page is None:
            raise HTTPException(status_code=404, detail=f"Page {notebook_id}/{page_id} not found")
        return page_to_record(page)

    @app.patch("/notebooks/{notebook_id}/pages/{page_id}")
    async def rename_page(
        notebook_id: str, page_id: str, body: TitleIn, auth: None = Depends(verify_token)
    ) -> dict[str, Any]:
        session = _session_or_404(notebook_id, page_id)
        if body.title is None:
            session.discard()
        else:
            session.rename(body.title)
            session.commit()
        return page_to_record(session.page)

    @app.delete("/notebooks/{notebook_id}/pages/{page_id}")
    async def delete_page(
        notebook_id: str, page_id: str, auth: None = Depends(verify_token)
    ) -> dict[str, Any]:
        if store.get_page(notebook_id, page_id) is None:
            raise HTTPException(status_code=404, detail=f"Page {notebook_id}/{page_id} not found")
        return {"removed": store.remove_pages(notebook_id, [page_id])}

    @app.get("/notebooks/{notebook_id}/pages/{page_id}/markdown")
    async def get_markdown(
        notebook_id: str, page_id: str, auth: None = Depends(verify_token)
    ) -> dict[str, Any]:
        page = store.get_page(notebook_id, page_id)
        if page is None:
            raise HTTPException(status_code=404, detail=f"Page {notebook_id}/{page_id} not found")
        return {"markdown": runtime.writer.render(page.content)}

    @app.put("/notebooks/{notebook_id}/pages/{page_id}/markdown")
    async def put_markdown(
        notebook_id: str, page_id: str, body: MarkdownIn, auth: None = Depends(verify_token)
    ) -> dict[str, Any]:
        """Replace page content by parsing markdown."""
        session = _session_or_404(notebook_id, page_id)
        session.set_raw(body.markdown)
        session.commit()
        return page_to_record(session.page)

    @app.put("/notebooks/{notebook_id}/pages/{page_id}/blocks")
    async def put_blocks(
        notebook_id: str, page_id: str, body: BlocksIn, auth: None = Depends(verify_token)
    ) -> dict[str, Any]:
        """Replace page content with tagged block records."""
        session = _session_or_404(notebook_id, page_id)
        try:
            blocks = [block_from_record(rec) for rec in body.blocks]
        except CodecError as e:
            session.discard()
            raise HTTPException(status_code=422, detail=str(e)) from e
        session.set_blocks(blocks)
        session.commit()
        return page_to_record(session.page)

    return app


def generate_token() -> str:
    """Generate a random bearer token."""
    return secrets.token_urlsafe(32)
