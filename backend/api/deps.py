"""FastAPI dependencies and require-helpers for routes."""

from fastapi import HTTPException, Request

import store
from documents import Autosaver, EditorDocuments


def get_documents() -> EditorDocuments:
    """Editor documents over the process-wide store. Use in Depends()."""
    return EditorDocuments(store.get_store())


def get_autosaver(request: Request) -> Autosaver:
    """Autosaver created by the app lifespan."""
    return request.app.state.autosaver


def require_key(key: str) -> str:
    """Validate the document key path param or raise 400."""
    key = key.strip()
    if not key:
        raise HTTPException(400, "Document key must not be empty")
    return key
