"""Editor documents: load, save, autosave draft, delete, list, migrate."""

import logging
from typing import Annotated

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from api.deps import get_autosaver, get_documents, require_key
from documents import DOCUMENT_PREFIX, Autosaver, EditorDocuments
from schemas.requests import DocumentUpdate

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/documents", tags=["documents"])

Documents = Annotated[EditorDocuments, Depends(get_documents)]
Key = Annotated[str, Depends(require_key)]


@router.get("")
async def list_documents(documents: Documents, prefix: str = DOCUMENT_PREFIX):
    return {"keys": await documents.list_keys(prefix)}


@router.get("/{key}")
async def load_document(key: Key, documents: Documents):
    return {"key": key, "code": await documents.load(key)}


@router.put("/{key}")
async def save_document(key: Key, data: DocumentUpdate, documents: Documents):
    persisted = await documents.save(key, data.code)
    if not persisted:
        logger.warning("Document '%s' (%d chars) not persisted", key, len(data.code))
    return {"key": key, "persisted": persisted}


@router.post("/{key}/draft", status_code=202)
async def save_draft(
    key: Key,
    data: DocumentUpdate,
    autosaver: Annotated[Autosaver, Depends(get_autosaver)],
):
    """Debounced save for live edits; only the latest draft per key is written."""
    autosaver.schedule(key, data.code)
    return JSONResponse({"key": key, "scheduled": True}, status_code=202)


@router.delete("/{key}")
async def delete_document(key: Key, documents: Documents):
    await documents.delete(key)
    return {"key": key, "deleted": True}


@router.post("/{key}/migrate")
async def migrate_document(key: Key, documents: Documents):
    moved = await documents.migrate_legacy([key])
    return {"key": key, "migrated": bool(moved)}
