"""
chathtml Backend API
Persists the editor's HTML documents across reloads.
Run: uvicorn main:app --reload
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from api.deps import get_documents
from api.routes import documents_router, health_router
from config import get_settings
from documents import Autosaver

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    settings = get_settings()
    documents = get_documents()
    # Cold start: pull anything older versions left in the fallback file.
    await documents.migrate_legacy(settings.CHATHTML_LEGACY_KEYS)
    app.state.autosaver = Autosaver(documents, delay=settings.CHATHTML_AUTOSAVE_DELAY)
    try:
        yield
    finally:
        await app.state.autosaver.flush()


def create_app() -> FastAPI:
    settings = get_settings()
    app = FastAPI(title=settings.APP_TITLE, version=settings.APP_VERSION, lifespan=lifespan)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.ALLOWED_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.include_router(health_router)
    app.include_router(documents_router)
    return app


app = create_app()
