"""Request body models for chathtml API."""

from pydantic import BaseModel


class DocumentUpdate(BaseModel):
    code: str
