"""Pydantic schemas for API request/response."""

from .requests import DocumentUpdate

__all__ = ["DocumentUpdate"]
