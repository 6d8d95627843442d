"""
Shared response envelope
"""

from typing import Generic, Optional, TypeVar
from pydantic import BaseModel

T = TypeVar("T")


class Envelope(BaseModel, Generic[T]):
    """{success, data, message?} wrapper used by every JSON endpoint"""
    success: bool = True
    data: T
    message: Optional[str] = None


class MessageResponse(BaseModel):
    success: bool = True
    message: str


class PageMeta(BaseModel):
    total: int
    page: int
    limit: int
    pages: int
