"""
Response envelope shared by every endpoint
"""

from pydantic import BaseModel
from typing import Generic, List, Optional, TypeVar

T = TypeVar('T')


class ApiResponse(BaseModel, Generic[T]):
    """
    ``status`` mirrors the HTTP status code of the response.
    """
    status: int = 200
    message: str
    data: Optional[T] = None
    errors: Optional[List[str]] = None


class HealthResponse(BaseModel):
    """Health check response"""
    status: str
    checks: Optional[dict] = None
    version: Optional[str] = None
