from pydantic import BaseModel
from typing import Dict, Generic, Optional, TypeVar

T = TypeVar("T")

# --- Response envelope ---
class ApiResponse(BaseModel, Generic[T]):
    success: bool = True
    data: Optional[T] = None
    message: Optional[str] = None

class ErrorResponse(BaseModel):
    success: bool = False
    message: str
    errors: Optional[Dict[str, str]] = None

class DeleteResult(BaseModel):
    id: int
    deleted: bool = True

class ReorderRequest(BaseModel):
    """Moves an ordered item to a new 1-based position within its parent."""
    new_order: int
