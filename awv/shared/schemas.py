from pydantic import BaseModel
from typing import Any, Dict, List
import math
import re


class MessageResponse(BaseModel):
    """Generic message response."""

    success: bool = True
    message: str


class Pagination(BaseModel):
    """Pagination block attached to list responses."""

    total: int
    page: int
    limit: int
    pages: int

    @classmethod
    def build(cls, total: int, page: int, limit: int) -> "Pagination":
        return cls(total=total, page=page, limit=limit, pages=math.ceil(total / limit) if limit else 0)


def regex_filter(fields: List[str], term: str) -> Dict[str, Any]:
    """Build a case-insensitive ``$or`` regex filter over several fields."""
    pattern = re.escape(term.strip())
    return {"$or": [{field: {"$regex": pattern, "$options": "i"}} for field in fields]}
