from typing import Optional

from pydantic import BaseModel, Field


class ShortUrl(BaseModel):
    """
    A short path and the destination it redirects to.

    This is the store-independent shape every backend reads and writes.
    """

    path: str = Field(..., description="Unique short path token")
    destination: str = Field(..., description="Absolute URL the path redirects to")
    id: Optional[str] = Field(None, description="Surrogate id (relational store only)")
