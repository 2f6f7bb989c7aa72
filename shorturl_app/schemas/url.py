from pydantic import BaseModel, Field, ConfigDict
from typing import List, Optional


class ShortUrlCreate(BaseModel):
    """Request body for creating a short URL.

    Both fields are optional at the schema level so that missing or null
    values reach the validator and come back as per-field messages
    instead of a generic 422.
    """
    path: Optional[str] = Field(None, description="Short path, leading/trailing '/' are ignored")
    destination: Optional[str] = Field(None, description="Absolute URL to redirect to")


class ShortUrlResponse(BaseModel):
    path: str
    destination: str
    shortened_url: str = Field(..., alias="shortenedUrl")
    id: Optional[str] = None

    model_config = ConfigDict(populate_by_name=True)


class ShortUrlInfo(BaseModel):
    path: str
    destination: str
    id: Optional[str] = None


class ShortUrlPage(BaseModel):
    items: List[ShortUrlInfo]
    next_cursor: Optional[str] = None
