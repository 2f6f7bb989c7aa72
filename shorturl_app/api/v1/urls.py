from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Request, Response, status
from shorturl_app.config import Settings
from shorturl_app.dependencies import get_repository, get_settings
from shorturl_app.logging_config import get_logger
from shorturl_app.models.short_url import ShortUrl
from shorturl_app.schemas.url import (
    ShortUrlCreate,
    ShortUrlInfo,
    ShortUrlPage,
    ShortUrlResponse,
)
from shorturl_app.services.exceptions import (
    DeletionFailure,
    InvalidCursor,
    NotFound,
    PathAlreadyInUse,
    PersistenceFailure,
)
from shorturl_app.services.repository import ShortUrlRepository
from shorturl_app.services.validator import strip_slashes, validate

router = APIRouter(prefix="/urls", tags=["urls"])

logger = get_logger(__name__)


def build_shortened_url(request: Request, path: str, config: Settings) -> str:
    """
    Fully qualified short URL for a path.

    Uses the configured forwarder base URL when the redirects are served by
    a separate host, otherwise the scheme/host/root path of this request.
    """
    if config.forwarder_base_url:
        return f"{config.forwarder_base_url.rstrip('/')}/{path}"
    base = str(request.base_url).rstrip("/")
    return f"{base}/{path}"


@router.post(
    "",
    response_model=ShortUrlResponse,
    response_model_exclude_none=True,
    status_code=status.HTTP_201_CREATED,
)
async def create_short_url(
    url_data: ShortUrlCreate,
    request: Request,
    response: Response,
    repository: ShortUrlRepository = Depends(get_repository),
    config: Settings = Depends(get_settings),
):
    """Create a new short URL for a user-chosen path"""
    url_data.path = strip_slashes(url_data.path)

    result = validate(url_data)
    if not result.is_valid:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail={"message": "Validation failed.", "errors": result.errors},
        )

    try:
        stored = await repository.create(
            ShortUrl(path=url_data.path, destination=url_data.destination)
        )
    except PathAlreadyInUse:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Path is already in use.",
        )
    except PersistenceFailure:
        logger.exception(f"Failed to create short URL '{url_data.path}'")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to create shortened URL.",
        )

    response.headers["Location"] = str(request.url_for("get_short_url", path=stored.path))
    return ShortUrlResponse(
        path=stored.path,
        destination=stored.destination,
        shortened_url=build_shortened_url(request, stored.path, config),
        id=stored.id,
    )


@router.get("", response_model=ShortUrlPage)
async def list_short_urls(
    cursor: Optional[str] = None,
    limit: Optional[int] = Query(None, ge=1),
    repository: ShortUrlRepository = Depends(get_repository),
    config: Settings = Depends(get_settings),
):
    """One bounded page of short URLs; pass next_cursor back to continue"""
    page_size = min(limit or config.default_page_size, config.max_page_size)
    try:
        page = await repository.list_page(cursor=cursor, page_size=page_size)
    except InvalidCursor:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Invalid cursor.",
        )
    except PersistenceFailure:
        logger.exception("Failed to list short URLs")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to list shortened URLs.",
        )
    return ShortUrlPage(
        items=[ShortUrlInfo(**entry.model_dump()) for entry in page.entries],
        next_cursor=page.next_cursor,
    )


@router.get("/{path}", response_model=ShortUrlInfo, response_model_exclude_none=True)
async def get_short_url(
    path: str,
    repository: ShortUrlRepository = Depends(get_repository),
):
    """Get information about a short URL"""
    try:
        short_url = await repository.get_by_path(path)
    except PersistenceFailure:
        logger.exception(f"Failed to look up short URL '{path}'")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to look up shortened URL.",
        )
    if not short_url:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Short URL not found",
        )
    return ShortUrlInfo(**short_url.model_dump())


@router.delete("/{path}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_short_url(
    path: str,
    repository: ShortUrlRepository = Depends(get_repository),
):
    """Delete a short URL"""
    try:
        await repository.delete(path)
    except NotFound:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Short URL not found",
        )
    except DeletionFailure:
        logger.exception(f"Failed to delete short URL '{path}'")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to delete shortened URL.",
        )
    except PersistenceFailure:
        logger.exception(f"Failed to look up short URL '{path}'")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to look up shortened URL.",
        )
