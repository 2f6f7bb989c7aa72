from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.responses import RedirectResponse
from shorturl_app.dependencies import get_repository
from shorturl_app.logging_config import get_logger
from shorturl_app.services.exceptions import PersistenceFailure
from shorturl_app.services.repository import ShortUrlRepository
from shorturl_app.services.validator import is_valid_path

router = APIRouter(tags=["redirect"])

logger = get_logger(__name__)


@router.get("/{path}")
async def redirect_to_destination(
    path: str,
    repository: ShortUrlRepository = Depends(get_repository),
):
    """
    Redirect to the destination of a short path.

    Flow:
    1. Reject malformed paths without touching the store
    2. Look up the destination
    3. Redirect with 302, since the entry may be deleted later and a
       permanent redirect would be cached by browsers
    """
    if not is_valid_path(path):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Invalid short URL path",
        )

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

    return RedirectResponse(url=short_url.destination, status_code=status.HTTP_302_FOUND)
