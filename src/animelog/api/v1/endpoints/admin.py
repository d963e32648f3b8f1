"""Admin endpoints for catalogue maintenance."""

import logging
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, status

from animelog.api.v1.dependencies import (
    SessionDep,
    TmdbClientDep,
    TvdbClientDep,
    import_secret_header,
    secret_matches,
)
from animelog.schemas.admin import AutoLinkQuery, AutoLinkRequest, AutoLinkResponse
from animelog.services.auto_link import AnimeNotFoundError, MissingTitleError, auto_link_anime

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/admin", tags=["admin"])


@router.post("/auto-link-anime", response_model=AutoLinkResponse)
async def auto_link(
    payload: AutoLinkRequest,
    db: SessionDep,
    tmdb: TmdbClientDep,
    tvdb: TvdbClientDep,
    header_secret: Annotated[str | None, Depends(import_secret_header)],
) -> AutoLinkResponse:
    """Link an anime to its best TMDB and TVDB matches.

    Guarded by the import secret (``X-Import-Secret`` header or ``secret``
    body field) when one is configured.
    """
    if not secret_matches(header_secret or payload.secret):
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Unauthorized")
    if not payload.anime_id:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Missing animeId")

    try:
        result = await auto_link_anime(
            db,
            payload.anime_id,
            tmdb=tmdb,
            tvdb=tvdb,
            title_override=payload.title_override,
            year_override=payload.year_override,
            episodes_override=payload.episodes_override,
        )
    except AnimeNotFoundError as err:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Anime not found") from err
    except MissingTitleError as err:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(err)) from err

    logger.info("auto-linked anime %s: %s", result.anime_id, result.best)
    return AutoLinkResponse(
        success=True,
        anime_id=result.anime_id,
        query=AutoLinkQuery(**result.query.to_dict()),
        best=result.best,
    )
