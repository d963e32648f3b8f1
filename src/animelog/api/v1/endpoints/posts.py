"""Feed, post, like and comment endpoints."""

from datetime import datetime

from fastapi import APIRouter, HTTPException, Query, Response, status

from animelog.api.v1.dependencies import CurrentUserDep, OptionalUserDep, SessionDep
from animelog.schemas.post import (
    CommentCreate,
    CommentResponse,
    FeedCursorModel,
    FeedPage,
    FeedPost,
    LikeResponse,
    PostCreate,
    PostResponse,
    PostUpdate,
)
from animelog.services import feed as feed_service
from animelog.services.feed import (
    FeedCursor,
    FeedEntry,
    FeedScope,
    NotPostOwnerError,
    PostNotFoundError,
)

router = APIRouter(prefix="/posts", tags=["posts"])


def _not_found() -> HTTPException:
    return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Post not found")


def _forbidden() -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_403_FORBIDDEN,
        detail="Only the author can change this post",
    )


def _to_feed_post(entry: FeedEntry) -> FeedPost:
    return FeedPost(
        **PostResponse.model_validate(entry.post).model_dump(),
        username=entry.username,
        avatar_url=entry.avatar_url,
        like_count=entry.like_count,
        reply_count=entry.reply_count,
        liked_by_me=entry.liked_by_me,
    )


@router.get("", response_model=FeedPage)
async def get_feed(
    db: SessionDep,
    viewer: OptionalUserDep,
    anime_id: str | None = None,
    anime_episode_id: str | None = None,
    manga_id: str | None = None,
    manga_chapter_id: str | None = None,
    user_id: str | None = None,
    before: datetime | None = Query(None, description="created_at of the last post already shown"),
    before_id: str | None = Query(None, description="id of the last post already shown"),
    limit: int = Query(50, ge=1, le=100, description="Maximum number of posts to return"),
) -> FeedPage:
    """Newest posts first, with like and root reply counts."""
    scope = FeedScope(
        anime_id=anime_id,
        anime_episode_id=anime_episode_id,
        manga_id=manga_id,
        manga_chapter_id=manga_chapter_id,
        user_id=user_id,
    )
    page = feed_service.feed_page(
        db,
        scope=scope,
        limit=limit,
        before=FeedCursor(before, before_id) if before is not None else None,
        viewer_id=viewer.id if viewer else None,
    )
    next_cursor = None
    if page.next_cursor is not None and len(page.entries) >= limit:
        next_cursor = FeedCursorModel(
            created_at=page.next_cursor.created_at,
            id=page.next_cursor.id,
        )
    return FeedPage(items=[_to_feed_post(entry) for entry in page.entries], next_cursor=next_cursor)


@router.post("", response_model=PostResponse, status_code=status.HTTP_201_CREATED)
async def create_post(payload: PostCreate, current_user: CurrentUserDep, db: SessionDep) -> PostResponse:
    try:
        post = feed_service.create_post(
            db,
            current_user.id,
            payload.content,
            anime_id=payload.anime_id,
            anime_episode_id=payload.anime_episode_id,
            manga_id=payload.manga_id,
            manga_chapter_id=payload.manga_chapter_id,
        )
    except ValueError as err:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(err)) from err
    return PostResponse.model_validate(post)


@router.patch("/{post_id}", response_model=PostResponse)
async def edit_post(
    post_id: str,
    payload: PostUpdate,
    current_user: CurrentUserDep,
    db: SessionDep,
) -> PostResponse:
    try:
        post = feed_service.edit_post(db, post_id, current_user.id, payload.content)
    except PostNotFoundError as err:
        raise _not_found() from err
    except NotPostOwnerError as err:
        raise _forbidden() from err
    return PostResponse.model_validate(post)


@router.delete("/{post_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_post(post_id: str, current_user: CurrentUserDep, db: SessionDep) -> Response:
    try:
        feed_service.delete_post(db, post_id, current_user.id)
    except PostNotFoundError as err:
        raise _not_found() from err
    except NotPostOwnerError as err:
        raise _forbidden() from err
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post("/{post_id}/like", response_model=LikeResponse)
async def like_post(post_id: str, current_user: CurrentUserDep, db: SessionDep) -> LikeResponse:
    try:
        count = feed_service.like_post(db, post_id, current_user.id)
    except PostNotFoundError as err:
        raise _not_found() from err
    return LikeResponse(post_id=post_id, liked=True, like_count=count)


@router.delete("/{post_id}/like", response_model=LikeResponse)
async def unlike_post(post_id: str, current_user: CurrentUserDep, db: SessionDep) -> LikeResponse:
    try:
        count = feed_service.unlike_post(db, post_id, current_user.id)
    except PostNotFoundError as err:
        raise _not_found() from err
    return LikeResponse(post_id=post_id, liked=False, like_count=count)


@router.get("/{post_id}/comments", response_model=list[CommentResponse])
async def list_comments(post_id: str, db: SessionDep) -> list[CommentResponse]:
    try:
        comments = feed_service.list_comments(db, post_id)
    except PostNotFoundError as err:
        raise _not_found() from err
    return [CommentResponse.model_validate(comment) for comment in comments]


@router.post(
    "/{post_id}/comments",
    response_model=CommentResponse,
    status_code=status.HTTP_201_CREATED,
)
async def add_comment(
    post_id: str,
    payload: CommentCreate,
    current_user: CurrentUserDep,
    db: SessionDep,
) -> CommentResponse:
    try:
        comment = feed_service.add_comment(
            db,
            post_id,
            current_user.id,
            payload.content,
            parent_comment_id=payload.parent_comment_id,
        )
    except PostNotFoundError as err:
        raise _not_found() from err
    except ValueError as err:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(err)) from err
    return CommentResponse.model_validate(comment)
