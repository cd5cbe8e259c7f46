from typing import Annotated

from fastapi import APIRouter, Depends, status

from emojifeed.api.dependencies import get_post_service
from emojifeed.core.auth import get_current_identity
from emojifeed.schemas.posts import CreatePostRequest, FeedEntryResponse, PostResponse
from emojifeed.services.post_service import PostService

router = APIRouter(tags=["Posts"])

PostServiceDep = Annotated[PostService, Depends(get_post_service)]


@router.get(
    "/posts",
    response_model=list[FeedEntryResponse],
    operation_id="posts.getAll",
)
async def get_all(service: PostServiceDep) -> list[FeedEntryResponse]:
    """Latest posts across all authors, newest first (at most 100)."""
    entries = await service.list_all()
    return [FeedEntryResponse.from_domain(entry) for entry in entries]


@router.get(
    "/posts/{post_id}",
    response_model=FeedEntryResponse,
    operation_id="posts.getById",
)
async def get_by_id(post_id: str, service: PostServiceDep) -> FeedEntryResponse:
    """A single post with its author. 404 when the post does not exist."""
    entry = await service.get_by_id(post_id)
    return FeedEntryResponse.from_domain(entry)


@router.get(
    "/users/{user_id}/posts",
    response_model=list[FeedEntryResponse],
    operation_id="posts.getPostByUserId",
)
async def get_post_by_user_id(user_id: str, service: PostServiceDep) -> list[FeedEntryResponse]:
    """Latest posts by one author. 404 when the author has no posts."""
    entries = await service.list_by_author(user_id)
    return [FeedEntryResponse.from_domain(entry) for entry in entries]


@router.post(
    "/posts",
    response_model=PostResponse,
    status_code=status.HTTP_201_CREATED,
    operation_id="posts.create",
)
async def create(
    body: CreatePostRequest,
    service: PostServiceDep,
    identity: Annotated[str, Depends(get_current_identity)],
) -> PostResponse:
    """Publish an emoji-only post as the signed-in user.

    Errors:
        400 invalid_content: empty, longer than 280 characters, or not emoji-only.
        401 unauthorized: missing or invalid session.
        429 too_many_requests: more than 3 posts in the last minute.
    """
    post = await service.create(identity, body.content)
    return PostResponse.from_domain(post)
