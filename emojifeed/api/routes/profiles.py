from typing import Annotated

from fastapi import APIRouter, Depends

from emojifeed.api.dependencies import get_profile_service
from emojifeed.schemas.posts import AuthorResponse
from emojifeed.services.profile_service import ProfileService

router = APIRouter(tags=["Profiles"])


@router.get(
    "/profiles/{username}",
    response_model=AuthorResponse,
    operation_id="profile.getUserByUserName",
)
async def get_user_by_username(
    username: str,
    service: Annotated[ProfileService, Depends(get_profile_service)],
) -> AuthorResponse:
    """Public profile of one author. 404 when the username is unknown."""
    author = await service.get_by_username(username)
    return AuthorResponse.from_domain(author)
