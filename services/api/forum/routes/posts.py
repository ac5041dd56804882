"""Post endpoints.

GET    /api/posts?sort=new|hot  - live posts with reply counts
GET    /api/posts/{id}          - post detail with live comments
POST   /api/posts               - create post
DELETE /api/posts/{id}          - soft-delete post and its comments
"""

from fastapi import APIRouter, Depends, Path, Query

from forum.repositories.base import ForumRepository
from forum.repositories.factory import get_repository
from forum.schemas import CreatedResponse, OkResponse, PostCreate, PostDetailResponse, PostListResponse
from forum.services.posts import SORT_NEW, create_post, delete_post, get_post_with_comments, list_posts

router = APIRouter()


@router.get("", response_model=PostListResponse)
async def get_posts(
    sort: str = Query(
        default=SORT_NEW,
        description='"new" (newest first) or "hot" (most live replies first)',
        examples=["new", "hot"],
    ),
    repo: ForumRepository = Depends(get_repository),
) -> PostListResponse:
    """List live posts."""
    return PostListResponse(posts=await list_posts(repo, sort))


@router.get("/{post_id}", response_model=PostDetailResponse)
async def get_post(
    post_id: int = Path(description="Post id"),
    repo: ForumRepository = Depends(get_repository),
) -> PostDetailResponse:
    """Get a live post and its live comments."""
    return await get_post_with_comments(repo, post_id)


@router.post("", response_model=CreatedResponse)
async def post_post(
    body: PostCreate,
    repo: ForumRepository = Depends(get_repository),
) -> CreatedResponse:
    """Create a post as an existing persona."""
    post_id = await create_post(
        repo,
        persona_name=body.persona_name,
        content=body.content,
        image_url=body.image_url,
    )
    return CreatedResponse(id=post_id)


@router.delete("/{post_id}", response_model=OkResponse)
async def remove_post(
    post_id: int = Path(description="Post id"),
    repo: ForumRepository = Depends(get_repository),
) -> OkResponse:
    """Soft-delete a post; its comments go with it."""
    await delete_post(repo, post_id)
    return OkResponse()
