"""Persona endpoints.

GET    /api/personas       - list personas (deleted ones last)
POST   /api/personas       - create persona
DELETE /api/personas/{id}  - soft-delete persona

Routers are thin: call services for business logic.
"""

from fastapi import APIRouter, Depends, Path

from forum.repositories.base import ForumRepository
from forum.repositories.factory import get_repository
from forum.schemas import CreatedResponse, OkResponse, PersonaCreate, PersonaListResponse, PersonaOut
from forum.services.personas import create_persona, delete_persona, list_personas

router = APIRouter()


@router.get("", response_model=PersonaListResponse)
async def get_personas(repo: ForumRepository = Depends(get_repository)) -> PersonaListResponse:
    """List every persona, live first, then by name."""
    personas = await list_personas(repo)
    return PersonaListResponse(
        personas=[PersonaOut.model_validate(p, from_attributes=True) for p in personas],
    )


@router.post("", response_model=CreatedResponse)
async def post_persona(
    body: PersonaCreate,
    repo: ForumRepository = Depends(get_repository),
) -> CreatedResponse:
    """Create a persona."""
    persona_id = await create_persona(
        repo,
        name=body.name,
        avatar_url=body.avatar_url,
        bio=body.bio,
        creator=body.creator,
    )
    return CreatedResponse(id=persona_id)


@router.delete("/{persona_id}", response_model=OkResponse)
async def remove_persona(
    persona_id: int = Path(description="Persona id"),
    repo: ForumRepository = Depends(get_repository),
) -> OkResponse:
    """Soft-delete a persona. Repeating the call is harmless."""
    await delete_persona(repo, persona_id)
    return OkResponse()
