"""Persona registry, run against both storage backends."""

import pytest

from forum.services.errors import Conflict, NotFound, ValidationFailed
from forum.services.personas import create_persona, delete_persona, list_personas, resolve_persona
from forum.services.visibility import RESERVED_PERSONA_NAME


@pytest.mark.asyncio
async def test_create_persona_trims_and_stores_fields(repo):
    persona_id = await create_persona(
        repo,
        name="  Alice ",
        avatar_url=" https://example.com/alice.png ",
        bio="  ",
        creator="tester",
    )

    persona = await repo.get_persona(persona_id)
    assert persona.name == "Alice"
    assert persona.avatar_url == "https://example.com/alice.png"
    assert persona.bio is None
    assert persona.creator == "tester"
    assert persona.deleted_at is None


@pytest.mark.asyncio
async def test_ids_are_unique(repo):
    ids = [await create_persona(repo, name=f"p{i}") for i in range(5)]
    assert len(set(ids)) == 5


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "kwargs, code",
    [
        ({"name": ""}, "NAME_REQUIRED"),
        ({"name": "   "}, "NAME_REQUIRED"),
        ({"name": None}, "NAME_REQUIRED"),
        ({"name": RESERVED_PERSONA_NAME}, "NAME_RESERVED"),
        ({"name": f" {RESERVED_PERSONA_NAME} "}, "NAME_RESERVED"),
        ({"name": "Alice", "avatar_url": "ftp://example.com/a.png"}, "AVATAR_URL_INVALID"),
        ({"name": "Alice", "avatar_url": "not a url"}, "AVATAR_URL_INVALID"),
    ],
)
async def test_create_persona_validation(repo, kwargs, code):
    with pytest.raises(ValidationFailed) as exc_info:
        await create_persona(repo, **kwargs)
    assert exc_info.value.code == code
    assert exc_info.value.status_code == 400


@pytest.mark.asyncio
async def test_name_collision_is_case_insensitive(repo):
    await create_persona(repo, name="Alice")

    with pytest.raises(Conflict) as exc_info:
        await create_persona(repo, name="aLICE")
    assert exc_info.value.code == "NAME_EXISTS"
    assert exc_info.value.status_code == 409


@pytest.mark.asyncio
async def test_deleted_persona_frees_its_name(repo):
    first = await create_persona(repo, name="Alice")
    await delete_persona(repo, first)

    second = await create_persona(repo, name="alice")

    assert second != first
    resolved = await resolve_persona(repo, "ALICE")
    assert resolved is not None
    assert resolved.id == second


@pytest.mark.asyncio
async def test_list_personas_live_first_then_by_name(repo):
    zed = await create_persona(repo, name="zed")
    await create_persona(repo, name="Bob")
    alice = await create_persona(repo, name="alice")
    await create_persona(repo, name="Carol")
    await delete_persona(repo, alice)

    personas = await list_personas(repo)

    assert [p.name for p in personas] == ["Bob", "Carol", "zed", "alice"]
    assert personas[-1].deleted_at is not None
    assert personas[2].id == zed


@pytest.mark.asyncio
async def test_delete_persona_is_idempotent(repo):
    persona_id = await create_persona(repo, name="Alice")

    await delete_persona(repo, persona_id)
    first = await repo.get_persona(persona_id)
    await delete_persona(repo, persona_id)
    second = await repo.get_persona(persona_id)

    assert first.deleted_at is not None
    assert second.deleted_at == first.deleted_at


@pytest.mark.asyncio
async def test_delete_unknown_persona_is_not_found(repo):
    with pytest.raises(NotFound) as exc_info:
        await delete_persona(repo, 999)
    assert exc_info.value.code == "NOT_FOUND"


@pytest.mark.asyncio
async def test_resolve_ignores_deleted_personas(repo):
    persona_id = await create_persona(repo, name="Alice")
    assert (await resolve_persona(repo, "alice")).id == persona_id

    await delete_persona(repo, persona_id)

    assert await resolve_persona(repo, "alice") is None
    assert await resolve_persona(repo, "nobody") is None


@pytest.mark.asyncio
async def test_list_personas_orders_names_by_lowercase(repo):
    # lower() keeps "ß"; casefold() would turn it into "ss" and sort it first.
    await create_persona(repo, name="ßa")
    await create_persona(repo, name="St")

    personas = await list_personas(repo)

    assert [p.name for p in personas] == ["St", "ßa"]
