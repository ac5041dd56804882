"""Comment thread, run against both storage backends."""

import pytest

from forum.services.comments import create_comment
from forum.services.errors import NotFound, ValidationFailed
from forum.services.personas import create_persona, delete_persona
from forum.services.posts import create_post, delete_post


@pytest.fixture
async def thread(repo) -> dict[str, int]:
    await create_persona(repo, name="Alice")
    await create_persona(repo, name="Bob")
    post = await create_post(repo, persona_name="Alice", content="first post")
    other = await create_post(repo, persona_name="Bob", content="second post")
    return {"post": post, "other": other}


@pytest.mark.asyncio
async def test_create_comment(repo, thread):
    comment_id = await create_comment(
        repo,
        post_id=thread["post"],
        persona_name="bob",
        content="  nice  ",
    )

    comment = await repo.get_comment(comment_id)
    assert comment.post_id == thread["post"]
    assert comment.content == "nice"
    assert comment.reply_to_comment_id is None
    assert comment.deleted_at is None


@pytest.mark.asyncio
async def test_post_id_may_be_numeric_string(repo, thread):
    comment_id = await create_comment(repo, post_id=str(thread["post"]), persona_name="Bob", content="hi")
    assert (await repo.get_comment(comment_id)).post_id == thread["post"]


@pytest.mark.asyncio
async def test_reply_within_same_post(repo, thread):
    c1 = await create_comment(repo, post_id=thread["post"], persona_name="Bob", content="one")
    c2 = await create_comment(
        repo,
        post_id=thread["post"],
        persona_name="Alice",
        content="two",
        reply_to_comment_id=c1,
    )
    assert (await repo.get_comment(c2)).reply_to_comment_id == c1


@pytest.mark.asyncio
async def test_reply_across_posts_is_rejected(repo, thread):
    foreign = await create_comment(repo, post_id=thread["other"], persona_name="Bob", content="elsewhere")

    with pytest.raises(ValidationFailed) as exc_info:
        await create_comment(
            repo,
            post_id=thread["post"],
            persona_name="Alice",
            content="reply",
            reply_to_comment_id=foreign,
        )
    assert exc_info.value.code == "REPLY_TARGET_INVALID"


@pytest.mark.asyncio
@pytest.mark.parametrize("reply_to", [999, "abc", 0, -3])
async def test_reply_to_unknown_comment_is_rejected(repo, thread, reply_to):
    with pytest.raises(ValidationFailed) as exc_info:
        await create_comment(
            repo,
            post_id=thread["post"],
            persona_name="Alice",
            content="reply",
            reply_to_comment_id=reply_to,
        )
    assert exc_info.value.code == "REPLY_TARGET_INVALID"


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "overrides, code",
    [
        ({"post_id": None}, "POST_ID_INVALID"),
        ({"post_id": "abc"}, "POST_ID_INVALID"),
        ({"post_id": 0}, "POST_ID_INVALID"),
        ({"persona_name": " "}, "PERSONA_REQUIRED"),
        ({"content": ""}, "CONTENT_REQUIRED"),
        ({"persona_name": "Nobody"}, "PERSONA_NOT_FOUND"),
    ],
)
async def test_create_comment_validation(repo, thread, overrides, code):
    kwargs = {"post_id": thread["post"], "persona_name": "Alice", "content": "hi"}
    kwargs.update(overrides)

    with pytest.raises(ValidationFailed) as exc_info:
        await create_comment(repo, **kwargs)
    assert exc_info.value.code == code


@pytest.mark.asyncio
async def test_comment_on_missing_post(repo, thread):
    with pytest.raises(NotFound) as exc_info:
        await create_comment(repo, post_id=777, persona_name="Alice", content="hi")
    assert exc_info.value.code == "POST_NOT_FOUND"
    assert exc_info.value.status_code == 404


@pytest.mark.asyncio
async def test_comment_on_deleted_post(repo, thread):
    await delete_post(repo, thread["post"])

    with pytest.raises(NotFound) as exc_info:
        await create_comment(repo, post_id=thread["post"], persona_name="Alice", content="hi")
    assert exc_info.value.code == "POST_NOT_FOUND"


@pytest.mark.asyncio
async def test_deleted_persona_cannot_comment(repo, thread):
    bob = await repo.find_live_persona_by_name("bob")
    await delete_persona(repo, bob.id)

    with pytest.raises(ValidationFailed) as exc_info:
        await create_comment(repo, post_id=thread["post"], persona_name="Bob", content="hi")
    assert exc_info.value.code == "PERSONA_NOT_FOUND"
