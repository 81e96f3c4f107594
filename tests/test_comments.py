"""
测试评论功能
"""
from app.services.results import ErrorKind
from conftest import ADMIN_ID, OTHER_WRITER_ID, READER_ID, WRITER_ID


async def test_create_and_list_in_order(services, post):
    first = await services.comments.create_comment(READER_ID, post.id, "  First!  ")
    assert first.success
    assert first.data.content == "First!"
    await services.comments.create_comment(WRITER_ID, post.id, "Thanks for reading")

    comments = (await services.comments.list_comments_with_authors(post.id)).data
    assert [c.content for c in comments] == ["First!", "Thanks for reading"]
    assert comments[0].author.name == "Reader-1"
    assert (await services.comments.comment_count(post.id)).data == 2


async def test_create_validation(services, post):
    assert (await services.comments.create_comment(None, post.id, "hi")).errorKind == ErrorKind.NOT_AUTHENTICATED
    assert (await services.comments.create_comment(READER_ID, post.id, "   ")).errorKind == ErrorKind.VALIDATION_FAILED
    assert (await services.comments.create_comment(READER_ID, "missing", "hi")).errorKind == ErrorKind.NOT_FOUND


async def test_only_owner_or_admin_can_change(services, post):
    comment = (await services.comments.create_comment(READER_ID, post.id, "Hello")).data

    denied = await services.comments.update_comment(OTHER_WRITER_ID, comment.id, "Hijacked")
    assert denied.errorKind == ErrorKind.NOT_AUTHORIZED
    updated = await services.comments.update_comment(READER_ID, comment.id, "Hello again")
    assert updated.data.content == "Hello again"

    denied = await services.comments.delete_comment(OTHER_WRITER_ID, comment.id)
    assert denied.errorKind == ErrorKind.NOT_AUTHORIZED
    assert (await services.comments.delete_comment(ADMIN_ID, comment.id)).success
    assert (await services.comments.delete_comment(READER_ID, comment.id)).errorKind == ErrorKind.NOT_FOUND


async def test_admin_views(services, post):
    await services.comments.create_comment(READER_ID, post.id, "One")
    await services.comments.create_comment(READER_ID, post.id, "Two")
    await services.comments.create_comment(WRITER_ID, post.id, "Three")

    denied = await services.comments.list_all_comments(READER_ID)
    assert denied.errorKind == ErrorKind.NOT_AUTHORIZED

    all_comments = (await services.comments.list_all_comments(ADMIN_ID)).data
    assert [c.content for c in all_comments] == ["Three", "Two", "One"]
    assert all_comments[0].postSlug == post.slug

    counts = (await services.comments.users_with_comment_counts(ADMIN_ID)).data
    assert [(c.userId, c.commentCount) for c in counts] == [(READER_ID, 2), (WRITER_ID, 1)]


async def test_admin_delete_requires_admin(services, post):
    comment = (await services.comments.create_comment(READER_ID, post.id, "Hello")).data
    assert (await services.comments.admin_delete_comment(READER_ID, comment.id)).errorKind == ErrorKind.NOT_AUTHORIZED
    assert (await services.comments.admin_delete_comment(ADMIN_ID, comment.id)).success
