"""
测试文章收藏
"""
from app.services.results import ErrorKind
from conftest import READER_ID, WRITER_ID, make_form


async def test_save_and_unsave(services, post):
    assert (await services.saved_posts.is_post_saved(READER_ID, post.id)).data is False
    saved = await services.saved_posts.save_post(READER_ID, post.id)
    assert saved.success
    assert (await services.saved_posts.is_post_saved(READER_ID, post.id)).data is True

    again = await services.saved_posts.save_post(READER_ID, post.id)
    assert again.errorKind == ErrorKind.CONFLICT
    assert again.error == "Post is already saved"

    assert (await services.saved_posts.unsave_post(READER_ID, post.id)).success
    assert (await services.saved_posts.unsave_post(READER_ID, post.id)).errorKind == ErrorKind.NOT_FOUND


async def test_save_requires_login_and_post(services, post):
    assert (await services.saved_posts.save_post(None, post.id)).errorKind == ErrorKind.NOT_AUTHENTICATED
    assert (await services.saved_posts.save_post(READER_ID, "missing")).errorKind == ErrorKind.NOT_FOUND
    assert (await services.saved_posts.is_post_saved(None, post.id)).data is False


async def test_list_skips_deleted_posts(services, seeded, post):
    other = (await services.posts.create_post(WRITER_ID, make_form(categoryId=seeded["category_id"]))).data
    await services.saved_posts.save_post(READER_ID, post.id)
    await services.saved_posts.save_post(READER_ID, other.id)
    await services.posts.delete_post(WRITER_ID, post.id)

    saved = (await services.saved_posts.list_saved_posts(READER_ID)).data
    assert [p.id for p in saved] == [other.id]
    assert saved[0].author.name == "Writer-1"
    assert (await services.saved_posts.saved_posts_count(READER_ID)).data == 2
    assert (await services.saved_posts.saved_posts_count(None)).data == 0
