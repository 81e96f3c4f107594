"""
测试点赞切换
"""
from app.services.container import build_services
from app.services.results import ErrorKind
from conftest import OTHER_WRITER_ID, READER_ID


async def test_double_toggle_restores_state(services, post):
    before = (await services.likes.likes_info(READER_ID, post.id)).data
    assert before.likeCount == 0 and before.userLiked is False

    liked = await services.likes.toggle_like(READER_ID, post.id)
    assert liked.data == {"liked": True, "likeCount": 1}

    unliked = await services.likes.toggle_like(READER_ID, post.id)
    assert unliked.data == {"liked": False, "likeCount": 0}

    after = (await services.likes.likes_info(READER_ID, post.id)).data
    assert after == before


async def test_likes_from_different_users_are_counted(services, post):
    await services.likes.toggle_like(READER_ID, post.id)
    await services.likes.toggle_like(OTHER_WRITER_ID, post.id)
    assert (await services.likes.like_count(post.id)).data == 2
    assert (await services.likes.user_liked(READER_ID, post.id)).data is True
    assert (await services.likes.user_liked(None, post.id)).data is False


async def test_toggle_requires_login_and_existing_post(services, post):
    assert (await services.likes.toggle_like(None, post.id)).errorKind == ErrorKind.NOT_AUTHENTICATED
    assert (await services.likes.toggle_like(READER_ID, "missing")).errorKind == ErrorKind.NOT_FOUND


async def test_likes_not_configured(settings, store, post):
    disabled = settings.model_copy(update={"LIKES_COLLECTION": None})
    services = build_services(disabled, store, blobs=None)
    result = await services.likes.toggle_like(READER_ID, post.id)
    assert result.errorKind == ErrorKind.UPSTREAM_FAILURE
    assert result.error == "Likes feature is not configured"
    # 文章详情仍然可用，点赞数为0
    detail = (await services.posts.get_post_by_slug(post.slug, READER_ID)).data
    assert detail.likes == 0
