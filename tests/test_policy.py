"""
测试文章授权策略
"""
import pytest

from app.schemas.post import Post, PostStatus
from app.services import policy


def make_post(status=PostStatus.PENDING, author="owner"):
    return Post(id="p1", authorId=author, slug="a-post-123456", title="A post", status=status)


@pytest.mark.parametrize("caller", [None, "", "owner", "stranger"])
def test_admin_can_always_modify(caller):
    for status in PostStatus:
        assert policy.can_modify(caller, make_post(status), is_admin=True)


def test_non_admin_stranger_cannot_modify():
    assert not policy.can_modify("stranger", make_post(), is_admin=False)
    assert not policy.can_modify(None, make_post(), is_admin=False)


def test_owner_can_modify():
    assert policy.can_modify("owner", make_post(), is_admin=False)


def test_owner_delete_depends_on_status():
    """作者只能删除未发布的文章"""
    assert policy.check_delete("owner", make_post(PostStatus.PENDING), False)
    assert policy.check_delete("owner", make_post(PostStatus.REJECTED), False)

    decision = policy.check_delete("owner", make_post(PostStatus.PUBLISHED), False)
    assert not decision
    assert decision.reason == "Published posts cannot be deleted. Unpublish the post first."


def test_admin_can_delete_published():
    assert policy.check_delete("admin", make_post(PostStatus.PUBLISHED), True)


def test_stranger_denials_carry_reasons():
    post = make_post()
    assert policy.check_edit("x", post, False).reason == "You can only update your own posts"
    assert policy.check_status_change("x", post, False).reason == "You can only update your own posts"
    assert policy.check_delete("x", post, False).reason == "You can only delete your own posts"


def test_owner_edit_affordance_hidden_once_published():
    assert policy.can_owner_edit(make_post(PostStatus.PENDING))
    assert policy.can_owner_edit(make_post(PostStatus.REJECTED))
    assert not policy.can_owner_edit(make_post(PostStatus.PUBLISHED))
