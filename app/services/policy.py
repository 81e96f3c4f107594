"""
文章授权策略

每次变更操作都重新计算，不跨调用缓存。
拒绝结果携带可读的原因，由调用方转换为 NotAuthorized。
"""
from dataclasses import dataclass
from typing import Optional

from app.schemas.post import Post, PostStatus


@dataclass(frozen=True)
class Decision:
    allowed: bool
    reason: Optional[str] = None

    def __bool__(self):
        return self.allowed


ALLOW = Decision(True)


def can_modify(caller_id: Optional[str], post: Post, is_admin: bool) -> bool:
    """管理员或文章作者可以修改"""
    if is_admin:
        return True
    return bool(caller_id) and post.authorId == caller_id


def check_edit(caller_id: Optional[str], post: Post, is_admin: bool) -> Decision:
    # 服务端不禁止作者编辑已发布的文章，见 can_owner_edit
    if can_modify(caller_id, post, is_admin):
        return ALLOW
    return Decision(False, "You can only update your own posts")


def check_status_change(caller_id: Optional[str], post: Post, is_admin: bool) -> Decision:
    if can_modify(caller_id, post, is_admin):
        return ALLOW
    return Decision(False, "You can only update your own posts")


def check_delete(caller_id: Optional[str], post: Post, is_admin: bool) -> Decision:
    """作者只能删除未发布的文章，管理员不受限制"""
    if not can_modify(caller_id, post, is_admin):
        return Decision(False, "You can only delete your own posts")
    if not is_admin and post.status == PostStatus.PUBLISHED:
        return Decision(False, "Published posts cannot be deleted. Unpublish the post first.")
    return ALLOW


def can_owner_edit(post: Post) -> bool:
    """作者后台的编辑入口：已发布的文章不再提供编辑"""
    return post.status != PostStatus.PUBLISHED
