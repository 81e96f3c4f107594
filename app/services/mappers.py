"""
存储文档与业务实体之间的映射

业务逻辑只接触这里产出的实体，不直接读取存储返回的原始字段
"""
from typing import Any, Dict, List, Optional

from app.schemas.auth import LoginCode, User
from app.schemas.category import Category
from app.schemas.comment import Comment
from app.schemas.engagement import Like, SavedPost
from app.schemas.post import Post, PostStatus
from app.schemas.profile import Profile, ProfileRole
from app.store.base import CREATED_FIELD, ID_FIELD, UPDATED_FIELD, RawDocument


def _as_list(value: Any) -> List[str]:
    if not value:
        return []
    if isinstance(value, str):
        return [value]
    return [str(v) for v in value]


def _status(value: Any) -> PostStatus:
    # 历史数据可能没有状态字段，按待审核处理
    try:
        return PostStatus(value or PostStatus.PENDING.value)
    except ValueError:
        return PostStatus.PENDING


def to_post(doc: RawDocument) -> Post:
    return Post(
        id=doc[ID_FIELD],
        authorId=str(doc.get("author_id") or ""),
        profileId=doc.get("profile_id"),
        slug=doc.get("slug") or "",
        status=_status(doc.get("status")),
        title=doc.get("title") or "",
        description=doc.get("description") or "",
        content=doc.get("content") or "",
        categoryId=doc.get("category_id"),
        categoryName=doc.get("category_name"),
        thumbnail=doc.get("thumbnail") or None,
        backgroundImages=_as_list(doc.get("bg_image")),
        viewCount=int(doc.get("views") or 0),
        createdAt=doc.get(CREATED_FIELD),
        updatedAt=doc.get(UPDATED_FIELD),
    )


def post_fields(
    title: str,
    description: str,
    content: str,
    category_id: str,
    category_name: Optional[str],
    thumbnail: Optional[str],
    background_images: List[str],
) -> Dict[str, Any]:
    """可编辑字段的存储形式"""
    fields: Dict[str, Any] = {
        "title": title,
        "description": description,
        "content": content,
        "category_id": category_id,
        "category_name": category_name,
    }
    if background_images:
        fields["bg_image"] = background_images
    if thumbnail:
        fields["thumbnail"] = thumbnail
    return fields


def to_profile(doc: RawDocument) -> Profile:
    try:
        role = ProfileRole(doc.get("role") or ProfileRole.READER.value)
    except ValueError:
        role = ProfileRole.READER
    return Profile(
        id=doc[ID_FIELD],
        authorId=str(doc.get("author_id") or ""),
        role=role,
        name=doc.get("name") or "",
        image=doc.get("image") or None,
        phone=doc.get("phone"),
        dob=doc.get("dob"),
        bio=doc.get("bio"),
        createdAt=doc.get(CREATED_FIELD),
    )


def to_category(doc: RawDocument) -> Category:
    return Category(
        id=doc[ID_FIELD],
        name=doc.get("name") or "",
        image=doc.get("image") or None,
        createdAt=doc.get(CREATED_FIELD),
    )


def to_comment(doc: RawDocument) -> Comment:
    return Comment(
        id=doc[ID_FIELD],
        postId=str(doc.get("postId") or ""),
        userId=str(doc.get("userId") or ""),
        content=doc.get("content") or "",
        createdAt=doc.get(CREATED_FIELD),
        updatedAt=doc.get(UPDATED_FIELD),
    )


def to_like(doc: RawDocument) -> Like:
    return Like(id=doc[ID_FIELD], postId=str(doc.get("post_id")), userId=str(doc.get("user_id")))


def to_saved_post(doc: RawDocument) -> SavedPost:
    return SavedPost(
        id=doc[ID_FIELD],
        postId=str(doc.get("postId")),
        userId=str(doc.get("userId")),
        createdAt=doc.get(CREATED_FIELD),
    )


def to_user(doc: RawDocument) -> User:
    return User(id=doc[ID_FIELD], email=doc.get("email") or "", createdAt=doc.get(CREATED_FIELD))


def to_login_code(doc: RawDocument) -> LoginCode:
    return LoginCode(
        id=doc[ID_FIELD],
        userId=str(doc.get("user_id")),
        code=str(doc.get("code")),
        expireAt=doc.get("expire_at"),
        used=bool(doc.get("used")),
    )
