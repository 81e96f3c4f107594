"""
测试文章生命周期：创建、编辑、状态切换、删除与查询
"""
from pathlib import Path

import pytest

from app.schemas.post import PostStatus
from app.services.results import ErrorKind
from app.services.slugs import SLUG_MAX_LENGTH
from app.services.uploads import UploadedFile
from app.store.base import DuplicateDocument, StoreError
from conftest import ADMIN_ID, OTHER_WRITER_ID, READER_ID, WRITER_ID, add_profile, make_form

PNG = UploadedFile(filename="cover.png", content_type="image/png", content=b"\x89PNG data")


async def test_create_post_is_pending_with_derived_slug(services, seeded):
    result = await services.posts.create_post(WRITER_ID, make_form(categoryId=seeded["category_id"]))
    assert result.success
    assert result.message == "Post created successfully! It is now pending approval."
    post = result.data
    assert post.status == PostStatus.PENDING
    assert post.authorId == WRITER_ID
    assert post.categoryName == "Technology"
    assert post.viewCount == 0
    assert post.slug.startswith("a-fairly-long-post-title-for-tests-")


async def test_create_requires_login_and_profile(services, seeded):
    form = make_form(categoryId=seeded["category_id"])
    result = await services.posts.create_post(None, form)
    assert result.errorKind == ErrorKind.NOT_AUTHENTICATED

    result = await services.posts.create_post("nobody", form)
    assert result.errorKind == ErrorKind.NOT_FOUND
    assert result.error == "Please create a profile first"


@pytest.mark.parametrize("overrides, message", [
    ({"title": ""}, "Title is required"),
    ({"title": "short"}, "Title must be at least 10 characters"),
    ({"description": "two words"}, "Description must have at least 3 words"),
    ({"content": "<p>too few</p>"}, "Content must have at least 5 words"),
    ({"categoryId": ""}, "Category is required"),
    ({"slug": "Bad Slug"}, "Slug can only contain lowercase letters, numbers, and hyphens"),
])
async def test_create_validation(services, seeded, overrides, message):
    data = {"categoryId": seeded["category_id"]}
    data.update(overrides)
    result = await services.posts.create_post(WRITER_ID, make_form(**data))
    assert result.errorKind == ErrorKind.VALIDATION_FAILED
    assert result.error == message


async def test_create_with_unknown_category(services, seeded):
    result = await services.posts.create_post(WRITER_ID, make_form(categoryId="missing"))
    assert result.errorKind == ErrorKind.NOT_FOUND


async def test_identical_titles_get_distinct_slugs(services, seeded):
    form = make_form(categoryId=seeded["category_id"])
    first = await services.posts.create_post(WRITER_ID, form)
    second = await services.posts.create_post(WRITER_ID, form)
    assert first.data.slug != second.data.slug


async def test_supplied_slug_conflict(services, seeded):
    form = make_form(categoryId=seeded["category_id"], slug="my-custom-slug")
    assert (await services.posts.create_post(WRITER_ID, form)).success
    result = await services.posts.create_post(WRITER_ID, form)
    assert result.errorKind == ErrorKind.CONFLICT
    assert result.error == "Slug already exists. Please choose a different one."


def blob_files(settings):
    return sorted(p for p in Path(settings.BLOB_ROOT).rglob("*") if p.is_file())


async def test_slug_conflict_removes_uploaded_images(services, settings, seeded):
    form = make_form(categoryId=seeded["category_id"], slug="fixed-slug")
    assert (await services.posts.create_post(WRITER_ID, form)).success
    before = blob_files(settings)

    result = await services.posts.create_post(WRITER_ID, form, thumbnail=PNG, background_images=[PNG, PNG])
    assert result.errorKind == ErrorKind.CONFLICT
    assert blob_files(settings) == before


async def test_store_failure_removes_uploaded_images(services, settings, seeded, monkeypatch):
    async def broken(*args, **kwargs):
        raise StoreError("database unavailable")

    monkeypatch.setattr(services.store, "create", broken)
    result = await services.posts.create_post(
        WRITER_ID, make_form(categoryId=seeded["category_id"]), thumbnail=PNG, background_images=[PNG],
    )
    assert result.errorKind == ErrorKind.UPSTREAM_FAILURE
    assert result.error == "database unavailable"
    assert blob_files(settings) == []


async def test_overlong_slug_is_a_validation_error(services, seeded):
    form = make_form(categoryId=seeded["category_id"], slug="a" * (SLUG_MAX_LENGTH + 1))
    result = await services.posts.create_post(WRITER_ID, form)
    assert result.errorKind == ErrorKind.VALIDATION_FAILED
    assert result.error == f"Slug must be at most {SLUG_MAX_LENGTH} characters"


async def test_derived_slug_retries_on_collision(services, seeded, monkeypatch):
    """生成的slug撞车时换新后缀重试"""
    slugs = iter(["taken-111111", "free-222222"])
    monkeypatch.setattr("app.services.post_service.derive_slug", lambda title: next(slugs))
    await services.store.create(services.settings.POST_COLLECTION, "old", {"slug": "taken-111111"}, unique=("slug",))

    result = await services.posts.create_post(WRITER_ID, make_form(categoryId=seeded["category_id"]))
    assert result.success
    assert result.data.slug == "free-222222"


async def test_derived_slug_gives_up_after_max_attempts(services, seeded, monkeypatch):
    async def always_taken(*args, **kwargs):
        raise DuplicateDocument("posts", "slug")

    monkeypatch.setattr(services.store, "create", always_taken)
    result = await services.posts.create_post(WRITER_ID, make_form(categoryId=seeded["category_id"]))
    assert result.errorKind == ErrorKind.CONFLICT


async def test_create_uploads_thumbnail_and_collects_content_images(services, seeded):
    image_url = "http://testserver/storage/buckets/images/files/abc/view?project=inkwell-test"
    content = f'<p>{" ".join(["word"] * 6)}</p><img src="{image_url}"><img src="data:image/png;base64,xx">'
    form = make_form(categoryId=seeded["category_id"], content=content)

    result = await services.posts.create_post(WRITER_ID, form, thumbnail=PNG)
    assert result.success
    assert result.data.thumbnail.startswith("http://testserver/storage/buckets/images/files/")
    assert result.data.backgroundImages == [image_url]


async def test_create_rejects_bad_image(services, seeded):
    bad = UploadedFile(filename="x.txt", content_type="text/plain", content=b"text")
    result = await services.posts.create_post(WRITER_ID, make_form(categoryId=seeded["category_id"]), thumbnail=bad)
    assert result.errorKind == ErrorKind.VALIDATION_FAILED


async def test_update_keeps_slug_author_and_status(services, seeded, post):
    await services.posts.update_post_status(ADMIN_ID, post.id, "published")
    form = make_form(title="A brand new title for this post", categoryId=seeded["category_id"])

    result = await services.posts.update_post(WRITER_ID, post.id, form)
    assert result.success
    updated = result.data
    assert updated.title == "A brand new title for this post"
    assert updated.slug == post.slug
    assert updated.authorId == WRITER_ID
    assert updated.status == PostStatus.PUBLISHED


async def test_update_rejects_slug_change(services, seeded, post):
    form = make_form(categoryId=seeded["category_id"], slug="another-slug")
    result = await services.posts.update_post(WRITER_ID, post.id, form)
    assert result.errorKind == ErrorKind.VALIDATION_FAILED

    same = make_form(categoryId=seeded["category_id"], slug=post.slug)
    assert (await services.posts.update_post(WRITER_ID, post.id, same)).success


async def test_update_by_stranger_and_admin(services, seeded, post):
    form = make_form(categoryId=seeded["category_id"])
    denied = await services.posts.update_post(OTHER_WRITER_ID, post.id, form)
    assert denied.errorKind == ErrorKind.NOT_AUTHORIZED
    assert denied.error == "You can only update your own posts"

    assert (await services.posts.update_post(ADMIN_ID, post.id, form)).success


async def test_update_missing_post(services, seeded):
    result = await services.posts.update_post(WRITER_ID, "missing", make_form(categoryId=seeded["category_id"]))
    assert result.errorKind == ErrorKind.NOT_FOUND


async def test_status_transitions_are_free(services, post):
    for status in ["published", "rejected", "pending", "published", "pending"]:
        result = await services.posts.update_post_status(WRITER_ID, post.id, status)
        assert result.success
        assert result.data.status.value == status


async def test_invalid_status(services, post):
    result = await services.posts.update_post_status(WRITER_ID, post.id, "archived")
    assert result.errorKind == ErrorKind.VALIDATION_FAILED


async def test_status_change_by_stranger_denied(services, post):
    result = await services.posts.update_post_status(READER_ID, post.id, "published")
    assert result.errorKind == ErrorKind.NOT_AUTHORIZED


async def test_lifecycle_owner_delete_blocked_while_published(services, post):
    """待审核 -> 发布（无法删除）-> 驳回（可以删除）"""
    assert (await services.posts.update_post_status(WRITER_ID, post.id, "published")).success

    denied = await services.posts.delete_post(WRITER_ID, post.id)
    assert denied.errorKind == ErrorKind.NOT_AUTHORIZED
    assert denied.error == "Published posts cannot be deleted. Unpublish the post first."

    assert (await services.posts.update_post_status(WRITER_ID, post.id, "rejected")).success
    deleted = await services.posts.delete_post(WRITER_ID, post.id)
    assert deleted.success
    assert (await services.posts.get_post_by_slug(post.slug)).errorKind == ErrorKind.NOT_FOUND


async def test_admin_deletes_published_post(services, post):
    await services.posts.update_post_status(ADMIN_ID, post.id, "published")
    assert (await services.posts.delete_post(ADMIN_ID, post.id)).success


async def test_stranger_cannot_delete(services, post):
    result = await services.posts.delete_post(OTHER_WRITER_ID, post.id)
    assert result.error == "You can only delete your own posts"


async def test_get_post_by_slug_includes_author_category_and_likes(services, post):
    await services.likes.toggle_like(READER_ID, post.id)
    result = await services.posts.get_post_by_slug(post.slug, viewer_id=READER_ID)
    detail = result.data
    assert detail.author.name == "Writer-1"
    assert detail.category.name == "Technology"
    assert detail.likes == 1
    assert detail.userLiked is True


async def test_get_post_for_edit(services, post):
    assert (await services.posts.get_post_for_edit(WRITER_ID, post.id)).success
    assert (await services.posts.get_post_for_edit(ADMIN_ID, post.id)).success
    denied = await services.posts.get_post_for_edit(OTHER_WRITER_ID, post.id)
    assert denied.error == "You can only edit your own posts"


async def test_listings(services, seeded, post):
    other = await services.posts.create_post(OTHER_WRITER_ID, make_form(categoryId=seeded["category_id"]))
    await services.posts.update_post_status(ADMIN_ID, other.data.id, "published")

    mine = (await services.posts.list_current_user_posts(WRITER_ID)).data
    assert [p.id for p in mine] == [post.id]
    assert mine[0].canEdit is True

    published = (await services.posts.list_published_posts()).data
    assert [p.id for p in published] == [other.data.id]

    by_category = (await services.posts.list_posts_by_category("Technology")).data
    assert [p.id for p in by_category] == [other.data.id]

    assert len((await services.posts.list_posts_for_admin(ADMIN_ID)).data) == 2
    denied = await services.posts.list_posts_for_admin(WRITER_ID)
    assert denied.errorKind == ErrorKind.NOT_AUTHORIZED


async def test_published_post_not_editable_in_owner_dashboard(services, post):
    await services.posts.update_post_status(ADMIN_ID, post.id, "published")
    mine = (await services.posts.list_current_user_posts(WRITER_ID)).data
    assert mine[0].canEdit is False


async def test_increment_views(services, post):
    assert (await services.posts.increment_views(post.slug)).data == 1
    assert (await services.posts.increment_views(post.slug)).data == 2
    assert (await services.posts.get_post_by_slug(post.slug)).data.viewCount == 2


async def test_store_failure_becomes_upstream_failure(services, post, monkeypatch):
    async def broken(*args, **kwargs):
        raise RuntimeError("backend unavailable")

    monkeypatch.setattr(services.store, "get", broken)
    result = await services.posts.delete_post(WRITER_ID, post.id)
    assert result.errorKind == ErrorKind.UPSTREAM_FAILURE
    assert result.error == "backend unavailable"


async def test_debug_admin_access(services, seeded):
    result = await services.posts.debug_admin_access(ADMIN_ID)
    assert result.data == {"userId": ADMIN_ID, "isAdmin": True, "adminCollection": "admins"}
    assert (await services.posts.debug_admin_access(None)).errorKind == ErrorKind.NOT_AUTHENTICATED


async def test_upload_image(services):
    result = await services.posts.upload_image(WRITER_ID, PNG)
    assert result.success
    assert "/storage/buckets/images/files/" in result.data
    assert (await services.posts.upload_image(None, PNG)).errorKind == ErrorKind.NOT_AUTHENTICATED


async def test_upload_failure_keeps_storage_message(services, monkeypatch):
    async def rejected(*args, **kwargs):
        raise StoreError("Storage bucket with the requested ID could not be found.")

    monkeypatch.setattr(services.blobs, "upload", rejected)
    result = await services.posts.upload_image(WRITER_ID, PNG)
    assert result.errorKind == ErrorKind.UPSTREAM_FAILURE
    assert result.error == (
        "Failed to upload image cover.png: Storage bucket with the requested ID could not be found."
    )
