"""
测试个人资料
"""
from app.schemas.profile import ProfileForm
from app.services.profile_service import allowed_fields, redirect_path
from app.services.results import ErrorKind
from conftest import ADMIN_ID, READER_ID, WRITER_ID


async def test_create_writer_profile(services):
    form = ProfileForm(name="Ada", role="writer", phone="123456", bio="Hello")
    result = await services.profiles.create_profile("new-user", form)
    assert result.success
    profile = result.data["profile"]
    assert profile.role.value == "writer"
    assert profile.phone == "123456"
    assert result.data["redirectPath"] == "/authDashboard/posts"


async def test_reader_profile_drops_phone(services):
    result = await services.profiles.create_profile("new-user", ProfileForm(name="Bob", phone="123"))
    assert result.data["profile"].role.value == "reader"
    assert result.data["profile"].phone is None
    assert result.data["redirectPath"] == "/userDashboard/save"


async def test_profile_created_once(services):
    assert (await services.profiles.create_profile("u", ProfileForm(name="A"))).success
    again = await services.profiles.create_profile("u", ProfileForm(name="B"))
    assert again.errorKind == ErrorKind.CONFLICT


async def test_create_validation(services):
    assert (await services.profiles.create_profile(None, ProfileForm(name="A"))).errorKind == ErrorKind.NOT_AUTHENTICATED
    assert (await services.profiles.create_profile("u", ProfileForm(name=" "))).errorKind == ErrorKind.VALIDATION_FAILED
    bad_role = await services.profiles.create_profile("u", ProfileForm(name="A", role="admin"))
    assert bad_role.errorKind == ErrorKind.VALIDATION_FAILED


async def test_update_own_profile_only(services, seeded):
    profile = (await services.profiles.get_profile(WRITER_ID)).data

    denied = await services.profiles.update_profile(READER_ID, profile.id, ProfileForm(name="Nope"))
    assert denied.errorKind == ErrorKind.NOT_AUTHORIZED

    updated = await services.profiles.update_profile(WRITER_ID, profile.id, ProfileForm(name="New Name", phone="555"))
    assert updated.data["profile"].name == "New Name"
    assert updated.data["profile"].phone == "555"


async def test_role_is_immutable(services, seeded):
    profile = (await services.profiles.get_profile(READER_ID)).data
    result = await services.profiles.update_profile(READER_ID, profile.id, ProfileForm(name="R", role="writer"))
    assert result.errorKind == ErrorKind.VALIDATION_FAILED

    kept = await services.profiles.update_profile(READER_ID, profile.id, ProfileForm(name="R", phone="999"))
    assert kept.data["profile"].role.value == "reader"
    assert kept.data["profile"].phone is None


async def test_get_profile_missing(services):
    assert (await services.profiles.get_profile("ghost")).errorKind == ErrorKind.NOT_FOUND


async def test_list_users_for_admin(services, seeded):
    await services.store.create(services.settings.USER_COLLECTION, "u1", {"email": "w@example.com"})
    denied = await services.profiles.list_users(WRITER_ID)
    assert denied.errorKind == ErrorKind.NOT_AUTHORIZED
    users = (await services.profiles.list_users(ADMIN_ID)).data
    assert [u.email for u in users] == ["w@example.com"]
    assert users[0].name is None


def test_allowed_fields_and_redirects():
    assert allowed_fields("writer") == ["name", "dob", "image", "role", "phone"]
    assert allowed_fields("reader") == ["name", "dob", "image", "role"]
    assert redirect_path(None) == "/profile/create"
    assert redirect_path("writer") == "/authDashboard/posts"
    assert redirect_path("reader") == "/userDashboard/save"
