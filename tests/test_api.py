"""
接口测试：httpx.AsyncClient + ASGITransport
"""
from conftest import ADMIN_ID, READER_ID, WRITER_ID, CONTENT, session_cookies


def post_payload(category_id, **overrides):
    data = {
        "title": "A fairly long post title for tests",
        "description": "a short description with enough words",
        "content": CONTENT,
        "categoryId": category_id,
    }
    data.update(overrides)
    return data


async def test_root_and_health(client):
    assert (await client.get("/health")).json() == {"status": "healthy"}
    assert (await client.get("/")).json()["app"] == "Inkwell"


async def test_create_post_requires_session(client, seeded):
    response = await client.post("/api/posts", data=post_payload(seeded["category_id"]))
    assert response.status_code == 401
    body = response.json()
    assert body["success"] is False
    assert body["errorKind"] == "NotAuthenticated"


async def test_post_lifecycle_over_http(client, settings, seeded):
    writer = session_cookies(settings, WRITER_ID)
    created = await client.post(
        "/api/posts",
        data=post_payload(seeded["category_id"]),
        files={"thumbnail": ("cover.png", b"\x89PNG", "image/png")},
        cookies=writer,
    )
    assert created.status_code == 200, created.text
    post = created.json()["data"]
    assert post["status"] == "pending"
    assert post["thumbnail"].startswith("http://testserver/storage/buckets/images/files/")

    image = await client.get(post["thumbnail"].replace("http://testserver", ""))
    assert image.status_code == 200
    assert image.content == b"\x89PNG"
    assert image.headers["content-type"] == "image/png"

    published = await client.patch(f"/api/posts/{post['id']}/status", json={"status": "published"}, cookies=writer)
    assert published.json()["data"]["status"] == "published"

    blocked = await client.delete(f"/api/posts/{post['id']}", cookies=writer)
    assert blocked.status_code == 403

    detail = await client.get(f"/api/posts/{post['slug']}")
    assert detail.json()["data"]["author"]["name"] == "Writer-1"

    admin = session_cookies(settings, ADMIN_ID)
    removed = await client.delete(f"/api/posts/{post['id']}", cookies=admin)
    assert removed.status_code == 200
    assert (await client.get(f"/api/posts/{post['slug']}")).status_code == 404


async def test_validation_maps_to_400(client, settings, seeded):
    response = await client.post(
        "/api/posts",
        data=post_payload(seeded["category_id"], title="short"),
        cookies=session_cookies(settings, WRITER_ID),
    )
    assert response.status_code == 400
    assert response.json()["message"] == "Title must be at least 10 characters"


async def test_plain_user_id_cookie_is_accepted(client, settings, seeded, post):
    response = await client.post(f"/api/posts/{post.id}/like", cookies={settings.USER_ID_COOKIE: READER_ID})
    assert response.json()["data"] == {"liked": True, "likeCount": 1}


async def test_comments_and_saved_posts(client, settings, post):
    reader = session_cookies(settings, READER_ID)
    created = await client.post(f"/api/posts/{post.id}/comments", json={"content": "Nice"}, cookies=reader)
    assert created.status_code == 200
    comments = (await client.get(f"/api/posts/{post.id}/comments")).json()["data"]
    assert comments[0]["author"]["name"] == "Reader-1"

    assert (await client.post(f"/api/saved-posts/{post.id}", cookies=reader)).status_code == 200
    assert (await client.post(f"/api/saved-posts/{post.id}", cookies=reader)).status_code == 409
    assert (await client.get("/api/saved-posts/count", cookies=reader)).json()["data"] == 1


async def test_admin_endpoints(client, settings, seeded):
    assert (await client.get("/api/admin/posts", cookies=session_cookies(settings, WRITER_ID))).status_code == 403
    response = await client.get("/api/admin/posts", cookies=session_cookies(settings, ADMIN_ID))
    assert response.status_code == 200
    debug = await client.get("/api/admin/debug", cookies=session_cookies(settings, ADMIN_ID))
    assert debug.json()["data"]["isAdmin"] is True


async def test_otp_login_sets_cookies(client, settings, sender):
    sent = await client.post("/api/auth/otp", json={"email": "new@example.com"})
    temp_token = sent.json()["data"]["tempToken"]

    verified = await client.post("/api/auth/otp/verify", json={"tempToken": temp_token, "secret": sender.last_code()})
    assert verified.status_code == 200
    assert verified.json()["data"]["redirectPath"] == "/profile/create"
    assert settings.SESSION_COOKIE in verified.cookies
    assert settings.USER_ID_COOKIE in verified.cookies

    profile = await client.post(
        "/api/profile",
        data={"name": "New Writer", "role": "writer"},
        cookies={settings.SESSION_COOKIE: verified.cookies[settings.SESSION_COOKIE]},
    )
    assert profile.status_code == 200
    assert profile.json()["data"]["redirectPath"] == "/authDashboard/posts"
    assert profile.cookies[settings.USER_ROLE_COOKIE] == "writer"

    logout = await client.post("/api/auth/logout")
    assert logout.json()["data"] == {"redirectPath": "/login"}


async def test_categories_endpoint(client, settings, seeded):
    listed = await client.get("/api/categories")
    assert [c["name"] for c in listed.json()["data"]] == ["Technology"]
    created = await client.post("/api/categories", data={"name": "Travel"}, cookies=session_cookies(settings, ADMIN_ID))
    assert created.status_code == 200
    denied = await client.post("/api/categories", data={"name": "Food"}, cookies=session_cookies(settings, WRITER_ID))
    assert denied.status_code == 403
