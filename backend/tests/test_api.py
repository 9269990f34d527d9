from magpress.services.identity import create_access_token
from magpress.utils.cache import cache

API = "/api/v1"

NEW_POST = {
    "title": "Hello World Today",
    "content": "word " * 10,
    "category": "Technology",
    "tags": ["intro"],
}


def _create_post(client, headers, **overrides):
    resp = client.post(f"{API}/posts", json={**NEW_POST, **overrides}, headers=headers)
    assert resp.status_code == 201, resp.text
    return resp.json()


def test_ping_and_root(client):
    assert client.get("/ping").json() == {"message": "pong"}
    assert client.get("/").json()["name"] == "Magpress"


def test_health_reports_database_and_disabled_cache(client):
    resp = client.get(f"{API}/health")
    assert resp.status_code == 200
    body = resp.json()
    assert body["status"] == "healthy"
    assert body["checks"] == {"database": "healthy", "redis": "disabled"}


def test_request_id_header(client):
    resp = client.get("/ping", headers={"X-Request-ID": "abc123"})
    assert resp.headers["X-Request-ID"] == "abc123"
    assert resp.headers["X-Content-Type-Options"] == "nosniff"


def test_admin_routes_require_token(client):
    assert client.get(f"{API}/posts").status_code == 401
    assert client.post(f"{API}/posts", json=NEW_POST).status_code == 401
    bad = {"Authorization": "Bearer not-a-token"}
    assert client.get(f"{API}/posts", headers=bad).status_code == 401


def test_admin_routes_reject_non_admin(client, user_headers):
    resp = client.post(f"{API}/posts", json=NEW_POST, headers=user_headers)
    assert resp.status_code == 403


def test_admin_role_may_come_from_roles_claim(client):
    token = create_access_token({"sub": "ops-1", "role": "user", "roles": ["super_admin"]})
    resp = client.get(f"{API}/posts", headers={"Authorization": f"Bearer {token}"})
    assert resp.status_code == 200


def test_token_cookie_is_accepted(client):
    token = create_access_token({"sub": "editor-2", "role": "admin"})
    resp = client.get(f"{API}/posts", headers={"Cookie": f"mp_access_token={token}"})
    assert resp.status_code == 200


def test_create_post_links_author_from_token(client, admin_headers):
    post = _create_post(client, admin_headers)
    assert post["slug"] == "hello-world-today"
    assert post["read_time"] == 1
    assert post["status"] == "Published"
    assert post["author"]["id"] == "editor-1"
    assert post["author"]["name"] == "Editor"
    assert post["author"]["role"] == "ADMIN"


def test_create_post_validation_error_shape(client, admin_headers):
    resp = client.post(f"{API}/posts", json={"title": "Hey", "content": "short", "category": ""}, headers=admin_headers)
    assert resp.status_code == 400
    body = resp.json()
    assert body["error"] == "validation_failed"
    fields = {issue["field"] for issue in body["issues"]}
    assert {"title", "content", "category"} <= fields


def test_image_url_aliases_and_validation(client, admin_headers):
    post = _create_post(client, admin_headers, imageUrl="https://cdn.example.com/cover.jpg")
    assert post["image_url"] == "https://cdn.example.com/cover.jpg"

    resp = client.post(
        f"{API}/posts",
        json={**NEW_POST, "title": "Another Post Here", "image_url": "ftp://nope"},
        headers=admin_headers,
    )
    assert resp.status_code == 400


def test_duplicate_titles_get_unique_slugs(client, admin_headers):
    first = _create_post(client, admin_headers, title="Same Title")
    second = _create_post(client, admin_headers, title="Same Title")
    assert first["slug"] == "same-title"
    assert second["slug"].startswith("same-title-")


def test_patch_and_put_are_partial(client, admin_headers):
    post = _create_post(client, admin_headers)

    resp = client.patch(f"{API}/posts/{post['id']}", json={"featured": True}, headers=admin_headers)
    assert resp.status_code == 200
    assert resp.json()["featured"] is True
    assert resp.json()["title"] == post["title"]

    resp = client.put(f"{API}/posts/{post['id']}", json={"subtitle": "Now with subtitle"}, headers=admin_headers)
    assert resp.status_code == 200
    assert resp.json()["subtitle"] == "Now with subtitle"
    assert resp.json()["featured"] is True


def test_patch_rejects_null_for_required_fields(client, admin_headers):
    post = _create_post(client, admin_headers)
    resp = client.patch(f"{API}/posts/{post['id']}", json={"title": None}, headers=admin_headers)
    assert resp.status_code == 400


def test_patch_slug_conflict_is_409(client, admin_headers):
    first = _create_post(client, admin_headers, title="First Post Title")
    second = _create_post(client, admin_headers, title="Second Post Title")
    resp = client.patch(f"{API}/posts/{second['id']}", json={"slug": first["slug"]}, headers=admin_headers)
    assert resp.status_code == 409
    assert resp.json()["detail"]["error"] == "conflict"
    assert resp.json()["detail"]["field"] == "slug"


def test_missing_post_is_404(client, admin_headers):
    assert client.get(f"{API}/posts/999", headers=admin_headers).status_code == 404
    assert client.patch(f"{API}/posts/999", json={"featured": True}, headers=admin_headers).status_code == 404
    assert client.delete(f"{API}/posts/999", headers=admin_headers).status_code == 404


def test_admin_list_sees_drafts_public_list_does_not(client, admin_headers):
    _create_post(client, admin_headers, title="Visible Post")
    _create_post(client, admin_headers, title="Hidden Draft", status="Draft")

    admin = client.get(f"{API}/posts", headers=admin_headers).json()
    assert admin["total"] == 2
    drafts = client.get(f"{API}/posts", params={"status": "Draft"}, headers=admin_headers).json()
    assert [p["title"] for p in drafts["posts"]] == ["Hidden Draft"]

    public = client.get(f"{API}/public/posts").json()
    assert public["total"] == 1
    assert public["total_pages"] == 1
    assert [p["title"] for p in public["posts"]] == ["Visible Post"]


def test_public_pagination(client, admin_headers):
    for i in range(3):
        _create_post(client, admin_headers, title=f"Paged Post {i}")
    page = client.get(f"{API}/public/posts", params={"page": 2, "size": 2}).json()
    assert page["total"] == 3
    assert page["total_pages"] == 2
    assert len(page["posts"]) == 1


def test_public_detail_hides_drafts(client, admin_headers):
    draft = _create_post(client, admin_headers, status="Draft")
    assert client.get(f"{API}/public/posts/{draft['id']}").status_code == 404
    assert client.get(f"{API}/public/posts/slug/{draft['slug']}").status_code == 404

    client.post(f"{API}/posts/{draft['id']}/status", json={"status": "Published"}, headers=admin_headers)
    assert client.get(f"{API}/public/posts/{draft['id']}").status_code == 200


def test_read_by_slug_counts_views(client, admin_headers):
    post = _create_post(client, admin_headers)
    client.get(f"{API}/public/posts/slug/{post['slug']}")
    resp = client.get(f"{API}/public/posts/slug/{post['slug']}")
    assert resp.status_code == 200
    assert resp.json()["views"] == 2


def test_comment_flow(client, admin_headers):
    post = _create_post(client, admin_headers)

    resp = client.post(
        f"{API}/comments",
        json={"postId": post["id"], "name": "Reader", "content": "Loved this post", "email": "r@example.com"},
    )
    assert resp.status_code == 201
    comment = resp.json()
    assert comment["status"] == "Pending"

    # 待审核的评论不公开
    assert client.get(f"{API}/comments", params={"post_id": post["id"]}).json() == []

    queue = client.get(f"{API}/comments/admin", params={"status": "Pending"}, headers=admin_headers).json()
    assert queue["total"] == 1
    assert queue["comments"][0]["post_slug"] == post["slug"]

    resp = client.post(f"{API}/comments/{comment['id']}/approve", headers=admin_headers)
    assert resp.status_code == 200
    assert resp.json()["status"] == "Approved"

    visible = client.get(f"{API}/comments", params={"post_id": post["id"]}).json()
    assert [c["id"] for c in visible] == [comment["id"]]

    detail = client.get(f"{API}/posts/{post['id']}", headers=admin_headers).json()
    assert detail["comments_count"] == 1

    assert client.delete(f"{API}/comments/{comment['id']}", headers=admin_headers).json() == {"success": True}
    assert client.delete(f"{API}/comments/{comment['id']}", headers=admin_headers).status_code == 404


def test_comment_on_missing_post(client):
    resp = client.post(f"{API}/comments", json={"post_id": 4040, "name": "Reader", "content": "hello there"})
    assert resp.status_code == 400
    assert resp.json()["detail"]["error"] == "foreign_key_error"


def test_comment_validation(client):
    resp = client.post(f"{API}/comments", json={"post_id": 1, "name": "A", "content": "hello"})
    assert resp.status_code == 400
    assert resp.json()["error"] == "validation_failed"


def test_comment_listing_needs_valid_post_id(client):
    assert client.get(f"{API}/comments").status_code == 400
    assert client.get(f"{API}/comments", params={"post_id": 0}).status_code == 400


def test_comment_moderation_requires_admin(client, user_headers):
    assert client.get(f"{API}/comments/admin").status_code == 401
    assert client.get(f"{API}/comments/admin", headers=user_headers).status_code == 403
    assert client.post(f"{API}/comments/1/approve", headers=user_headers).status_code == 403


def test_delete_post_removes_comments(client, admin_headers):
    post = _create_post(client, admin_headers)
    client.post(f"{API}/comments", json={"post_id": post["id"], "name": "Reader", "content": "bye bye post"})

    assert client.delete(f"{API}/posts/{post['id']}", headers=admin_headers).json() == {"success": True}
    assert client.get(f"{API}/posts/{post['id']}", headers=admin_headers).status_code == 404
    queue = client.get(f"{API}/comments/admin", headers=admin_headers).json()
    assert queue["total"] == 0


def test_newsletter_subscribe(client):
    resp = client.post(f"{API}/newsletter/subscribe", json={"email": "fan@example.com"})
    assert resp.status_code == 200
    assert resp.json() == {"message": "订阅成功"}

    assert client.post(f"{API}/newsletter/subscribe", json={"email": "nope"}).status_code == 400


def test_oversized_ids_are_rejected_as_bad_input(client, admin_headers):
    huge = 2**63
    assert client.get(f"{API}/public/posts/{huge}").status_code == 400
    assert client.get(f"{API}/posts/{huge}", headers=admin_headers).status_code == 400
    assert client.patch(f"{API}/posts/{huge}", json={"featured": True}, headers=admin_headers).status_code == 400
    assert client.put(f"{API}/posts/{huge}", json={"featured": True}, headers=admin_headers).status_code == 400
    assert client.post(f"{API}/posts/{huge}/status", json={"status": "Draft"}, headers=admin_headers).status_code == 400
    assert client.delete(f"{API}/posts/{huge}", headers=admin_headers).status_code == 400
    assert client.get(f"{API}/comments", params={"post_id": huge}).status_code == 400
    assert client.get(f"{API}/comments/admin/post/{huge}", headers=admin_headers).status_code == 400
    assert client.post(f"{API}/comments/{huge}/approve", headers=admin_headers).status_code == 400
    assert client.delete(f"{API}/comments/{huge}", headers=admin_headers).status_code == 400

    resp = client.post(f"{API}/comments", json={"postId": huge, "name": "Reader", "content": "hello there"})
    assert resp.status_code == 400
    assert resp.json()["error"] == "validation_failed"


def test_largest_valid_id_is_not_found(client, admin_headers):
    assert client.get(f"{API}/public/posts/{2**31 - 1}").status_code == 404
    assert client.delete(f"{API}/comments/{2**31 - 1}", headers=admin_headers).status_code == 404


def test_read_by_slug_invalidates_cached_detail(client, admin_headers, monkeypatch):
    deleted = []

    async def record_delete(key):
        deleted.append(key)
        return True

    monkeypatch.setattr(cache, "delete", record_delete)

    post = _create_post(client, admin_headers)
    client.get(f"{API}/public/posts/slug/{post['slug']}")
    assert f"posts:p:detail:{post['id']}" in deleted


def test_post_author_without_name_uses_display_defaults(client):
    token = create_access_token({"sub": "faceless", "role": "admin"})
    post = _create_post(client, {"Authorization": f"Bearer {token}"})
    assert post["author"]["name"] == "Unknown Author"
    assert post["author"]["avatar"] == "/default-avatar.png"
