"""Integration tests for the post management API."""

from datetime import datetime

from promptboard.models import Post

POSTS_URL = "/api/v1/posts"


class TestListPosts:
    """GET /api/v1/posts"""

    def test_requires_authentication(self, client):
        """Test that an anonymous request is rejected."""
        response = client.get(POSTS_URL)

        assert response.status_code == 401
        assert response.json()["detail"] == "Not authenticated"

    def test_rejects_invalid_token(self, client):
        """Test that a malformed bearer token is rejected."""
        response = client.get(POSTS_URL, headers={"Authorization": "Bearer not-a-token"})

        assert response.status_code == 401

    def test_lists_only_own_posts_newest_first(self, client, user, other_user, create_post, auth_headers):
        """Test that only the caller's posts are returned, newest first."""
        create_post(user, title="Older", created_at=datetime(2026, 1, 1, 9, 0))
        create_post(user, title="Newer", created_at=datetime(2026, 1, 2, 9, 0))
        create_post(other_user, title="Not mine")

        response = client.get(POSTS_URL, headers=auth_headers(user))

        assert response.status_code == 200
        payload = response.json()
        assert payload["success"] is True
        assert payload["total"] == 2
        assert [post["title"] for post in payload["data"]] == ["Newer", "Older"]
        assert all(post["author_id"] == user.user_id for post in payload["data"])

    def test_paginates(self, client, user, create_post, auth_headers):
        """Test page/per_page handling and pagination metadata."""
        for day in range(1, 6):
            create_post(user, title=f"Post {day}", created_at=datetime(2026, 1, day))

        response = client.get(POSTS_URL, params={"page": 2, "per_page": 2}, headers=auth_headers(user))

        payload = response.json()
        assert [post["title"] for post in payload["data"]] == ["Post 3", "Post 2"]
        assert payload["total"] == 5
        assert payload["page"] == 2
        assert payload["limit"] == 2
        assert payload["total_pages"] == 3
        assert payload["has_next"] is True
        assert payload["has_prev"] is True

    def test_rejects_out_of_range_page_size(self, client, user, auth_headers):
        """Test that per_page outside 1..100 fails validation."""
        response = client.get(POSTS_URL, params={"per_page": 0}, headers=auth_headers(user))

        assert response.status_code == 422
        assert "per_page" in response.json()["errors"]


class TestCreatePost:
    """POST /api/v1/posts"""

    def test_creates_post_owned_by_caller(self, client, user, db_session, auth_headers):
        """Test that a post is created and owned by the authenticated user."""
        response = client.post(
            POSTS_URL,
            json={"title": "My first post", "body": "Hello world"},
            headers=auth_headers(user),
        )

        assert response.status_code == 201
        payload = response.json()
        assert payload["title"] == "My first post"
        assert payload["body"] == "Hello world"
        assert payload["author_id"] == user.user_id
        assert db_session.get(Post, payload["id"]) is not None

    def test_ignores_forged_author_id(self, client, user, other_user, db_session, auth_headers):
        """Test that a client-supplied author_id never changes ownership."""
        response = client.post(
            POSTS_URL,
            json={"title": "Sneaky", "body": "...", "author_id": other_user.user_id},
            headers=auth_headers(user),
        )

        assert response.status_code == 201
        assert response.json()["author_id"] == user.user_id
        assert db_session.get(Post, response.json()["id"]).author_id == user.user_id

    def test_missing_title_is_rejected(self, client, user, auth_headers):
        """Test field-level validation errors for a missing title."""
        response = client.post(POSTS_URL, json={"body": "No title"}, headers=auth_headers(user))

        assert response.status_code == 422
        payload = response.json()
        assert "title" in payload["errors"]
        assert payload["message"] == payload["errors"]["title"][0]

    def test_title_longer_than_255_is_rejected(self, client, user, auth_headers):
        """Test that titles are capped at 255 characters."""
        response = client.post(
            POSTS_URL,
            json={"title": "x" * 256, "body": "Too long"},
            headers=auth_headers(user),
        )

        assert response.status_code == 422
        assert "title" in response.json()["errors"]

    def test_blank_body_is_rejected(self, client, user, auth_headers):
        """Test that whitespace-only content fails validation."""
        response = client.post(POSTS_URL, json={"title": "Title", "body": "   "}, headers=auth_headers(user))

        assert response.status_code == 422
        assert "body" in response.json()["errors"]


class TestShowPost:
    """GET /api/v1/posts/{post_id}"""

    def test_owner_can_read(self, client, user, create_post, auth_headers):
        """Test that the owner can read their post."""
        post = create_post(user, title="Visible")

        response = client.get(f"{POSTS_URL}/{post.post_id}", headers=auth_headers(user))

        assert response.status_code == 200
        assert response.json()["id"] == post.post_id
        assert response.json()["title"] == "Visible"

    def test_other_user_is_forbidden(self, client, user, other_user, create_post, auth_headers):
        """Test that a non-owner gets 403 without the post content."""
        post = create_post(user, title="Private")

        response = client.get(f"{POSTS_URL}/{post.post_id}", headers=auth_headers(other_user))

        assert response.status_code == 403
        payload = response.json()
        assert payload["detail"] == "Access forbidden"
        assert "Private" not in response.text

    def test_missing_post_is_not_found(self, client, user, auth_headers):
        """Test that an unknown id yields 404."""
        response = client.get(f"{POSTS_URL}/does-not-exist", headers=auth_headers(user))

        assert response.status_code == 404
        assert response.json()["path"] == f"{POSTS_URL}/does-not-exist"


class TestUpdatePost:
    """PUT and PATCH /api/v1/posts/{post_id}"""

    def test_put_replaces_fields(self, client, user, create_post, auth_headers):
        """Test a full update by the owner."""
        post = create_post(user, title="Before", body="Old body")

        response = client.put(
            f"{POSTS_URL}/{post.post_id}",
            json={"title": "After", "body": "New body"},
            headers=auth_headers(user),
        )

        assert response.status_code == 200
        assert response.json()["title"] == "After"
        assert response.json()["body"] == "New body"

    def test_put_requires_all_fields(self, client, user, create_post, auth_headers):
        """Test that PUT validates the full payload."""
        post = create_post(user)

        response = client.put(
            f"{POSTS_URL}/{post.post_id}", json={"title": "Only title"}, headers=auth_headers(user)
        )

        assert response.status_code == 422
        assert "body" in response.json()["errors"]

    def test_patch_updates_only_given_fields(self, client, user, create_post, auth_headers):
        """Test that PATCH leaves omitted fields untouched."""
        post = create_post(user, title="Before", body="Keep me")

        response = client.patch(
            f"{POSTS_URL}/{post.post_id}", json={"title": "Renamed"}, headers=auth_headers(user)
        )

        assert response.status_code == 200
        assert response.json()["title"] == "Renamed"
        assert response.json()["body"] == "Keep me"

    def test_patch_cannot_transfer_ownership(self, client, user, other_user, create_post, auth_headers):
        """Test that author_id in an update payload is ignored."""
        post = create_post(user)

        response = client.patch(
            f"{POSTS_URL}/{post.post_id}",
            json={"author_id": other_user.user_id},
            headers=auth_headers(user),
        )

        assert response.status_code == 200
        assert response.json()["author_id"] == user.user_id

    def test_other_user_cannot_update(self, client, user, other_user, create_post, db_session, auth_headers):
        """Test that a non-owner update is rejected and nothing changes."""
        post = create_post(user, title="Original")

        response = client.put(
            f"{POSTS_URL}/{post.post_id}",
            json={"title": "Hijacked", "body": "..."},
            headers=auth_headers(other_user),
        )

        assert response.status_code == 403
        db_session.refresh(post)
        assert post.title == "Original"

    def test_ownership_checked_before_payload_validation(self, client, user, other_user, create_post, auth_headers):
        """Test that a non-owner gets 403 even with an invalid payload."""
        post = create_post(user)

        put = client.put(f"{POSTS_URL}/{post.post_id}", json={}, headers=auth_headers(other_user))
        patch = client.patch(
            f"{POSTS_URL}/{post.post_id}", json={"title": "x" * 300}, headers=auth_headers(other_user)
        )

        assert put.status_code == 403
        assert patch.status_code == 403

    def test_malformed_json_is_rejected_before_ownership(
        self, client, user, other_user, create_post, db_session, auth_headers
    ):
        """Test that an undecodable body fails with 422 before any lookup and changes nothing."""
        post = create_post(user, title="Original")
        headers = {**auth_headers(other_user), "Content-Type": "application/json"}

        response = client.put(f"{POSTS_URL}/{post.post_id}", content=b"{not json", headers=headers)

        assert response.status_code == 422
        assert "non_field" in response.json()["errors"]
        db_session.refresh(post)
        assert post.title == "Original"

    def test_update_missing_post(self, client, user, auth_headers):
        response = client.patch(f"{POSTS_URL}/missing", json={"title": "x"}, headers=auth_headers(user))

        assert response.status_code == 404


class TestDeletePost:
    """DELETE /api/v1/posts/{post_id}"""

    def test_owner_can_delete(self, client, user, create_post, auth_headers):
        """Test that the owner can delete a post."""
        post = create_post(user)

        response = client.delete(f"{POSTS_URL}/{post.post_id}", headers=auth_headers(user))

        assert response.status_code == 204
        assert response.content == b""
        follow_up = client.get(f"{POSTS_URL}/{post.post_id}", headers=auth_headers(user))
        assert follow_up.status_code == 404

    def test_other_user_cannot_delete(self, client, user, other_user, create_post, db_session, auth_headers):
        """Test that a non-owner delete is rejected and the record remains."""
        post = create_post(user)

        response = client.delete(f"{POSTS_URL}/{post.post_id}", headers=auth_headers(other_user))

        assert response.status_code == 403
        assert db_session.get(Post, post.post_id) is not None
