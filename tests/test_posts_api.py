"""API tests for /posts: ownership-based authorization and the register/login/mutate scenario."""

import unittest

from app.core.config import settings
from app.models.post import Post
from app.models.user import Role
from tests.support import add_user, bearer, clear_overrides, make_client, make_codec, make_session_factory

API = settings.API_V1_PREFIX


class PostsApiTestCase(unittest.TestCase):
    def setUp(self) -> None:
        self.session_factory = make_session_factory()
        self.codec = make_codec()
        self.client = make_client(self.session_factory, self.codec)
        with self.session_factory() as db:
            bob = add_user(db, "bob", "bobpw")
            add_user(db, "admin", "adminpw", role=Role.ADMIN)
            post = Post(title="Bob's post", content="Hello from bob.", author_id=bob.id)
            db.add(post)
            db.commit()
            self.bob_post_id = post.id

    def tearDown(self) -> None:
        clear_overrides()

    def token_for(self, username: str, password: str) -> str:
        resp = self.client.post(f"{API}/auth/login", json={"username": username, "password": password})
        self.assertEqual(resp.status_code, 200, resp.text)
        return resp.json()["token"]


class TestScenario(PostsApiTestCase):
    """Register alice, collide, fail and succeed login, then try to edit bob's post."""

    def test_full_flow(self) -> None:
        resp = self.client.post(
            f"{API}/auth/register",
            json={"username": "alice", "email": "alice@x.com", "password": "pw1"},
        )
        self.assertEqual(resp.status_code, 200)

        resp = self.client.post(
            f"{API}/auth/register",
            json={"username": "alice", "email": "alice2@x.com", "password": "pw1"},
        )
        self.assertEqual(resp.status_code, 400)
        self.assertEqual(resp.json()["detail"]["code"], "UsernameTaken")

        resp = self.client.post(f"{API}/auth/login", json={"username": "alice", "password": "wrongpw"})
        self.assertEqual(resp.status_code, 401)
        self.assertEqual(resp.json()["detail"]["code"], "InvalidCredentials")

        alice_token = self.token_for("alice", "pw1")
        update = {"title": "Hijacked", "content": "Not yours."}
        resp = self.client.put(f"{API}/posts/{self.bob_post_id}", json=update, headers=bearer(alice_token))
        self.assertEqual(resp.status_code, 403)
        self.assertEqual(resp.json()["detail"]["code"], "Forbidden")

        admin_token = self.token_for("admin", "adminpw")
        resp = self.client.put(f"{API}/posts/{self.bob_post_id}", json=update, headers=bearer(admin_token))
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(resp.json()["title"], "Hijacked")


class TestPostOwnership(PostsApiTestCase):
    def setUp(self) -> None:
        super().setUp()
        with self.session_factory() as db:
            add_user(db, "carol", "carolpw")
        self.bob = self.token_for("bob", "bobpw")
        self.carol = self.token_for("carol", "carolpw")
        self.admin = self.token_for("admin", "adminpw")

    def test_create_sets_author_to_caller(self) -> None:
        resp = self.client.post(
            f"{API}/posts", json={"title": "Mine", "content": "Body"}, headers=bearer(self.carol)
        )
        self.assertEqual(resp.status_code, 201)
        me = self.client.get(f"{API}/auth/me", headers=bearer(self.carol)).json()
        self.assertEqual(resp.json()["author_id"], me["id"])

    def test_owner_can_update_and_delete(self) -> None:
        resp = self.client.put(
            f"{API}/posts/{self.bob_post_id}",
            json={"title": "Edited", "content": "Edited body"},
            headers=bearer(self.bob),
        )
        self.assertEqual(resp.status_code, 200)
        resp = self.client.delete(f"{API}/posts/{self.bob_post_id}", headers=bearer(self.bob))
        self.assertEqual(resp.status_code, 204)
        resp = self.client.get(f"{API}/posts/{self.bob_post_id}", headers=bearer(self.bob))
        self.assertEqual(resp.status_code, 404)

    def test_other_user_cannot_delete(self) -> None:
        resp = self.client.delete(f"{API}/posts/{self.bob_post_id}", headers=bearer(self.carol))
        self.assertEqual(resp.status_code, 403)
        resp = self.client.get(f"{API}/posts/{self.bob_post_id}", headers=bearer(self.carol))
        self.assertEqual(resp.status_code, 200)

    def test_admin_can_delete_any_post(self) -> None:
        resp = self.client.delete(f"{API}/posts/{self.bob_post_id}", headers=bearer(self.admin))
        self.assertEqual(resp.status_code, 204)

    def test_missing_post_is_404_before_ownership(self) -> None:
        resp = self.client.put(
            f"{API}/posts/9999", json={"title": "x", "content": "y"}, headers=bearer(self.carol)
        )
        self.assertEqual(resp.status_code, 404)
        self.assertEqual(resp.json()["detail"]["code"], "NotFound")

    def test_any_user_can_read(self) -> None:
        resp = self.client.get(f"{API}/posts", headers=bearer(self.carol))
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(len(resp.json()["posts"]), 1)

    def test_my_posts_only_lists_own(self) -> None:
        self.client.post(f"{API}/posts", json={"title": "C1", "content": "c"}, headers=bearer(self.carol))
        mine = self.client.get(f"{API}/posts/mine", headers=bearer(self.carol)).json()["posts"]
        self.assertEqual([p["title"] for p in mine], ["C1"])
        bobs = self.client.get(f"{API}/posts/mine", headers=bearer(self.bob)).json()["posts"]
        self.assertEqual([p["title"] for p in bobs], ["Bob's post"])

    def test_unauthenticated_requests_are_401(self) -> None:
        self.assertEqual(self.client.get(f"{API}/posts").status_code, 401)
        resp = self.client.delete(f"{API}/posts/{self.bob_post_id}")
        self.assertEqual(resp.status_code, 401)

    def test_blank_title_is_422(self) -> None:
        resp = self.client.post(
            f"{API}/posts", json={"title": "   ", "content": "Body"}, headers=bearer(self.carol)
        )
        self.assertEqual(resp.status_code, 422)


if __name__ == "__main__":
    unittest.main()
