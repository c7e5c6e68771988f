import os
import unittest
from unittest.mock import patch

os.environ.setdefault("USE_IN_MEMORY_BACKENDS", "true")

from fastapi.testclient import TestClient
from sqlalchemy.exc import SQLAlchemyError

from mirrosocial.app import create_app
from mirrosocial.config import Settings
from mirrosocial.db import InMemoryDbClient, JobStatus
from mirrosocial.dependencies import get_db_client, get_queue_client, get_storage_client
from mirrosocial.queue import InMemoryJobQueue
from mirrosocial.storage import InMemoryStorageClient
from mirrosocial.worker import process_next


class ApiTestCase(unittest.TestCase):
    def setUp(self):
        self.client = TestClient(create_app())
        self.db = get_db_client()
        if isinstance(self.db, InMemoryDbClient):
            self.db.reset()
        storage = get_storage_client()
        if isinstance(storage, InMemoryStorageClient):
            storage.reset()
        queue = get_queue_client()
        if isinstance(queue, InMemoryJobQueue):
            queue.items.clear()

    def sign_up(self, username="alice", password="secret123"):
        email = f"{username}@example.com"
        response = self.client.post(
            "/api/auth/register",
            json={"username": username, "email": email, "password": password},
        )
        self.assertEqual(response.status_code, 201)
        login = self.client.post(
            "/api/auth/login", json={"email": email, "password": password}
        )
        self.assertEqual(login.status_code, 200)
        self.client.cookies.clear()
        payload = login.json()
        return {"Authorization": f"Bearer {payload['token']}"}, payload["user"]["id"]


class AuthApiTests(ApiTestCase):
    def test_register_rejects_duplicate_email(self):
        self.sign_up("alice")
        response = self.client.post(
            "/api/auth/register",
            json={"username": "alice2", "email": "ALICE@example.com", "password": "secret123"},
        )
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json()["detail"], "Email already registered")

    def test_login_with_wrong_password(self):
        self.sign_up("alice")
        response = self.client.post(
            "/api/auth/login", json={"email": "alice@example.com", "password": "nope123"}
        )
        self.assertEqual(response.status_code, 401)

    def test_login_sets_cookie_used_by_me(self):
        self.sign_up("alice")
        login = self.client.post(
            "/api/auth/login", json={"email": "alice@example.com", "password": "secret123"}
        )
        self.assertIn("session_token", login.cookies)
        me = self.client.get("/api/auth/me")
        self.assertEqual(me.status_code, 200)
        self.assertEqual(me.json()["username"], "alice")
        self.assertNotIn("passwordHash", me.json())

    def test_me_requires_session(self):
        response = self.client.get("/api/auth/me")
        self.assertEqual(response.status_code, 401)
        self.assertEqual(response.json()["detail"], "Unauthorized")

    def test_expired_session_is_rejected_and_removed(self):
        _, user_id = self.sign_up("alice")
        session = self.db.create_session(user_id, ttl_seconds=-1)
        response = self.client.get(
            "/api/auth/me", headers={"Authorization": f"Bearer {session.token}"}
        )
        self.assertEqual(response.status_code, 401)
        self.assertIsNone(self.db.get_session(session.token))

    def test_logout_ends_session(self):
        headers, _ = self.sign_up("alice")
        self.assertEqual(self.client.post("/api/auth/logout", headers=headers).status_code, 200)
        self.assertEqual(self.client.get("/api/auth/me", headers=headers).status_code, 401)

    def test_validate_user(self):
        response = self.client.get("/api/auth/validate-user")
        self.assertEqual(response.status_code, 401)
        self.assertEqual(response.json(), {"valid": False, "reason": "No session"})

        headers, user_id = self.sign_up("alice")
        response = self.client.get("/api/auth/validate-user", headers=headers)
        self.assertEqual(response.status_code, 200)
        self.assertTrue(response.json()["valid"])
        self.assertEqual(response.json()["userId"], user_id)

        del self.db.users[user_id]
        response = self.client.get("/api/auth/validate-user", headers=headers)
        self.assertEqual(response.status_code, 404)
        self.assertEqual(response.json()["reason"], "User not found in database")


class PostsApiTests(ApiTestCase):
    def test_create_text_post_and_list(self):
        headers, user_id = self.sign_up("alice")
        response = self.client.post("/api/posts", data={"content": "  Hello  "}, headers=headers)
        self.assertEqual(response.status_code, 201)
        post = response.json()["post"]
        self.assertEqual(post["content"], "Hello")
        self.assertEqual(post["user"]["username"], "alice")

        listing = self.client.get("/api/posts", headers=headers)
        self.assertEqual(listing.status_code, 200)
        posts = listing.json()["posts"]
        self.assertEqual(len(posts), 1)
        self.assertEqual(posts[0]["userId"], user_id)
        self.assertEqual(posts[0]["likes"], 0)
        self.assertFalse(posts[0]["isLiked"])

    def test_create_post_requires_content_or_media(self):
        headers, _ = self.sign_up("alice")
        response = self.client.post("/api/posts", data={"content": "   "}, headers=headers)
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json()["detail"], "Content or media is required")

    def test_create_post_with_image_uploads_to_storage(self):
        headers, _ = self.sign_up("alice")
        response = self.client.post(
            "/api/posts",
            data={"content": "pic"},
            files={"media": ("photo.PNG", b"\x89PNG data", "image/png")},
            headers=headers,
        )
        self.assertEqual(response.status_code, 201)
        post = response.json()["post"]
        self.assertIsNone(post["video"])
        self.assertIn("/post-media/", post["image"])
        self.assertTrue(post["image"].endswith(".png"))

        storage = get_storage_client()
        key = storage.key_from_url(post["image"])
        self.assertEqual(storage.stored_objects[key]["content_type"], "image/png")

    def test_create_post_rejects_non_media_file(self):
        headers, _ = self.sign_up("alice")
        response = self.client.post(
            "/api/posts",
            files={"media": ("notes.txt", b"hello", "text/plain")},
            headers=headers,
        )
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json()["detail"], "File must be an image or video")

    def test_get_post_is_public(self):
        headers, _ = self.sign_up("alice")
        post_id = self.client.post("/api/posts", data={"content": "hi"}, headers=headers).json()[
            "post"
        ]["id"]
        response = self.client.get(f"/api/posts/{post_id}")
        self.assertEqual(response.status_code, 200)
        self.assertFalse(response.json()["isLiked"])
        self.assertEqual(self.client.get("/api/posts/999").status_code, 404)

    def test_edit_post_owner_only_and_media_swap(self):
        headers, _ = self.sign_up("alice")
        other, _ = self.sign_up("bob")
        post_id = self.client.post(
            "/api/posts",
            data={"content": "clip"},
            files={"media": ("a.jpg", b"jpg", "image/jpeg")},
            headers=headers,
        ).json()["post"]["id"]

        denied = self.client.put(f"/api/posts/{post_id}", data={"content": "x"}, headers=other)
        self.assertEqual(denied.status_code, 404)
        self.assertEqual(denied.json()["detail"], "Post not found or unauthorized")

        swapped = self.client.put(
            f"/api/posts/{post_id}",
            data={"content": "now a video"},
            files={"media": ("b.mp4", b"mp4", "video/mp4")},
            headers=headers,
        )
        self.assertEqual(swapped.status_code, 200)
        self.assertIsNone(swapped.json()["image"])
        self.assertTrue(swapped.json()["video"].endswith(".mp4"))

        emptied = self.client.put(
            f"/api/posts/{post_id}", data={"content": "", "removeMedia": "true"}, headers=headers
        )
        self.assertEqual(emptied.status_code, 400)

        text_only = self.client.put(
            f"/api/posts/{post_id}",
            data={"content": "text only", "removeMedia": "true"},
            headers=headers,
        )
        self.assertEqual(text_only.status_code, 200)
        self.assertIsNone(text_only.json()["video"])

    def test_delete_post_reports_counts(self):
        headers, _ = self.sign_up("alice")
        other, _ = self.sign_up("bob")
        post_id = self.client.post("/api/posts", data={"content": "hi"}, headers=headers).json()[
            "post"
        ]["id"]
        self.client.post(f"/api/posts/{post_id}/like", headers=other)
        self.client.post(f"/api/posts/{post_id}/comments", json={"content": "nice"}, headers=other)

        forbidden = self.client.delete(f"/api/posts/{post_id}", headers=other)
        self.assertEqual(forbidden.status_code, 403)

        response = self.client.delete(f"/api/posts/{post_id}", headers=headers)
        self.assertEqual(response.status_code, 200)
        self.assertEqual(
            response.json()["deletedCounts"], {"comments": 1, "likes": 1, "post": 1}
        )
        self.assertEqual(self.client.delete(f"/api/posts/{post_id}", headers=headers).status_code, 404)

    def test_like_is_idempotent(self):
        headers, _ = self.sign_up("alice")
        post_id = self.client.post("/api/posts", data={"content": "hi"}, headers=headers).json()[
            "post"
        ]["id"]
        self.client.post(f"/api/posts/{post_id}/like", headers=headers)
        response = self.client.post(f"/api/posts/{post_id}/like", headers=headers)
        self.assertEqual(response.json(), {"liked": True, "likes": 1})
        self.assertTrue(self.client.get(f"/api/posts/{post_id}", headers=headers).json()["isLiked"])

        response = self.client.delete(f"/api/posts/{post_id}/like", headers=headers)
        self.assertEqual(response.json(), {"liked": False, "likes": 0})
        response = self.client.delete(f"/api/posts/{post_id}/like", headers=headers)
        self.assertEqual(response.json(), {"liked": False, "likes": 0})

    def test_comments_in_order(self):
        headers, _ = self.sign_up("alice")
        post_id = self.client.post("/api/posts", data={"content": "hi"}, headers=headers).json()[
            "post"
        ]["id"]
        first = self.client.post(
            f"/api/posts/{post_id}/comments", json={"content": "first"}, headers=headers
        ).json()
        self.client.post(
            f"/api/posts/{post_id}/comments",
            json={"content": "reply", "parentCommentId": first["id"]},
            headers=headers,
        )
        comments = self.client.get(f"/api/posts/{post_id}/comments", headers=headers).json()[
            "comments"
        ]
        self.assertEqual([c["content"] for c in comments], ["first", "reply"])
        self.assertEqual(comments[1]["parentCommentId"], first["id"])

    def test_database_failure_is_500(self):
        headers, _ = self.sign_up("alice")
        with patch.object(self.db, "list_posts", side_effect=SQLAlchemyError("down")):
            response = self.client.get("/api/posts", headers=headers)
        self.assertEqual(response.status_code, 500)
        self.assertEqual(response.json()["detail"], "Internal server error")


class MessagesApiTests(ApiTestCase):
    def test_send_and_read_conversation(self):
        alice, alice_id = self.sign_up("alice")
        bob, bob_id = self.sign_up("bob")

        sent = self.client.post(
            "/api/messages", json={"receiverId": bob_id, "content": "hey"}, headers=alice
        )
        self.assertEqual(sent.status_code, 201)
        self.assertEqual(sent.json()["message"]["messageType"], "text")
        self.client.post("/api/messages", json={"receiverId": alice_id, "content": "yo"}, headers=bob)

        conversation = self.client.get(f"/api/messages/{alice_id}", headers=bob).json()["messages"]
        self.assertEqual([m["content"] for m in conversation], ["hey", "yo"])

        marked = self.client.post(f"/api/messages/{alice_id}/read", headers=bob)
        self.assertEqual(marked.json(), {"updated": 1})
        marked = self.client.post(f"/api/messages/{alice_id}/read", headers=bob)
        self.assertEqual(marked.json(), {"updated": 0})

    def test_message_validation(self):
        alice, _ = self.sign_up("alice")
        _, bob_id = self.sign_up("bob")
        missing = self.client.post(
            "/api/messages", json={"receiverId": "nobody", "content": "hey"}, headers=alice
        )
        self.assertEqual(missing.status_code, 404)
        empty = self.client.post("/api/messages", json={"receiverId": bob_id}, headers=alice)
        self.assertEqual(empty.status_code, 400)

    def test_attachment_upload(self):
        alice, _ = self.sign_up("alice")
        response = self.client.post(
            "/api/messages/upload",
            files={"file": ("report.pdf", b"%PDF-1.4", "application/pdf")},
            headers=alice,
        )
        self.assertEqual(response.status_code, 200)
        payload = response.json()
        self.assertTrue(payload["success"])
        self.assertIn("/messages/", payload["url"])
        self.assertEqual(payload["size"], 8)

        rejected = self.client.post(
            "/api/messages/upload",
            files={"file": ("run.sh", b"#!/bin/sh", "application/x-sh")},
            headers=alice,
        )
        self.assertEqual(rejected.status_code, 400)
        self.assertIn("not allowed", rejected.json()["detail"])


class MaintenanceApiTests(ApiTestCase):
    def _legacy_post(self, headers):
        user_id = self.client.get("/api/auth/me", headers=headers).json()["id"]
        return self.db.create_post(
            user_id, content="old", video="https://media.mirro2.com/post-media/clip.mp4"
        )

    def test_fix_media_urls_requires_public_url(self):
        headers, _ = self.sign_up("alice")
        response = self.client.post("/api/fix-media-urls", headers=headers)
        self.assertEqual(response.status_code, 400)

    @patch("mirrosocial.routes.get_settings")
    def test_fix_media_urls_rewrites_posts(self, mock_settings):
        mock_settings.return_value = Settings(r2_public_url="https://pub.example.r2.dev")
        headers, _ = self.sign_up("alice")
        post = self._legacy_post(headers)

        response = self.client.post("/api/fix-media-urls", headers=headers)
        self.assertEqual(response.status_code, 200)
        payload = response.json()
        self.assertEqual(payload["fixed"], 1)
        self.assertEqual(
            payload["posts"][0]["fixedVideo"], "https://pub.example.r2.dev/post-media/clip.mp4"
        )
        self.assertEqual(
            self.db.get_post(post.id).video, "https://pub.example.r2.dev/post-media/clip.mp4"
        )

    @patch("mirrosocial.worker.get_settings")
    def test_fix_media_urls_job_runs_on_worker(self, mock_settings):
        mock_settings.return_value = Settings(r2_public_url="https://pub.example.r2.dev")
        headers, _ = self.sign_up("alice")
        post = self._legacy_post(headers)

        response = self.client.post("/api/maintenance/jobs/fix-media-urls", headers=headers)
        self.assertEqual(response.status_code, 202)
        job_id = response.json()["jobId"]
        self.assertEqual(response.json()["status"], "WAITING")

        self.assertTrue(process_next(db=self.db, queue=get_queue_client(), block=False))
        status = self.client.get(f"/api/maintenance/jobs/{job_id}", headers=headers).json()
        self.assertEqual(status["status"], JobStatus.SUCCESS.name)
        self.assertEqual(status["result"]["fixed"], 1)
        self.assertTrue(self.db.get_post(post.id).video.startswith("https://pub.example.r2.dev/"))

    def test_unknown_job_is_404(self):
        headers, _ = self.sign_up("alice")
        response = self.client.get("/api/maintenance/jobs/missing", headers=headers)
        self.assertEqual(response.status_code, 404)

    def test_validate_media_requires_url(self):
        response = self.client.post("/api/validate-media", json={})
        self.assertEqual(response.status_code, 400)

    @patch("mirrosocial.routes.validate_media_url")
    def test_validate_media_delegates(self, mock_validate):
        mock_validate.return_value = {"url": "https://x.test/a.png", "accessible": True}
        response = self.client.post("/api/validate-media", json={"url": "https://x.test/a.png"})
        self.assertEqual(response.status_code, 200)
        self.assertTrue(response.json()["accessible"])

    def test_storage_health_lists_missing_settings(self):
        response = self.client.get("/api/storage/health")
        self.assertEqual(response.status_code, 400)
        self.assertFalse(response.json()["success"])
        self.assertIn("R2_BUCKET_NAME", response.json()["missing"])

    def test_places_autocomplete_without_providers(self):
        self.assertEqual(self.client.get("/api/places/autocomplete").status_code, 400)
        response = self.client.get("/api/places/autocomplete", params={"input": "Berlin"})
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json(), {"predictions": []})


if __name__ == "__main__":
    unittest.main()
