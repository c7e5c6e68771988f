import unittest
from unittest.mock import MagicMock, patch

import requests

from mirrosocial.db import InMemoryDbClient
from mirrosocial.maintenance import (
    VALIDATOR_USER_AGENT,
    autocomplete_places,
    rewrite_legacy_media_urls,
    validate_media_url,
)

OLD = "https://media.mirro2.com"
NEW = "https://pub.example.r2.dev"


class RewriteLegacyMediaUrlsTests(unittest.TestCase):
    def setUp(self):
        self.db = InMemoryDbClient()
        user = self.db.create_user("alice", "alice@example.com", "hash")
        self.post = self.db.create_post(
            user.id, video=f"{OLD}/post-media/v.mp4", image="https://elsewhere.test/i.jpg"
        )
        self.untouched = self.db.create_post(user.id, image=f"{NEW}/post-media/ok.jpg")
        event = self.db.create_event(
            title="Picnic",
            description="Bring snacks",
            location="Park",
            event_date="2030-06-01",
            event_time="12:00",
            created_by=user.id,
            share_token="abc",
        )
        self.media = self.db.add_event_media(
            event.id,
            user.id,
            media_url=f"{OLD}/event-videos/e.mp4",
            media_type="video",
            thumbnail_url=f"{OLD}/event-videos/e.jpg",
        )

    def test_rewrites_posts_and_event_media(self):
        report = rewrite_legacy_media_urls(self.db, OLD, NEW)
        self.assertEqual(report["fixed"], 2)
        self.assertEqual(
            report["posts"],
            [
                {
                    "id": self.post.id,
                    "originalVideo": f"{OLD}/post-media/v.mp4",
                    "originalImage": "https://elsewhere.test/i.jpg",
                    "fixedVideo": f"{NEW}/post-media/v.mp4",
                    "fixedImage": "https://elsewhere.test/i.jpg",
                }
            ],
        )
        self.assertEqual(self.db.get_post(self.post.id).video, f"{NEW}/post-media/v.mp4")
        media = self.db.get_event_media(self.media.event_id, self.media.id)
        self.assertEqual(media.media_url, f"{NEW}/event-videos/e.mp4")
        self.assertEqual(media.thumbnail_url, f"{NEW}/event-videos/e.jpg")

        # Second pass has nothing left to fix.
        self.assertEqual(rewrite_legacy_media_urls(self.db, OLD, NEW)["fixed"], 0)

    def test_dry_run_reports_without_writing(self):
        report = rewrite_legacy_media_urls(self.db, OLD, NEW, dry_run=True)
        self.assertEqual(report["fixed"], 2)
        self.assertEqual(self.db.get_post(self.post.id).video, f"{OLD}/post-media/v.mp4")


class ValidateMediaUrlTests(unittest.TestCase):
    @patch("mirrosocial.maintenance.requests.head")
    def test_reachable(self, mock_head):
        mock_head.return_value = MagicMock(
            ok=True,
            status_code=200,
            reason="OK",
            headers={"content-type": "video/mp4", "content-length": "42"},
        )
        result = validate_media_url("https://cdn.test/v.mp4", timeout=3)
        self.assertTrue(result["accessible"])
        self.assertEqual(result["status"], 200)
        self.assertEqual(result["contentType"], "video/mp4")
        _, kwargs = mock_head.call_args
        self.assertEqual(kwargs["headers"]["User-Agent"], VALIDATOR_USER_AGENT)
        self.assertEqual(kwargs["timeout"], 3)

    @patch("mirrosocial.maintenance.requests.head")
    def test_network_error(self, mock_head):
        mock_head.side_effect = requests.ConnectionError("boom")
        result = validate_media_url("https://cdn.test/v.mp4")
        self.assertFalse(result["accessible"])
        self.assertEqual(result["error"], "boom")


class AutocompletePlacesTests(unittest.TestCase):
    def test_no_provider_configured(self):
        self.assertEqual(autocomplete_places("park"), {"predictions": []})

    @patch("mirrosocial.maintenance.requests.get")
    def test_google_response_passed_through(self, mock_get):
        payload = {"predictions": [{"description": "Central Park"}], "status": "OK"}
        mock_get.return_value = MagicMock(ok=True, json=MagicMock(return_value=payload))
        self.assertEqual(autocomplete_places("park", google_api_key="key"), payload)

    @patch("mirrosocial.maintenance.requests.get")
    def test_falls_back_to_mapbox(self, mock_get):
        google_failure = MagicMock(ok=False, status_code=500)
        mapbox = MagicMock(
            ok=True,
            json=MagicMock(
                return_value={
                    "features": [
                        {
                            "id": "place.1",
                            "text": "Central Park",
                            "place_name": "Central Park, New York, USA",
                        }
                    ]
                }
            ),
        )
        mock_get.side_effect = [google_failure, mapbox]
        result = autocomplete_places("central park", google_api_key="key", mapbox_token="token")
        self.assertEqual(
            result["predictions"],
            [
                {
                    "place_id": "place.1",
                    "description": "Central Park, New York, USA",
                    "structured_formatting": {
                        "main_text": "Central Park",
                        "secondary_text": "New York, USA",
                    },
                }
            ],
        )
        mapbox_url = mock_get.call_args_list[1].args[0]
        self.assertIn("central%20park.json", mapbox_url)


if __name__ == "__main__":
    unittest.main()
