import unittest
from unittest.mock import MagicMock, patch

from botocore.exceptions import ClientError

from mirrosocial.config import Settings, r2_missing_settings
from mirrosocial.storage import InMemoryStorageClient, R2StorageClient


class InMemoryStorageTests(unittest.TestCase):
    def test_upload_and_delete(self):
        storage = InMemoryStorageClient(base_url="https://cdn.test/")
        storage.upload_bytes("posts/a.jpg", b"data", "image/jpeg")
        url = storage.public_url("posts/a.jpg")
        self.assertEqual(url, "https://cdn.test/posts/a.jpg")
        self.assertEqual(storage.key_from_url(url), "posts/a.jpg")

        storage.delete("posts/a.jpg")
        self.assertEqual(storage.stored_objects, {})


class R2StorageTests(unittest.TestCase):
    def make_client(self, boto_client):
        with patch("mirrosocial.storage.boto3.client", return_value=boto_client) as factory:
            storage = R2StorageClient(
                bucket="mirro-media",
                endpoint="https://account.r2.cloudflarestorage.com",
                access_key_id="key",
                secret_access_key="secret",
                public_base_url="https://pub.example.r2.dev/",
            )
        _, kwargs = factory.call_args
        self.assertEqual(kwargs["region_name"], "auto")
        self.assertEqual(kwargs["endpoint_url"], "https://account.r2.cloudflarestorage.com")
        return storage

    def test_upload_puts_object(self):
        boto_client = MagicMock()
        storage = self.make_client(boto_client)
        storage.upload_bytes("event-videos/v.mp4", b"video", "video/mp4")
        boto_client.put_object.assert_called_once_with(
            Bucket="mirro-media",
            Key="event-videos/v.mp4",
            Body=b"video",
            ContentType="video/mp4",
        )
        self.assertEqual(
            storage.public_url("event-videos/v.mp4"),
            "https://pub.example.r2.dev/event-videos/v.mp4",
        )
        self.assertEqual(
            storage.key_from_url("https://pub.example.r2.dev/event-videos/v.mp4"),
            "event-videos/v.mp4",
        )

    def test_check_connection(self):
        boto_client = MagicMock()
        storage = self.make_client(boto_client)
        self.assertTrue(storage.check_connection())

        boto_client.head_bucket.side_effect = ClientError(
            {"Error": {"Code": "403", "Message": "Forbidden"}}, "HeadBucket"
        )
        self.assertFalse(storage.check_connection())


class R2SettingsTests(unittest.TestCase):
    def test_missing_settings_are_named(self):
        settings = Settings(
            r2_endpoint="https://account.r2.cloudflarestorage.com",
            r2_access_key_id="key",
            r2_secret_access_key=None,
            r2_bucket_name=None,
            r2_public_url="https://pub.example.r2.dev",
        )
        self.assertEqual(
            r2_missing_settings(settings), ["R2_SECRET_ACCESS_KEY", "R2_BUCKET_NAME"]
        )


if __name__ == "__main__":
    unittest.main()
