import unittest

from mirrosocial.media import (
    EVENT_VIDEO,
    MB,
    MESSAGE_ATTACHMENT,
    POST_MEDIA,
    UploadRejected,
    build_object_key,
    file_extension,
    is_valid_http_url,
    media_kind,
    rewrite_media_url,
    upload_media,
    validate_upload,
)
from mirrosocial.storage import InMemoryStorageClient


class UploadPolicyTests(unittest.TestCase):
    def test_post_media_limits_depend_on_kind(self):
        validate_upload(POST_MEDIA, "video/mp4", 40 * MB)
        with self.assertRaises(UploadRejected) as ctx:
            validate_upload(POST_MEDIA, "image/png", 11 * MB)
        self.assertEqual(str(ctx.exception), "File too large (max 10MB for images)")
        with self.assertRaises(UploadRejected) as ctx:
            validate_upload(POST_MEDIA, "application/pdf", 10)
        self.assertEqual(str(ctx.exception), "File must be an image or video")

    def test_event_video_limit(self):
        with self.assertRaises(UploadRejected) as ctx:
            validate_upload(EVENT_VIDEO, "video/mp4", 100 * MB)
        self.assertEqual(str(ctx.exception), "File too large. Maximum size is 99MB.")

    def test_message_attachment_allow_list(self):
        validate_upload(MESSAGE_ATTACHMENT, "application/pdf", 1024)
        with self.assertRaises(UploadRejected):
            validate_upload(MESSAGE_ATTACHMENT, "application/zip", 1024)
        with self.assertRaises(UploadRejected) as ctx:
            validate_upload(MESSAGE_ATTACHMENT, "text/plain", 11 * MB)
        self.assertEqual(str(ctx.exception), "File too large (max 10MB)")


class MediaHelperTests(unittest.TestCase):
    def test_media_kind(self):
        self.assertEqual(media_kind("IMAGE/JPEG"), "image")
        self.assertEqual(media_kind("audio/ogg"), "audio")
        self.assertEqual(media_kind(None), "file")

    def test_object_keys(self):
        self.assertEqual(file_extension("clip.MOV"), "mov")
        self.assertEqual(file_extension("README"), "bin")
        key = build_object_key("/post-media/", "a.jpg", now=1700000000.5)
        self.assertTrue(key.startswith("post-media/1700000000500-"))
        self.assertTrue(key.endswith(".jpg"))
        self.assertNotEqual(key, build_object_key("post-media", "a.jpg", now=1700000000.5))

    def test_upload_media_stores_object(self):
        storage = InMemoryStorageClient(base_url="https://cdn.test")
        url = upload_media(storage, b"abc", "a.png", "image/png", "messages")
        key = storage.key_from_url(url)
        self.assertTrue(key.startswith("messages/"))
        self.assertEqual(storage.stored_objects[key]["body"], b"abc")

    def test_rewrite_media_url(self):
        old, new = "https://media.old.com", "https://pub.new.dev/"
        self.assertEqual(
            rewrite_media_url("https://media.old.com/post-media/a.jpg", old, new),
            "https://pub.new.dev/post-media/a.jpg",
        )
        self.assertIsNone(rewrite_media_url("https://media.old.com.evil/a.jpg", old, new))
        self.assertIsNone(rewrite_media_url(None, old, new))

    def test_is_valid_http_url(self):
        self.assertTrue(is_valid_http_url("https://v.test/a.mp4"))
        self.assertFalse(is_valid_http_url("ftp://v.test/a.mp4"))
        self.assertFalse(is_valid_http_url("not a url"))
        self.assertFalse(is_valid_http_url(""))


if __name__ == "__main__":
    unittest.main()
