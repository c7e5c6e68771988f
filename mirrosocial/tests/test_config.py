import os
import unittest
from unittest.mock import patch

from mirrosocial.config import Settings, r2_missing_settings


class SettingsTests(unittest.TestCase):
    @patch.dict(
        os.environ,
        {
            "REDIS_QUEUE_KEY": "custom:jobs",
            "SESSION_TTL_SECONDS": "60",
            "USE_IN_MEMORY_BACKENDS": "true",
            "R2_PUBLIC_URL": "https://pub.example.r2.dev",
        },
    )
    def test_fields_read_upper_case_environment(self):
        settings = Settings(_env_file=None)
        self.assertEqual(settings.redis_queue_key, "custom:jobs")
        self.assertEqual(settings.session_ttl_seconds, 60)
        self.assertTrue(settings.use_in_memory_backends)
        self.assertEqual(settings.r2_public_url, "https://pub.example.r2.dev")

    @patch.dict(os.environ, {}, clear=True)
    def test_defaults_without_environment(self):
        settings = Settings(_env_file=None)
        self.assertEqual(settings.redis_queue_key, "mirro:jobs")
        self.assertEqual(settings.api_prefix, "/api")
        self.assertIsNone(settings.database_url)
        self.assertEqual(
            r2_missing_settings(settings),
            ["R2_ENDPOINT", "R2_ACCESS_KEY_ID", "R2_SECRET_ACCESS_KEY", "R2_BUCKET_NAME", "R2_PUBLIC_URL"],
        )


if __name__ == "__main__":
    unittest.main()
