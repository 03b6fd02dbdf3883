import unittest
from unittest.mock import patch

from run_service.client import RunServiceClient
from run_service.config import RunServiceSettings, default_runner_os


class TestRunServiceSettings(unittest.TestCase):
    def test_from_env_reads_all_fields(self) -> None:
        env = {
            "RUN_SERVICE_URL": "https://run.example.test/_apis/v1/",
            "RUN_SERVICE_TOKEN": " secret ",
            "RUN_SERVICE_TIMEOUT_S": "45",
            "RUNNER_OS": "Windows",
            "RUN_SERVICE_HEARTBEAT_INTERVAL_S": "30",
        }
        s = RunServiceSettings.from_env(env)
        self.assertEqual(s.url, "https://run.example.test/_apis/v1/")
        self.assertEqual(s.token, "secret")
        self.assertEqual(s.timeout_s, 45.0)
        self.assertEqual(s.runner_os, "Windows")
        self.assertEqual(s.heartbeat_interval_s, 30.0)

    def test_defaults(self) -> None:
        with patch("run_service.config.platform.system", return_value="Darwin"):
            s = RunServiceSettings.from_env({"RUN_SERVICE_URL": "http://localhost:8090/"})
        self.assertIsNone(s.token)
        self.assertIsNone(s.timeout_s)
        self.assertEqual(s.runner_os, "macOS")
        self.assertEqual(s.heartbeat_interval_s, 60.0)

    def test_zero_timeout_means_none(self) -> None:
        s = RunServiceSettings.from_env({"RUN_SERVICE_URL": "http://localhost/", "RUN_SERVICE_TIMEOUT_S": "0"})
        self.assertIsNone(s.timeout_s)

    def test_missing_url(self) -> None:
        with self.assertRaises(ValueError):
            RunServiceSettings.from_env({})

    def test_bad_number(self) -> None:
        with self.assertRaises(ValueError):
            RunServiceSettings.from_env({"RUN_SERVICE_URL": "http://localhost/", "RUN_SERVICE_TIMEOUT_S": "soon"})

    def test_create_client(self) -> None:
        s = RunServiceSettings(url="http://localhost/", token="t", timeout_s=12.5)
        client = s.create_client()
        self.assertIsInstance(client, RunServiceClient)
        self.assertEqual(client.token, "t")
        self.assertEqual(client.timeout_s, 12.5)
        self.assertEqual(client._headers()["Authorization"], "Bearer t")

    def test_default_runner_os_passes_through_unknown_systems(self) -> None:
        with patch("run_service.config.platform.system", return_value="Linux"):
            self.assertEqual(default_runner_os(), "Linux")
        with patch("run_service.config.platform.system", return_value="FreeBSD"):
            self.assertEqual(default_runner_os(), "FreeBSD")


if __name__ == "__main__":
    unittest.main()
