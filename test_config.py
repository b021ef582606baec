import json
import os
import tempfile
import unittest
from pathlib import Path


def _cfg(projects):
    return {"projects": projects}


class TestFindMatchingProjectBoard(unittest.TestCase):
    def test_exact_match(self):
        from planka_agent.config.settings import find_matching_project_board

        cfg = _cfg({"/srv/projects/foo": {"PLANKA_BOARD_ID": "A"}})
        self.assertEqual(find_matching_project_board(cfg, "/srv/projects/foo"), "A")

    def test_longest_prefix_wins(self):
        from planka_agent.config.settings import find_matching_project_board

        cfg = _cfg(
            {
                "/srv/projects": {"PLANKA_BOARD_ID": "ROOT"},
                "/srv/projects/foo/sub": {"PLANKA_BOARD_ID": "SUB"},
            }
        )
        self.assertEqual(find_matching_project_board(cfg, "/srv/projects/foo/sub/deep"), "SUB")
        self.assertEqual(find_matching_project_board(cfg, "/srv/projects/other"), "ROOT")

    def test_no_match(self):
        from planka_agent.config.settings import find_matching_project_board

        cfg = _cfg({"/srv/other": {"PLANKA_BOARD_ID": "X"}, "/srv/projects/foo": {"PLANKA_BOARD_ID": "F"}})
        self.assertIsNone(find_matching_project_board(cfg, "/srv/projects/foobar"))
        self.assertIsNone(find_matching_project_board({}, "/srv/projects"))
        self.assertIsNone(find_matching_project_board(None, "/srv/projects"))


class TestNormalizeApiUrl(unittest.TestCase):
    def test_appends_api(self):
        from planka_agent.config.settings import normalize_api_url

        self.assertEqual(normalize_api_url("https://planka.example.com/"), "https://planka.example.com/api")
        self.assertEqual(normalize_api_url("https://planka.example.com/api/"), "https://planka.example.com/api")


class TestLoadSettings(unittest.TestCase):
    def setUp(self):
        self._tmp = tempfile.TemporaryDirectory()
        self.root = Path(self._tmp.name)
        self.config_path = self.root / "config" / "config.json"
        self.config_path.parent.mkdir()
        self.project_dir = self.root / "work" / "app"
        self.project_dir.mkdir(parents=True)
        with open(self.config_path, "w", encoding="utf-8") as f:
            json.dump(
                {
                    "authorization": {
                        "PLANKA_API_URL": "https://planka.example.com",
                        "PLANKA_USERNAME": "bot",
                        "PLANKA_PASSWORD": "secret",
                    },
                    "default": {"PLANKA_BOARD_ID": "default-board"},
                    "projects": {str(self.project_dir): {"PLANKA_BOARD_ID": "project-board"}},
                },
                f,
            )

    def tearDown(self):
        self._tmp.cleanup()

    def test_project_board_and_tasks_file(self):
        from planka_agent.config.settings import load_settings

        settings = load_settings(cwd=str(self.project_dir / "src"), config_path=self.config_path, env={})
        self.assertEqual(settings.base_url, "https://planka.example.com/api")
        self.assertEqual(settings.board_id, "project-board")
        self.assertEqual(settings.username, "bot")
        self.assertEqual(settings.tasks_path, os.path.join(str(self.project_dir), "tasks.json"))
        self.assertEqual(settings.locale, "en-US")

    def test_default_board_outside_projects(self):
        from planka_agent.config.settings import load_settings

        settings = load_settings(cwd=str(self.root), config_path=self.config_path, env={})
        self.assertEqual(settings.board_id, "default-board")
        self.assertEqual(settings.tasks_path, str(self.config_path.parent / "tasks.json"))

    def test_environment_overrides(self):
        from planka_agent.config.settings import load_settings

        env = {
            "PLANKA_API_URL": "http://localhost:3000",
            "PLANKA_BOARD_ID": "env-board",
            "PLANKA_LOCALE": "de-DE",
            "PLANKA_HTTP_TIMEOUT": "5",
        }
        settings = load_settings(cwd=str(self.project_dir), config_path=self.config_path, env=env)
        self.assertEqual(settings.base_url, "http://localhost:3000/api")
        self.assertEqual(settings.board_id, "env-board")
        self.assertEqual(settings.locale, "de-DE")
        self.assertEqual(settings.http_timeout, 5.0)

    def test_missing_configuration(self):
        from planka_agent.config.settings import load_settings
        from planka_agent.core.errors import ConfigError

        missing = self.root / "nowhere.json"
        with self.assertRaises(ConfigError):
            load_settings(cwd=str(self.root), config_path=missing, env={})
        with self.assertRaises(ConfigError):
            load_settings(cwd=str(self.root), config_path=missing, env={"PLANKA_API_URL": "http://x"})

    def test_invalid_json(self):
        from planka_agent.config.settings import load_settings
        from planka_agent.core.errors import ConfigError

        with open(self.config_path, "w", encoding="utf-8") as f:
            f.write("{not json")
        with self.assertRaises(ConfigError):
            load_settings(cwd=str(self.root), config_path=self.config_path, env={})


if __name__ == "__main__":
    unittest.main()
