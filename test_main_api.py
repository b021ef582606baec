import os
import tempfile
import unittest
from unittest.mock import AsyncMock, patch

from fastapi.testclient import TestClient

import main
from planka_agent.config.settings import PlankaSettings
from planka_agent.core.errors import ConfigError, RemoteCallError
from test_create_flow import make_board


class TestMainApi(unittest.TestCase):
    def setUp(self):
        from planka_agent.services.task_store import TaskStore

        self._tmp = tempfile.TemporaryDirectory()
        tasks_path = os.path.join(self._tmp.name, "tasks.json")
        self.settings = PlankaSettings(base_url="http://planka/api", board_id="board-1", tasks_path=tasks_path)
        self.board = make_board()
        self.store = TaskStore(tasks_path)
        self.client = TestClient(main.app)

        patches = [
            patch("main.load_settings", return_value=self.settings),
            patch("main.open_board", AsyncMock(return_value=self.board)),
            patch("main.open_store", return_value=self.store),
        ]
        for p in patches:
            p.start()
            self.addCleanup(p.stop)

    def tearDown(self):
        self._tmp.cleanup()

    def test_health(self):
        resp = self.client.get("/health")
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(resp.json(), {"status": "ok"})

    def test_create_task(self):
        resp = self.client.post("/tasks", json={"title": "Fix login", "listName": "Backend", "subtasks": ["a"]})
        self.assertEqual(resp.status_code, 200)
        body = resp.json()
        self.assertTrue(body["created"]["card_created"])
        self.assertEqual(len(self.board.cards), 1)

        resp = self.client.get("/tasks")
        self.assertEqual([task["title"] for task in resp.json()["tasks"]], ["Fix login"])

    def test_create_task_dry_run(self):
        resp = self.client.post("/tasks", params={"dry_run": "true"}, json={"title": "T"})
        self.assertEqual(resp.status_code, 200)
        self.assertTrue(resp.json()["simulated"])
        self.assertEqual(self.board.calls, [])

    def test_validation_error_is_422(self):
        resp = self.client.post("/tasks", json={"title": ""})
        self.assertEqual(resp.status_code, 422)
        body = resp.json()
        self.assertEqual(body["error"], "VALIDATION_ERROR")
        self.assertEqual(body["field"], "title")
        self.assertFalse(body["success"])

    def test_not_found_is_404(self):
        resp = self.client.post("/tasks", params={"no_create": "true"}, json={"title": "T", "listName": "Nope"})
        self.assertEqual(resp.status_code, 404)
        self.assertEqual(resp.json()["entity"], "list")

    def test_remote_error_is_502(self):
        self.board.create_card = AsyncMock(side_effect=RemoteCallError("create_card", "HTTP 500", status_code=500))
        resp = self.client.post("/tasks", json={"title": "T"})
        self.assertEqual(resp.status_code, 502)
        self.assertEqual(resp.json()["error"], "REMOTE_ERROR")

    def test_config_error_is_500(self):
        with patch("main.load_settings", side_effect=ConfigError("No Planka board configured")):
            resp = self.client.get("/tasks")
        self.assertEqual(resp.status_code, 500)
        self.assertEqual(resp.json()["error"], "CONFIG_ERROR")

    def test_interpret(self):
        resp = self.client.post("/tasks/interpret", json={"text": "Please fix the backend bug tomorrow"})
        self.assertEqual(resp.status_code, 200)
        payload = resp.json()["payload"]
        self.assertEqual(payload["labels"], ["bug"])
        self.assertEqual(len(payload["idempotency_key"]), 24)

    def test_import(self):
        resp = self.client.post("/tasks/import", params={"dry_run": "true"})
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(resp.json()["missing"], 0)


if __name__ == "__main__":
    unittest.main()
