import asyncio
import hashlib
import os
import tempfile
import unittest
from unittest.mock import AsyncMock


def _card(card_id, name, description="", list_id=None, list_name=None):
    from planka_agent.models.task import BoardCard

    return BoardCard(id=card_id, name=name, description=description, list_id=list_id, list_name=list_name)


class TestIdempotencyKey(unittest.TestCase):
    def test_key_is_truncated_sha256(self):
        from planka_agent.core.idempotency import make_idempotency_key

        expected = hashlib.sha256(b"Fix login|board-1|Backend").hexdigest()[:24]
        self.assertEqual(make_idempotency_key("Fix login", "board-1", "Backend"), expected)
        self.assertEqual(len(expected), 24)

    def test_missing_parts_hash_as_empty(self):
        from planka_agent.core.idempotency import make_idempotency_key

        self.assertEqual(make_idempotency_key("T", None, None), make_idempotency_key("T", "", ""))

    def test_marker(self):
        from planka_agent.core.idempotency import append_marker

        self.assertEqual(append_marker("desc", "abc"), "desc\n\n[planka-cli:idempotency=abc]")


class TestFindExistingCard(unittest.TestCase):
    def test_marker_wins_over_title(self):
        from planka_agent.core.idempotency import find_existing_card

        cards = [
            _card("1", "Fix login", list_id="L1"),
            _card("2", "Other title", description="x\n\n[planka-cli:idempotency=k]"),
        ]
        self.assertEqual(find_existing_card(cards, "k", "Fix login", "L1", None).id, "2")

    def test_title_match_requires_same_list(self):
        from planka_agent.core.idempotency import find_existing_card

        cards = [_card("1", "Fix  Login!", list_id="L2", list_name="Frontend")]
        self.assertIsNone(find_existing_card(cards, None, "fix login", "L1", "Backend"))
        self.assertEqual(find_existing_card(cards, None, "fix login", "L2", None).id, "1")
        self.assertEqual(find_existing_card(cards, None, "fix login", None, "frontend").id, "1")

    def test_normalize_for_match(self):
        from planka_agent.core.idempotency import normalize_for_match

        self.assertEqual(normalize_for_match("  Fix\tthe  LOGIN-page! "), "fix the loginpage")


class TestCheckExisting(unittest.TestCase):
    def setUp(self):
        from planka_agent.services.task_store import TaskStore

        self._tmp = tempfile.TemporaryDirectory()
        self.store = TaskStore(os.path.join(self._tmp.name, "tasks.json"))

    def tearDown(self):
        self._tmp.cleanup()

    def test_returns_local_task_id(self):
        async def run():
            from planka_agent.core.idempotency import check_existing
            from planka_agent.models.task import TaskProposal

            local = await self.store.record_task(TaskProposal(title="Fix login"))
            await self.store.mark_synced(local.id, "77")

            board = AsyncMock()
            board.fetch_all_cards.return_value = [_card("77", "Fix login", list_id="L1")]
            found = await check_existing(board, self.store, None, "Fix login", "L1", None)
            self.assertEqual(found.card_id, "77")
            self.assertEqual(found.local_task_id, local.id)

        asyncio.run(run())

    def test_lookup_does_not_write_tasks_file(self):
        async def run():
            from planka_agent.core.idempotency import check_existing

            board = AsyncMock()
            board.fetch_all_cards.return_value = [_card("77", "Fix login", list_id="L1")]
            found = await check_existing(board, self.store, None, "Fix login", "L1", None)
            self.assertEqual(found.card_id, "77")
            self.assertIsNone(found.local_task_id)
            self.assertFalse(self.store.path.exists())

        asyncio.run(run())

    def test_errors_are_swallowed(self):
        async def run():
            from planka_agent.core.idempotency import check_existing

            board = AsyncMock()
            board.fetch_all_cards.side_effect = RuntimeError("boom")
            with self.assertLogs("planka_agent.idempotency", level="WARNING"):
                found = await check_existing(board, self.store, "k", "T", "L1", None)
            self.assertIsNone(found)

        asyncio.run(run())


if __name__ == "__main__":
    unittest.main()
