from __future__ import annotations

import json
import tempfile
import unittest
from pathlib import Path

from skypost.run_log import RunLogger


class TestRunLogger(unittest.TestCase):
    def test_writes_jsonl(self) -> None:
        with tempfile.TemporaryDirectory() as td:
            path = Path(td) / "logs" / "run.log"
            with RunLogger.open(path, session_id="s1") as log:
                log.info("started", parts=2)
                try:
                    raise ValueError("boom")
                except ValueError as e:
                    log.exception("failed", exc=e)

            records = [json.loads(line) for line in path.read_text(encoding="utf-8").splitlines()]

        self.assertEqual([r["event"] for r in records], ["started", "failed"])
        self.assertEqual(records[0]["level"], "INFO")
        self.assertEqual(records[0]["session_id"], "s1")
        self.assertEqual(records[0]["data"], {"parts": 2})
        self.assertEqual(records[1]["level"], "ERROR")
        self.assertEqual(records[1]["data"]["error"]["type"], "ValueError")
        self.assertIn("boom", records[1]["data"]["error"]["traceback"])

    def test_reopen_appends(self) -> None:
        with tempfile.TemporaryDirectory() as td:
            path = Path(td) / "run.log"
            log = RunLogger.open(path)
            log.info("one")
            log.close()
            log.info("two")
            log.close()
            lines = path.read_text(encoding="utf-8").splitlines()
        self.assertEqual(len(lines), 2)

    def test_without_path_discards(self) -> None:
        with RunLogger.open(None) as log:
            log.info("ignored", x=1)
        self.assertTrue(log.session_id)


if __name__ == "__main__":
    unittest.main()
