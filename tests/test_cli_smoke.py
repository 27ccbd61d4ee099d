from __future__ import annotations

import json
import os
import subprocess
import sys
import tempfile
import unittest
from pathlib import Path


def _run_cli(args: list[str], *, cwd: Path) -> subprocess.CompletedProcess[str]:
    repo_root = Path(__file__).resolve().parents[1]
    env = dict(os.environ)
    existing_pp = env.get("PYTHONPATH", "")
    env["PYTHONPATH"] = f"{repo_root}{os.pathsep}{existing_pp}" if existing_pp else str(repo_root)
    return subprocess.run(
        [sys.executable, "-m", "skypost", *args],
        cwd=cwd,
        env=env,
        capture_output=True,
        text=True,
    )


class TestCLISmoke(unittest.TestCase):
    def test_build_splits_text(self) -> None:
        with tempfile.TemporaryDirectory() as td:
            root = Path(td)
            input_path = root / "post.txt"
            input_path.write_text(" ".join(["aa"] * 101) + " #tag", encoding="utf-8")
            cfg_path = root / "config.yaml"
            cfg_path.write_text("output:\n  languages: [en]\n", encoding="utf-8")
            log_path = root / "run.log"

            proc = _run_cli(
                [
                    "build",
                    "--input",
                    str(input_path),
                    "--config",
                    str(cfg_path),
                    "--log",
                    str(log_path),
                ],
                cwd=root,
            )

            self.assertEqual(proc.returncode, 0, msg=proc.stderr)
            lines = [json.loads(line) for line in proc.stdout.splitlines()]
            self.assertEqual(len(lines), 2)
            self.assertTrue(lines[0]["text"].startswith("[1/2] "))
            self.assertEqual(lines[1]["langs"], ["en"])
            self.assertEqual(
                lines[1]["facets"][0]["features"][0],
                {"$type": "app.bsky.richtext.facet#tag", "tag": "tag"},
            )
            self.assertNotEqual(lines[0]["createdAt"], lines[1]["createdAt"])

            events = [
                json.loads(line)["event"]
                for line in log_path.read_text(encoding="utf-8").splitlines()
            ]
            self.assertEqual(events[0], "build_started")
            self.assertEqual(events[-1], "build_completed")

    def test_build_html(self) -> None:
        with tempfile.TemporaryDirectory() as td:
            root = Path(td)
            input_path = root / "post.html"
            input_path.write_text('<p>Hello <a href="https://example.com">world</a></p>', encoding="utf-8")

            proc = _run_cli(["build", "--input", str(input_path), "--html"], cwd=root)

            self.assertEqual(proc.returncode, 0, msg=proc.stderr)
            doc = json.loads(proc.stdout)
            self.assertEqual(doc["text"], "Hello world")
            self.assertEqual(doc["facets"][0]["index"], {"byteStart": 6, "byteEnd": 11})

    def test_missing_config_exits_2_and_logs(self) -> None:
        with tempfile.TemporaryDirectory() as td:
            root = Path(td)
            input_path = root / "post.txt"
            input_path.write_text("hello", encoding="utf-8")
            log_path = root / "run.log"

            proc = _run_cli(
                [
                    "build",
                    "--input",
                    str(input_path),
                    "--config",
                    str(root / "missing.yaml"),
                    "--log",
                    str(log_path),
                ],
                cwd=root,
            )

            self.assertEqual(proc.returncode, 2, msg=proc.stderr)
            self.assertIn("Config file not found", proc.stderr)
            records = [json.loads(line) for line in log_path.read_text(encoding="utf-8").splitlines()]
            self.assertEqual(records[-1]["event"], "build_failed")

    def test_missing_input_exits_3(self) -> None:
        with tempfile.TemporaryDirectory() as td:
            root = Path(td)
            proc = _run_cli(["build", "--input", str(root / "nope.txt")], cwd=root)
            self.assertEqual(proc.returncode, 3, msg=proc.stderr)


if __name__ == "__main__":
    unittest.main()
