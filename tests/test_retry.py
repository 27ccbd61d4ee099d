from __future__ import annotations

import unittest

from skypost.retry import RetryConfig, call_with_retries


class TestRetry(unittest.TestCase):
    def test_returns_after_transient_failures(self) -> None:
        calls = {"n": 0}

        def flaky() -> str:
            calls["n"] += 1
            if calls["n"] < 3:
                raise TimeoutError("slow")
            return "ok"

        sleeps: list[float] = []
        out = call_with_retries(
            flaky,
            cfg=RetryConfig(max_attempts=3, base_delay_seconds=0.5, max_delay_seconds=20.0),
            is_retryable=lambda exc: isinstance(exc, TimeoutError),
            operation="test",
            sleep_fn=sleeps.append,
        )
        self.assertEqual(out, "ok")
        self.assertEqual(sleeps, [0.5, 1.0])

    def test_gives_up_after_max_attempts(self) -> None:
        def always_fails() -> None:
            raise TimeoutError("slow")

        with self.assertRaises(TimeoutError):
            call_with_retries(
                always_fails,
                cfg=RetryConfig(max_attempts=2, base_delay_seconds=0.0, max_delay_seconds=0.0),
                is_retryable=lambda exc: True,
                operation="test",
                sleep_fn=lambda s: None,
            )

    def test_backoff_is_capped(self) -> None:
        cfg = RetryConfig(max_attempts=10, base_delay_seconds=1.0, max_delay_seconds=5.0)
        self.assertEqual([cfg.backoff_seconds(i) for i in range(1, 6)], [1.0, 2.0, 4.0, 5.0, 5.0])

    def test_rejects_invalid_config(self) -> None:
        with self.assertRaises(ValueError):
            RetryConfig(max_attempts=0)
        with self.assertRaises(ValueError):
            RetryConfig(base_delay_seconds=3.0, max_delay_seconds=1.0)


if __name__ == "__main__":
    unittest.main()
