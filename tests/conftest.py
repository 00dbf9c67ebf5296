from __future__ import annotations

import os
import tempfile

_DB_DIR = tempfile.mkdtemp(prefix="carenote-tests-")
os.environ["DATABASE_URL"] = f"sqlite:///{os.path.join(_DB_DIR, 'carenote.db')}"
os.environ["MASTER_KEY"] = "test-master-key"
os.environ["ADMIN_KEYS"] = "test-admin-key, second-admin-key"
os.environ["OPENAI_API_KEY"] = "sk-test"
os.environ.pop("TELEMETRY_ENDPOINT", None)
os.environ.pop("TRUST_FORWARDED_FOR", None)

import pytest  # noqa: E402


class FakeClock:
    """Manually advanced replacement for ``time.time``."""

    def __init__(self, start: float = 1_700_000_000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture()
def clock() -> FakeClock:
    return FakeClock()
