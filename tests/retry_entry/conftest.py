from __future__ import annotations

import pytest

from tests.retry_entry.support.fakes import FakeLogger, ScriptedTask


@pytest.fixture
def fake_logger() -> FakeLogger:
    """Provide a fresh structured logger test double per test."""
    return FakeLogger()


@pytest.fixture
def scripted_task() -> ScriptedTask:
    """Provide a task double with an empty script per test."""
    return ScriptedTask()
