import asyncio
import sys
from pathlib import Path

import pytest

sys.path.append(str(Path(__file__).resolve().parents[1]))

from shared.expiry_timer import ExpiryTimer, schedule_expiry


def test_schedule_without_loop_returns_none():
    assert schedule_expiry(1.0, lambda: None) is None


@pytest.mark.anyio
async def test_timer_fires_once():
    calls = []
    timer = ExpiryTimer(0.01, lambda: calls.append(1))
    await asyncio.sleep(0.05)
    assert calls == [1]
    assert timer.fired is True
    assert timer.is_active() is False
    timer.cancel()
    assert timer.cancelled is False


@pytest.mark.anyio
async def test_cancelled_timer_does_not_fire():
    calls = []
    timer = schedule_expiry(0.02, lambda: calls.append(1))
    timer.cancel()
    timer.cancel()
    await asyncio.sleep(0.05)
    assert calls == []
    assert timer.cancelled is True


@pytest.mark.anyio
async def test_callback_errors_are_logged(caplog):
    def explode():
        raise RuntimeError("boom")

    timer = ExpiryTimer(0.0, explode)
    await asyncio.sleep(0.02)
    assert timer.fired is True
    assert "Error in expiry callback" in caplog.text
