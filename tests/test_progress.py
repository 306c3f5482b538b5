import asyncio

import pytest

from stylist.services.progress import PROGRESS_CAP, ProgressSimulator, next_progress


def test_next_progress_decelerates_and_caps():
    values = [0]
    while values[-1] < PROGRESS_CAP:
        values.append(next_progress(values[-1]))

    steps = [b - a for a, b in zip(values, values[1:])]
    assert values[:4] == [0, 10, 19, 28]
    assert steps == sorted(steps, reverse=True)
    assert values[-1] == 95
    assert next_progress(95) == 95
    assert next_progress(99) == 95


@pytest.mark.asyncio
async def test_simulator_caps_then_jumps_and_resets():
    progress = ProgressSimulator(tick_seconds=0.001, reset_seconds=0.02)

    progress.start()
    await asyncio.sleep(0.3)
    assert progress.value == PROGRESS_CAP
    assert not progress.running

    progress.stop()
    assert progress.value == 100
    await asyncio.sleep(0.1)
    assert progress.value == 0


@pytest.mark.asyncio
async def test_restart_cancels_pending_reset():
    progress = ProgressSimulator(tick_seconds=10, reset_seconds=0.01)

    progress.start()
    progress.stop()
    progress.start()
    await asyncio.sleep(0.05)

    assert progress.value == 0
    assert progress.running
    progress.stop()
