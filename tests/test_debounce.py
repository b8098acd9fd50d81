"""Tests for the trailing-edge debouncer."""

import asyncio

import pytest

from chemsearch.debounce import Debouncer


class TestDebouncer:
    """Tests for Debouncer timing and change detection."""

    @pytest.mark.asyncio
    async def test_burst_settles_once_on_final_value(self):
        """Pushes faster than the window publish only the last value."""
        settled = []
        debouncer = Debouncer(0.05, settled.append, initial="")

        for text in ["a", "as", "asp", "aspi"]:
            debouncer.push(text)
            await asyncio.sleep(0.002)

        assert settled == []
        assert debouncer.value == ""
        await asyncio.sleep(0.2)
        assert settled == ["aspi"]
        assert debouncer.value == "aspi"

    @pytest.mark.asyncio
    async def test_unchanged_value_does_not_fire(self):
        """Settling on the current value is not a change."""
        settled = []
        debouncer = Debouncer(0.01, settled.append, initial="water")

        debouncer.push("wate")
        debouncer.push("water")
        await asyncio.sleep(0.05)

        assert settled == []
        assert not debouncer.pending

    @pytest.mark.asyncio
    async def test_separate_bursts_fire_separately(self):
        settled = []
        debouncer = Debouncer(0.01, settled.append, initial="")

        debouncer.push("benz")
        await asyncio.sleep(0.05)
        debouncer.push("benzene")
        await asyncio.sleep(0.05)

        assert settled == ["benz", "benzene"]

    @pytest.mark.asyncio
    async def test_cancel_drops_pending_value(self):
        settled = []
        debouncer = Debouncer(0.01, settled.append, initial="")

        debouncer.push("ethanol")
        assert debouncer.pending
        debouncer.cancel()
        await asyncio.sleep(0.05)

        assert settled == []
        assert debouncer.value == ""

    def test_push_without_running_loop_settles_immediately(self):
        settled = []
        debouncer = Debouncer(0.01, settled.append, initial="")

        debouncer.push("toluene")

        assert debouncer.value == "toluene"
        assert not debouncer.pending
        assert settled == []
