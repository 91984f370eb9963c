# tests/unit/test_runner.py
"""Tests for the threaded evidence fan-out."""

import time

import pytest

from gap_roadmap.analysis.runner import run_in_threads
from gap_roadmap.errors import GapDetectionError


class TestRunInThreads:
    @pytest.mark.asyncio
    async def test_preserves_input_order(self):
        """Results line up with items even when later items finish first."""

        def work(n):
            time.sleep(0.01 * (5 - n))
            return n * 10

        results, issues = await run_in_threads(
            [1, 2, 3, 4], work, operation="square", describe=str, parallelism=4
        )
        assert results == [10, 20, 30, 40]
        assert issues == []

    @pytest.mark.asyncio
    async def test_failure_becomes_issue(self):
        def work(n):
            if n == 2:
                raise ValueError("bad file")
            return n

        results, issues = await run_in_threads(
            [1, 2, 3], work, operation="gather-evidence", describe=lambda n: f"item-{n}"
        )
        assert results == [1, None, 3]
        assert len(issues) == 1
        assert issues[0].source == "item-2"
        assert issues[0].operation == "gather-evidence"
        assert "ValueError: bad file" in issues[0].message

    @pytest.mark.asyncio
    async def test_detection_error_kept(self):
        def work(n):
            raise GapDetectionError("parse", "unreadable")

        _, issues = await run_in_threads([1], work, operation="gather-evidence", describe=str)
        assert issues[0].message == "Failed to detect gap during parse: unreadable"

    @pytest.mark.asyncio
    async def test_timeout_keeps_finished_items(self):
        def work(n):
            if n == 2:
                time.sleep(0.5)
            return n

        results, issues = await run_in_threads(
            [1, 2], work, operation="gather-evidence", describe=str, timeout=0.2
        )
        assert results == [1, None]
        assert issues[0].source == "2"
        assert "Timed out" in issues[0].message

    @pytest.mark.asyncio
    async def test_empty(self):
        assert await run_in_threads([], str, operation="noop", describe=str) == ([], [])
