"""
Tests for the track() logging context manager.
"""

from __future__ import annotations

import logging

import pytest

from huautla.tracking import track


def test_track_logs_start_and_finish(caplog) -> None:
    caplog.set_level(logging.INFO, logger="huautla.tracking")

    with track("EventRepo.get", id="e-1", cid="req-9"):
        pass

    messages = [r.getMessage() for r in caplog.records]
    assert messages[0] == "starting work method=EventRepo.get cid=req-9 id=e-1"
    assert messages[1].startswith("finished work method=EventRepo.get cid=req-9 id=e-1 duration=")


def test_track_logs_and_reraises_failure(caplog) -> None:
    caplog.set_level(logging.INFO, logger="huautla.tracking")

    with pytest.raises(ValueError, match="boom"):
        with track("GenerationRepo.select"):
            raise ValueError("boom")

    failed = [r for r in caplog.records if r.levelno == logging.WARNING]
    assert len(failed) == 1
    assert failed[0].getMessage().startswith("failed work method=GenerationRepo.select")
    assert failed[0].exc_info is not None
    assert not any(r.getMessage().startswith("finished work") for r in caplog.records)
