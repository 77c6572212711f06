import logging
from datetime import timedelta

import pytest
from conftest import FakeClock

from battmon.common.enums import NoticeLevel
from battmon.monitor.notices import NoticeBoard


def test_notices_expire_after_ttl(clock: FakeClock) -> None:
    board = NoticeBoard(ttl=timedelta(seconds=3), clock=clock)
    board.success("System loaded successfully")
    clock.advance(2)
    board.error("Failed to fetch data: boom")

    assert [n.message for n in board.active()] == [
        "System loaded successfully",
        "Failed to fetch data: boom",
    ]
    clock.advance(1.5)
    assert [n.level for n in board.active()] == [NoticeLevel.ERROR]
    clock.advance(5)
    assert board.active() == []
    assert len(board.recent()) == 2


def test_backlog_is_bounded(clock: FakeClock) -> None:
    board = NoticeBoard(capacity=3, clock=clock)
    for i in range(5):
        board.info(f"n{i}")
    assert [n.message for n in board.recent()] == ["n2", "n3", "n4"]
    assert board.latest is not None
    assert board.latest.message == "n4"


def test_notices_are_logged(clock: FakeClock, caplog: pytest.LogCaptureFixture) -> None:
    board = NoticeBoard(clock=clock)
    with caplog.at_level(logging.INFO, logger="battmon.monitor.notices"):
        board.error("No data to export")
    assert "[ERROR] No data to export" in caplog.text
    assert caplog.records[-1].levelno == logging.WARNING
