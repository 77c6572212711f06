import csv
from pathlib import Path

import pytest

from battmon.export import CSV_HEADER, history_to_csv, write_history_csv
from battmon.telemetry.models import HistoryPage


def test_history_to_csv(history_payload: dict) -> None:
    page = HistoryPage.from_payload(history_payload)
    rows = list(csv.reader(history_to_csv(page.records).splitlines()))
    assert rows[0] == CSV_HEADER
    assert rows[1] == [
        "2025-05-03",
        "12:00:00",
        "24.5",
        "1.2",
        "31",
        "80",
        "OFF",
        "45",
        "29.40",
    ]
    assert rows[2][6] == "ON"


def test_write_history_csv_creates_directories(tmp_path: Path, history_payload: dict) -> None:
    page = HistoryPage.from_payload(history_payload)
    dst = tmp_path / "exports" / "battery-data-2025-05-03.csv"
    assert write_history_csv(page.records, dst) == dst
    assert dst.read_text(encoding="utf-8").startswith("Date,Time,Voltage (V)")


def test_write_history_csv_rejects_empty(tmp_path: Path) -> None:
    with pytest.raises(ValueError, match="No data to export"):
        write_history_csv([], tmp_path / "x.csv")
