import json
from datetime import date, datetime

from smo_leave.utilities import utils
from smo_leave.utilities.models import (
    ExtractionConfig,
    ExtractionResult,
    LeaveRecord,
    SMOEmployee,
    StaffSummary,
)
from smo_leave.loaders import report_writer

WINDOW = utils.create_date_window(6, today=date(2026, 1, 15))

RECORD = LeaveRecord(
    employee_id=4,
    full_name="Ó Súilleabháin, Siobhán",
    shift_name="Annual Leave AM",
    start=datetime(2026, 3, 2, 8, 0),
    end=date(2026, 3, 2),
    status="Approved",
    note="",
)

SUMMARY = StaffSummary(
    employee_id=4,
    full_name="Ó Súilleabháin, Siobhán",
    total_leave_days=0.5,
    leave_shifts=1,
    approved_shifts=1,
    pending_shifts=0,
    leave_types="Annual Leave AM",
)


def _document(cfg=None, records=(RECORD,), summaries=(SUMMARY,)):
    cfg = cfg or ExtractionConfig.from_defaults(db_url="sqlite:///x.db")
    result = ExtractionResult(records=list(records), rows_read=len(records) + 1, skipped_rows=1)
    return report_writer.build_document(
        cfg,
        WINDOW,
        result,
        list(summaries),
        smo_employees=[SMOEmployee(employee_id=4, full_name=SUMMARY.full_name, shift_count=8)],
        data_source={"backend": "mysql", "host": "sched-db01", "database": "scheduling"},
        generated_at=datetime(2026, 1, 15, 7, 30, 12),
    )


def test_build_document_metadata():
    meta = _document().metadata
    assert meta["generated_at"] == "2026-01-15T07:30:12"
    assert meta["date_range"]["start"] == "2026-01-15"
    assert meta["date_range"]["end"] == "2026-07-15"
    assert meta["months_ahead"] == 6
    assert meta["include_pending"] is True
    assert meta["qualification"] == {"rule": "shift_count", "marker": "smo", "min_shifts": 5}
    assert meta["leave_day_policy"] == "bucketed"
    assert meta["record_count"] == 1
    assert meta["staff_count"] == 1
    assert meta["skipped_rows"] == 1
    assert meta["data_source"]["host"] == "sched-db01"


def test_profile_qualification_metadata():
    cfg = ExtractionConfig.from_defaults(qualification="profile", smo_category="Consultant")
    meta = _document(cfg).metadata
    assert meta["qualification"] == {"rule": "profile", "category": "Consultant"}


def test_serialize_record_formats_dates():
    payload = report_writer.serialize_record(RECORD)
    assert payload["start"] == "2026-03-02T08:00"
    assert payload["end"] == "2026-03-02"
    assert payload["note"] == ""


def test_write_document_overwrites_with_utf8_json(tmp_path):
    target = tmp_path / "reports" / "leave.json"
    target.parent.mkdir()
    target.write_text("stale", encoding="utf-8")

    report_writer.write_document(_document(), target)

    payload = json.loads(target.read_text(encoding="utf-8"))
    assert set(payload) == {"metadata", "staff_summary", "leave_records"}
    assert payload["staff_summary"][0]["full_name"] == "Ó Súilleabháin, Siobhán"
    assert payload["staff_summary"][0]["approved_shifts"] == 1
    assert payload["leave_records"][0]["status"] == "Approved"
    assert "Siobhán" in target.read_text(encoding="utf-8")
    assert list(target.parent.iterdir()) == [target]


def test_console_summary_lists_staff_and_top():
    text = report_writer.format_console_summary(_document(), top_n=5)
    assert "2026-01-15 to 2026-07-15" in text
    assert "Leave records:  1" in text
    assert "SMO shifts: 8" in text
    assert "Top 1 by leave days:" in text
    assert "0.5 days" in text


def test_console_summary_empty_document():
    text = report_writer.format_console_summary(_document(records=(), summaries=()))
    assert "SMO staff:      0" in text
    assert "No leave found" in text
