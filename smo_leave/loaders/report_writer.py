"""JSON report and console summary output."""
import json
import logging
import os
import tempfile
from datetime import date, datetime
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence

from smo_leave.utilities import config
from smo_leave.utilities.models import (
    DateOrDateTime,
    DateWindow,
    ExtractionConfig,
    ExtractionResult,
    LeaveRecord,
    OutputDocument,
    SMOEmployee,
    StaffSummary,
)
from smo_leave.transformers import aggregator

logger = logging.getLogger(__name__)


def format_moment(value: DateOrDateTime) -> str:
    """ISO date, or date and minutes for datetimes."""
    if isinstance(value, datetime):
        return value.strftime("%Y-%m-%dT%H:%M")
    return value.isoformat()


def serialize_record(record: LeaveRecord) -> Dict[str, Any]:
    return {
        "employee_id": record.employee_id,
        "full_name": record.full_name,
        "shift_name": record.shift_name,
        "start": format_moment(record.start),
        "end": format_moment(record.end),
        "status": record.status,
        "note": record.note,
    }


def serialize_summary(summary: StaffSummary) -> Dict[str, Any]:
    return {
        "employee_id": summary.employee_id,
        "full_name": summary.full_name,
        "total_leave_days": summary.total_leave_days,
        "leave_shifts": summary.leave_shifts,
        "approved_shifts": summary.approved_shifts,
        "pending_shifts": summary.pending_shifts,
        "leave_types": summary.leave_types,
    }


def _qualification_metadata(cfg: ExtractionConfig) -> Dict[str, Any]:
    if cfg.qualification == config.QUALIFICATION_PROFILE:
        return {"rule": cfg.qualification, "category": cfg.smo_category}
    return {
        "rule": cfg.qualification,
        "marker": cfg.smo_marker,
        "min_shifts": cfg.min_smo_shifts,
    }


def build_document(
    cfg: ExtractionConfig,
    window: DateWindow,
    result: ExtractionResult,
    summaries: List[StaffSummary],
    smo_employees: Optional[List[SMOEmployee]] = None,
    data_source: Optional[Dict[str, Any]] = None,
    generated_at: Optional[datetime] = None,
) -> OutputDocument:
    """
    Assemble metadata, staff summaries and leave records.

    Args:
        cfg: Run configuration
        window: Extraction window
        result: Mapped records and skip statistics
        summaries: Per-employee totals
        smo_employees: Qualifying employees present in the records
        data_source: Backend, host and database identifiers
        generated_at: Run timestamp (defaults to now)

    Returns:
        OutputDocument
    """
    stamp = generated_at or datetime.now()
    metadata = {
        "generated_at": stamp.isoformat(timespec="seconds"),
        "date_range": {
            "start": window.start.isoformat(),
            "end": window.end.isoformat(),
            "description": window.description,
        },
        "months_ahead": cfg.months_ahead,
        "include_pending": cfg.include_pending,
        "qualification": _qualification_metadata(cfg),
        "leave_patterns": list(cfg.leave_patterns),
        "leave_day_policy": cfg.leave_day_policy,
        "record_count": len(result.records),
        "staff_count": len(summaries),
        "skipped_rows": result.skipped_rows,
        "data_source": data_source or {},
    }
    return OutputDocument(
        metadata=metadata,
        staff_summary=list(summaries),
        leave_records=list(result.records),
        smo_employees=list(smo_employees or []),
    )


def document_to_dict(document: OutputDocument) -> Dict[str, Any]:
    return {
        "metadata": document.metadata,
        "staff_summary": [serialize_summary(summary) for summary in document.staff_summary],
        "leave_records": [serialize_record(record) for record in document.leave_records],
    }


def write_document(document: OutputDocument, path: str | Path) -> Path:
    """
    Write the document as UTF-8 JSON, replacing any existing file.

    The payload goes to a temporary file beside the target first, so a
    failed write never leaves a truncated report behind.

    Returns:
        Path written
    """
    target = Path(path)
    target.parent.mkdir(parents=True, exist_ok=True)
    payload = document_to_dict(document)

    tmp_path = None
    try:
        with tempfile.NamedTemporaryFile(
            mode="w",
            suffix=".json",
            dir=target.parent,
            delete=False,
            encoding="utf-8",
        ) as tmp:
            tmp_path = tmp.name
            json.dump(payload, tmp, indent=2, ensure_ascii=False)
            tmp.write("\n")
        os.replace(tmp_path, target)
        tmp_path = None
    finally:
        if tmp_path and os.path.exists(tmp_path):
            os.remove(tmp_path)

    logger.info("Report written to %s", target)
    return target


def format_console_summary(document: OutputDocument, top_n: int = config.DEFAULT_TOP_N) -> str:
    """Human-readable summary of a report."""
    meta = document.metadata
    date_range = meta.get("date_range", {})
    lines = [
        "=" * 70,
        "SMO LEAVE REPORT",
        "=" * 70,
        f"Date range:     {date_range.get('start')} to {date_range.get('end')}",
        f"Leave records:  {meta.get('record_count', 0)}",
        f"SMO staff:      {meta.get('staff_count', 0)}",
        f"Skipped rows:   {meta.get('skipped_rows', 0)}",
    ]

    if document.smo_employees:
        lines.append("")
        lines.append("Qualifying SMOs:")
        for employee in document.smo_employees:
            shifts = "n/a" if employee.shift_count is None else employee.shift_count
            lines.append(f"  {employee.full_name:<30} SMO shifts: {shifts}")

    top = aggregator.top_by_leave_days(document.staff_summary, top_n)
    if top:
        lines.append("")
        lines.append(f"Top {len(top)} by leave days:")
        for rank, summary in enumerate(top, 1):
            lines.append(
                f"  {rank:>2}. {summary.full_name:<30} {summary.total_leave_days:>5.1f} days "
                f"({summary.leave_shifts} shifts, {summary.approved_shifts} approved, "
                f"{summary.pending_shifts} pending)"
            )
    else:
        lines.append("")
        lines.append("No leave found for qualifying SMOs.")

    lines.append("=" * 70)
    return "\n".join(lines)


def print_console_summary(document: OutputDocument, top_n: int = config.DEFAULT_TOP_N) -> None:
    print(format_console_summary(document, top_n))
