"""Conversion of raw scheduling rows into leave records."""
import logging
from datetime import date, datetime, time, timedelta
from typing import Any, Dict, Iterable, List, Mapping, Optional, Tuple

from smo_leave.utilities import config
from smo_leave.utilities.models import (
    DateOrDateTime,
    ExtractionResult,
    LeaveRecord,
    SMOEmployee,
)

logger = logging.getLogger(__name__)


class RowDecodeError(ValueError):
    """A row whose date or time fields cannot be decoded."""


def normalize_text(value: Any) -> str:
    """Return a stripped string, with "" for null values."""
    return "" if value is None else str(value).strip()


def _as_int(value: Any, label: str) -> int:
    if value is None or isinstance(value, bool):
        raise RowDecodeError(f"{label} is missing")
    if isinstance(value, float) and value.is_integer():
        return int(value)
    try:
        return int(str(value).strip())
    except ValueError:
        raise RowDecodeError(f"{label} is not an integer: {value!r}")


def decode_date(value: Any) -> date:
    """
    Decode an 8-digit YYYYMMDD integer.

    Raises:
        RowDecodeError: If the value is not a valid calendar date
    """
    number = _as_int(value, "date")
    if not 10000101 <= number <= 99991231:
        raise RowDecodeError(f"date is not an 8-digit YYYYMMDD value: {value!r}")
    try:
        return date(number // 10000, number // 100 % 100, number % 100)
    except ValueError as exc:
        raise RowDecodeError(f"invalid calendar date {value!r}: {exc}")


def decode_time(value: Any) -> Tuple[time, int]:
    """
    Decode an HHMM integer in the 0-2400 range.

    2400 is the end of the day and decodes to 00:00 of the following day.

    Returns:
        (time of day, day offset)
    """
    number = _as_int(value, "time")
    if number == 2400:
        return time(0, 0), 1
    hours, minutes = divmod(number, 100)
    if number < 0 or hours > 23 or minutes > 59:
        raise RowDecodeError(f"time is not a valid HHMM value: {value!r}")
    return time(hours, minutes), 0


def format_time(value: Any) -> str:
    """Render an HHMM integer as "HH:MM"."""
    decoded, _ = decode_time(value)
    return decoded.strftime("%H:%M")


def combine(day: date, time_value: Any) -> DateOrDateTime:
    """Join a decoded date with an optional HHMM time."""
    if time_value is None:
        return day
    decoded, offset = decode_time(time_value)
    return datetime.combine(day + timedelta(days=offset), decoded)


def status_label(code: Any) -> str:
    """Map a numeric status code to its display label."""
    try:
        return config.STATUS_LABELS.get(int(code), config.UNKNOWN_STATUS_LABEL)
    except (TypeError, ValueError):
        return config.UNKNOWN_STATUS_LABEL


def format_full_name(last_name: Any, first_name: Any) -> str:
    """Build "Last, First", dropping whichever part is missing."""
    parts = [normalize_text(last_name), normalize_text(first_name)]
    return ", ".join(part for part in parts if part)


def map_row(row: Mapping[str, Any]) -> LeaveRecord:
    """
    Convert one raw row into a LeaveRecord.

    Raises:
        RowDecodeError: If the employee id, dates or times cannot be decoded
    """
    start_day = decode_date(row.get("start_date"))
    end_day = decode_date(row.get("end_date"))
    start = combine(start_day, row.get("start_time"))
    end = combine(end_day, row.get("end_time"))

    return LeaveRecord(
        employee_id=_as_int(row.get("employee_id"), "employee_id"),
        full_name=format_full_name(row.get("last_name"), row.get("first_name")),
        shift_name=normalize_text(row.get("shift_name")),
        start=start,
        end=end,
        status=status_label(row.get("status")),
        note=normalize_text(row.get("note")),
        shift_date=start_day,
    )


def map_rows(rows: Iterable[Mapping[str, Any]]) -> ExtractionResult:
    """
    Map a row stream, skipping rows that fail to decode.

    Args:
        rows: Raw rows from the database

    Returns:
        ExtractionResult with mapped records and skip statistics
    """
    result = ExtractionResult()
    for row in rows:
        result.rows_read += 1
        try:
            result.records.append(map_row(row))
        except RowDecodeError as exc:
            message = f"Skipped request {row.get('request_id')!r}: {exc}"
            logger.warning(message)
            result.skipped_rows += 1
            result.errors.append(message)

    logger.info(
        "Mapped %d of %d rows (%d skipped)",
        len(result.records),
        result.rows_read,
        result.skipped_rows,
    )
    return result


def index_smo_employees(
    records: List[LeaveRecord],
    shift_counts: Optional[Dict[int, int]] = None,
) -> List[SMOEmployee]:
    """
    Deduplicate employees from the records, first occurrence wins.

    Args:
        records: Mapped leave records
        shift_counts: Optional marker-shift counts per employee

    Returns:
        SMOEmployee list in first-seen order
    """
    counts = shift_counts or {}
    employees: Dict[int, SMOEmployee] = {}
    for record in records:
        if record.employee_id not in employees:
            employees[record.employee_id] = SMOEmployee(
                employee_id=record.employee_id,
                full_name=record.full_name,
                shift_count=counts.get(record.employee_id),
            )
    return list(employees.values())
