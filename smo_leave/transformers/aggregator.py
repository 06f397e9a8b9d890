"""Per-employee aggregation of leave records."""
import logging
from typing import List, Sequence

import pandas as pd

from smo_leave.utilities import config
from smo_leave.utilities.models import LeaveRecord, StaffSummary

logger = logging.getLogger(__name__)


def records_to_frame(records: Sequence[LeaveRecord]) -> pd.DataFrame:
    """
    Flatten leave records into a dataframe in their original order.

    Args:
        records: Mapped leave records

    Returns:
        DataFrame with one row per record
    """
    return pd.DataFrame(
        {
            "employee_id": [record.employee_id for record in records],
            "full_name": [record.full_name for record in records],
            "shift_name": [record.shift_name for record in records],
            "status": [record.status for record in records],
            "leave_date": [record.leave_date for record in records],
        }
    )


def _distinct_in_order(values: pd.Series) -> str:
    return ", ".join(dict.fromkeys(value for value in values if value))


def leave_days_flat(df: pd.DataFrame) -> pd.Series:
    """Half a day per leave shift."""
    return df.groupby("employee_id", sort=False).size() * config.HALF_DAY


def leave_days_bucketed(df: pd.DataFrame) -> pd.Series:
    """
    Half a day per AM or PM marker present on each date.

    A date with both an AM-marked and a PM-marked shift counts 1.0, with only
    one of them 0.5, and with neither 0.
    """
    names = df["shift_name"].astype("string").fillna("")
    work = pd.DataFrame(
        {
            "employee_id": df["employee_id"],
            "leave_date": df["leave_date"],
            "is_am": names.str.contains(config.AM_MARKER, case=False, regex=False),
            "is_pm": names.str.contains(config.PM_MARKER, case=False, regex=False),
        }
    )
    per_day = work.groupby(["employee_id", "leave_date"], sort=False)[["is_am", "is_pm"]].any()
    day_value = (per_day["is_am"].astype(float) + per_day["is_pm"].astype(float)) * config.HALF_DAY
    return day_value.groupby(level="employee_id", sort=False).sum()


def summarize_staff(
    records: Sequence[LeaveRecord],
    policy: str = config.POLICY_BUCKETED,
) -> List[StaffSummary]:
    """
    Group records by employee and compute leave totals.

    Args:
        records: Mapped leave records
        policy: Leave-day policy, "bucketed" or "flat"

    Returns:
        One StaffSummary per employee, in first-seen order
    """
    if policy not in config.LEAVE_DAY_POLICIES:
        raise ValueError(f"Unknown leave-day policy: {policy!r}")
    if not records:
        return []

    df = records_to_frame(records)
    grouped = df.groupby("employee_id", sort=False)

    names = grouped["full_name"].first()
    shift_counts = grouped.size()
    approved = (df["status"] == config.STATUS_LABELS[config.STATUS_APPROVED]).groupby(
        df["employee_id"], sort=False
    ).sum()
    pending = (df["status"] == config.STATUS_LABELS[config.STATUS_PENDING]).groupby(
        df["employee_id"], sort=False
    ).sum()
    leave_types = grouped["shift_name"].agg(_distinct_in_order)

    if policy == config.POLICY_FLAT:
        leave_days = leave_days_flat(df)
    else:
        leave_days = leave_days_bucketed(df)

    summaries = [
        StaffSummary(
            employee_id=int(employee_id),
            full_name=str(names[employee_id]),
            total_leave_days=float(leave_days.get(employee_id, 0.0)),
            leave_shifts=int(shift_counts[employee_id]),
            approved_shifts=int(approved[employee_id]),
            pending_shifts=int(pending[employee_id]),
            leave_types=str(leave_types[employee_id]),
        )
        for employee_id in shift_counts.index
    ]

    logger.info(
        "Summarized %d records for %d employees (%s policy)",
        len(records),
        len(summaries),
        policy,
    )
    return summaries


def top_by_leave_days(summaries: Sequence[StaffSummary], n: int) -> List[StaffSummary]:
    """Employees with the most leave days, ties kept in grouping order."""
    return sorted(summaries, key=lambda summary: summary.total_leave_days, reverse=True)[:n]
