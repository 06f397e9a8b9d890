"""Data models for the SMO leave report."""
from dataclasses import dataclass, field, replace
from datetime import date, datetime
from typing import Any, Dict, List, Optional, Union

from smo_leave.utilities import config

DateOrDateTime = Union[date, datetime]


@dataclass
class DateWindow:
    """Represents an inclusive date range for extraction."""
    start: date
    end: date
    description: str


@dataclass(frozen=True)
class LeaveRecord:
    """One leave request row, normalized."""
    employee_id: int
    full_name: str
    shift_name: str
    start: DateOrDateTime
    end: DateOrDateTime
    status: str
    note: str = ""
    # Stored start date; differs from start when a 2400 start time rolls over
    shift_date: Optional[date] = None

    @property
    def leave_date(self) -> date:
        if self.shift_date is not None:
            return self.shift_date
        if isinstance(self.start, datetime):
            return self.start.date()
        return self.start


@dataclass
class SMOEmployee:
    """A qualifying consultant radiologist."""
    employee_id: int
    full_name: str
    shift_count: Optional[int] = None


@dataclass
class StaffSummary:
    """Per-employee leave totals."""
    employee_id: int
    full_name: str
    total_leave_days: float = 0.0
    leave_shifts: int = 0
    approved_shifts: int = 0
    pending_shifts: int = 0
    leave_types: str = ""


@dataclass
class ExtractionResult:
    """Records mapped from one query run."""
    records: List[LeaveRecord] = field(default_factory=list)
    rows_read: int = 0
    skipped_rows: int = 0
    errors: List[str] = field(default_factory=list)


@dataclass
class OutputDocument:
    """Report payload written to disk."""
    metadata: Dict[str, Any] = field(default_factory=dict)
    staff_summary: List[StaffSummary] = field(default_factory=list)
    leave_records: List[LeaveRecord] = field(default_factory=list)
    smo_employees: List[SMOEmployee] = field(default_factory=list)


@dataclass
class ExtractionConfig:
    """
    All parameters of a single extraction run.

    Built from the defaults in ``config`` and overridden from the command
    line. Call ``validate()`` before using it.
    """
    db_url: str = config.DB_URL
    output_path: str = config.DEFAULT_OUTPUT_PATH
    months_ahead: int = config.DEFAULT_MONTHS_AHEAD
    include_pending: bool = True
    leave_patterns: List[str] = field(
        default_factory=lambda: list(config.DEFAULT_LEAVE_PATTERNS)
    )
    qualification: str = config.QUALIFICATION_SHIFT_COUNT
    smo_marker: str = config.SMO_SHIFT_MARKER
    min_smo_shifts: int = config.DEFAULT_MIN_SMO_SHIFTS
    smo_category: str = config.SMO_CATEGORY
    leave_day_policy: str = config.POLICY_BUCKETED
    sort_by_name: bool = False
    query_timeout: int = config.QUERY_TIMEOUT
    top_n: int = config.DEFAULT_TOP_N

    @classmethod
    def from_defaults(cls, **overrides: Any) -> "ExtractionConfig":
        """Build a config from defaults, ignoring overrides that are None."""
        values = {key: value for key, value in overrides.items() if value is not None}
        return replace(cls(), **values)

    def validate(self) -> "ExtractionConfig":
        """
        Check every field.

        Raises:
            ValueError: naming the first invalid field
        """
        if not self.db_url or not self.db_url.strip():
            raise ValueError("db_url must not be empty")
        if not self.output_path or not str(self.output_path).strip():
            raise ValueError("output_path must not be empty")
        if not isinstance(self.months_ahead, int) or self.months_ahead < 1:
            raise ValueError(f"months_ahead must be a positive integer, got {self.months_ahead!r}")
        if not self.leave_patterns:
            raise ValueError("leave_patterns must contain at least one pattern")
        if any(not str(pattern).strip() for pattern in self.leave_patterns):
            raise ValueError("leave_patterns must not contain blank patterns")
        if self.qualification not in config.QUALIFICATION_RULES:
            raise ValueError(
                f"qualification must be one of {config.QUALIFICATION_RULES}, got {self.qualification!r}"
            )
        if self.qualification == config.QUALIFICATION_SHIFT_COUNT:
            if not self.smo_marker or not self.smo_marker.strip():
                raise ValueError("smo_marker must not be empty")
            if not isinstance(self.min_smo_shifts, int) or self.min_smo_shifts < 1:
                raise ValueError(
                    f"min_smo_shifts must be a positive integer, got {self.min_smo_shifts!r}"
                )
        elif not self.smo_category or not self.smo_category.strip():
            raise ValueError("smo_category must not be empty")
        if self.leave_day_policy not in config.LEAVE_DAY_POLICIES:
            raise ValueError(
                f"leave_day_policy must be one of {config.LEAVE_DAY_POLICIES}, "
                f"got {self.leave_day_policy!r}"
            )
        if not isinstance(self.query_timeout, int) or self.query_timeout < 1:
            raise ValueError(f"query_timeout must be a positive integer, got {self.query_timeout!r}")
        if not isinstance(self.top_n, int) or self.top_n < 1:
            raise ValueError(f"top_n must be a positive integer, got {self.top_n!r}")
        return self
