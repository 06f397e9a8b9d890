"""SQL construction for leave and SMO extraction."""
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Tuple

from sqlalchemy import bindparam, text
from sqlalchemy.sql.elements import TextClause

from smo_leave.utilities import config, utils
from smo_leave.utilities.models import DateWindow, ExtractionConfig

logger = logging.getLogger(__name__)


@dataclass
class LeaveQuery:
    """A bound SQL statement ready for execution."""
    statement: TextClause
    params: Dict[str, Any] = field(default_factory=dict)


def status_codes(include_pending: bool) -> List[int]:
    """
    Request statuses selected by the report.

    Denied and waitlisted requests are never selected.
    """
    if include_pending:
        return [config.STATUS_PENDING, config.STATUS_APPROVED]
    return [config.STATUS_APPROVED]


def like_pattern(value: str) -> str:
    """Wrap a marker in wildcards for a case-insensitive substring match."""
    return f"%{value.strip().lower()}%"


def _leave_pattern_clause(patterns: List[str]) -> Tuple[str, Dict[str, str]]:
    """OR together one LIKE per pattern, each with its own bind parameter."""
    clauses = []
    params: Dict[str, str] = {}
    for index, pattern in enumerate(patterns):
        name = f"leave_pattern_{index}"
        clauses.append(f"LOWER(s.shift_name) LIKE :{name}")
        params[name] = pattern.strip().lower()
    return "(" + " OR ".join(clauses) + ")", params


def _smo_clause(cfg: ExtractionConfig) -> Tuple[str, Dict[str, Any]]:
    """Restrict employees to SMOs using the configured qualification rule."""
    if cfg.qualification == config.QUALIFICATION_PROFILE:
        return "e.category = :smo_category", {"smo_category": cfg.smo_category}

    clause = f"""e.employee_id IN (
            SELECT a.employee_id
            FROM {config.ASSIGNMENT_TABLE} a
            JOIN {config.SHIFT_TABLE} ms ON ms.shift_id = a.shift_id
            WHERE LOWER(ms.shift_name) LIKE :smo_marker
            GROUP BY a.employee_id
            HAVING COUNT(*) >= :min_smo_shifts
        )"""
    return clause, {
        "smo_marker": like_pattern(cfg.smo_marker),
        "min_smo_shifts": cfg.min_smo_shifts,
    }


def build_leave_query(cfg: ExtractionConfig, window: DateWindow) -> LeaveQuery:
    """
    Build the leave request query.

    Selects assigned (not blocked) requests of qualifying SMOs whose shift
    name matches a leave pattern and whose interval intersects the window.

    Args:
        cfg: Run configuration
        window: Inclusive date window

    Returns:
        LeaveQuery with every external value bound as a parameter
    """
    pattern_sql, pattern_params = _leave_pattern_clause(cfg.leave_patterns)
    smo_sql, smo_params = _smo_clause(cfg)

    if cfg.sort_by_name:
        order_sql = "e.last_name, e.first_name, r.start_date, r.start_time"
    else:
        order_sql = "r.employee_id, r.start_date, r.start_time"

    statement = text(
        f"""
        SELECT r.request_id, r.employee_id, e.first_name, e.last_name,
               s.shift_name, r.start_date, r.start_time, r.end_date, r.end_time,
               r.status, r.note
        FROM {config.REQUEST_TABLE} r
        JOIN {config.EMPLOYEE_TABLE} e ON e.employee_id = r.employee_id
        JOIN {config.SHIFT_TABLE} s ON s.shift_id = r.shift_id
        WHERE r.status IN :statuses
          AND r.is_blocked = 0
          AND {pattern_sql}
          AND r.start_date <= :window_end
          AND r.end_date >= :window_start
          AND {smo_sql}
        ORDER BY {order_sql}
        """
    ).bindparams(bindparam("statuses", expanding=True))

    params: Dict[str, Any] = {
        "statuses": status_codes(cfg.include_pending),
        "window_start": utils.encode_date(window.start),
        "window_end": utils.encode_date(window.end),
    }
    params.update(pattern_params)
    params.update(smo_params)

    logger.debug("Built leave query with %d parameters", len(params))
    return LeaveQuery(statement=statement, params=params)


def build_smo_query(cfg: ExtractionConfig) -> LeaveQuery:
    """
    Build the query listing qualifying SMOs with their marker-shift counts.

    Under the profile rule the count is still reported when the employee has
    marker shifts, and is zero otherwise.
    """
    if cfg.qualification == config.QUALIFICATION_PROFILE:
        statement = text(
            f"""
            SELECT e.employee_id, COUNT(a.shift_id) AS shift_count
            FROM {config.EMPLOYEE_TABLE} e
            LEFT JOIN {config.ASSIGNMENT_TABLE} a ON a.employee_id = e.employee_id
              AND a.shift_id IN (
                  SELECT ms.shift_id FROM {config.SHIFT_TABLE} ms
                  WHERE LOWER(ms.shift_name) LIKE :smo_marker
              )
            WHERE e.category = :smo_category
            GROUP BY e.employee_id
            """
        )
        params = {
            "smo_marker": like_pattern(cfg.smo_marker),
            "smo_category": cfg.smo_category,
        }
    else:
        statement = text(
            f"""
            SELECT a.employee_id, COUNT(*) AS shift_count
            FROM {config.ASSIGNMENT_TABLE} a
            JOIN {config.SHIFT_TABLE} ms ON ms.shift_id = a.shift_id
            WHERE LOWER(ms.shift_name) LIKE :smo_marker
            GROUP BY a.employee_id
            HAVING COUNT(*) >= :min_smo_shifts
            """
        )
        params = {
            "smo_marker": like_pattern(cfg.smo_marker),
            "min_smo_shifts": cfg.min_smo_shifts,
        }
    return LeaveQuery(statement=statement, params=params)
