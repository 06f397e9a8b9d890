"""Configuration constants and settings for the SMO leave report."""
import os
from typing import Dict, List

# ============================================================================
# DATABASE CONFIGURATION
# ============================================================================

DB_URL = os.getenv(
    "SMO_LEAVE_DB_URL",
    "mysql+pymysql://report_reader@sched-db01.radiology.local:3306/scheduling",
)

EMPLOYEE_TABLE = "employees"
REQUEST_TABLE = "requests"
SHIFT_TABLE = "shifts"
ASSIGNMENT_TABLE = "assignments"

# Seconds before a running query is abandoned
QUERY_TIMEOUT = int(os.getenv("SMO_LEAVE_QUERY_TIMEOUT", "60"))
CONNECT_TIMEOUT = 15

# ============================================================================
# REPORT CONFIGURATION
# ============================================================================

DEFAULT_OUTPUT_PATH = os.getenv("SMO_LEAVE_OUTPUT", "smo_leave_report.json")
DEFAULT_MONTHS_AHEAD = 6
DEFAULT_TOP_N = 10

# SQL LIKE patterns, matched against the lower-cased shift name
DEFAULT_LEAVE_PATTERNS: List[str] = [
    "leave%",
    "%annual leave%",
    "%vacation%",
    "%cme%",
    "%sick%",
]

# ============================================================================
# SMO QUALIFICATION
# ============================================================================

QUALIFICATION_SHIFT_COUNT = "shift_count"
QUALIFICATION_PROFILE = "profile"
QUALIFICATION_RULES = [QUALIFICATION_SHIFT_COUNT, QUALIFICATION_PROFILE]

SMO_SHIFT_MARKER = "smo"
DEFAULT_MIN_SMO_SHIFTS = 5
SMO_CATEGORY = "SMO"

# ============================================================================
# BUSINESS RULES
# ============================================================================

STATUS_PENDING = 1
STATUS_APPROVED = 2
STATUS_DENIED = 4
STATUS_WAITLISTED = 8

STATUS_LABELS: Dict[int, str] = {
    STATUS_PENDING: "Pending",
    STATUS_APPROVED: "Approved",
    STATUS_DENIED: "Denied",
    STATUS_WAITLISTED: "Waitlisted",
}

UNKNOWN_STATUS_LABEL = "Other"

POLICY_BUCKETED = "bucketed"
POLICY_FLAT = "flat"
LEAVE_DAY_POLICIES = [POLICY_BUCKETED, POLICY_FLAT]

AM_MARKER = "am"
PM_MARKER = "pm"
HALF_DAY = 0.5
