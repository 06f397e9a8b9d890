"""Shared fixtures: a throwaway scheduling database on SQLite."""
from datetime import date
from typing import Optional

import pytest
from sqlalchemy import create_engine, text

from smo_leave.utilities.models import ExtractionConfig

TODAY = date(2026, 1, 15)

SCHEMA = [
    """CREATE TABLE employees (
        employee_id INTEGER PRIMARY KEY,
        first_name TEXT,
        last_name TEXT,
        category TEXT
    )""",
    """CREATE TABLE shifts (
        shift_id INTEGER PRIMARY KEY,
        shift_name TEXT
    )""",
    """CREATE TABLE requests (
        request_id INTEGER PRIMARY KEY,
        employee_id INTEGER,
        shift_id INTEGER,
        start_date INTEGER,
        start_time INTEGER,
        end_date INTEGER,
        end_time INTEGER,
        status INTEGER,
        is_blocked INTEGER DEFAULT 0,
        note TEXT
    )""",
    """CREATE TABLE assignments (
        assignment_id INTEGER PRIMARY KEY,
        employee_id INTEGER,
        shift_id INTEGER,
        assignment_date INTEGER
    )""",
]

SMO_SHIFT = 1
LEAVE_AM = 2
LEAVE_PM = 3
GENERAL_SHIFT = 4
VACATION = 5
CME_LEAVE = 6

SHIFTS = {
    SMO_SHIFT: "SMO Reporting",
    LEAVE_AM: "Annual Leave AM",
    LEAVE_PM: "Annual Leave PM",
    GENERAL_SHIFT: "General Reporting",
    VACATION: "Vacation",
    CME_LEAVE: "CME Leave",
}


class SchedulingDb:
    """Helper for populating the fixture tables."""

    def __init__(self, engine):
        self.engine = engine
        with engine.begin() as conn:
            for statement in SCHEMA:
                conn.execute(text(statement))
            for shift_id, name in SHIFTS.items():
                conn.execute(
                    text("INSERT INTO shifts (shift_id, shift_name) VALUES (:id, :name)"),
                    {"id": shift_id, "name": name},
                )

    def add_employee(self, employee_id, first_name, last_name, category="SMO", smo_shifts=0):
        with self.engine.begin() as conn:
            conn.execute(
                text(
                    "INSERT INTO employees (employee_id, first_name, last_name, category) "
                    "VALUES (:id, :first, :last, :category)"
                ),
                {"id": employee_id, "first": first_name, "last": last_name, "category": category},
            )
        self.add_assignments(employee_id, SMO_SHIFT, smo_shifts)

    def add_assignments(self, employee_id, shift_id, count):
        if count <= 0:
            return
        with self.engine.begin() as conn:
            conn.execute(
                text(
                    "INSERT INTO assignments (employee_id, shift_id, assignment_date) "
                    "VALUES (:employee, :shift, :day)"
                ),
                [
                    {"employee": employee_id, "shift": shift_id, "day": 20251201 + offset}
                    for offset in range(count)
                ],
            )

    def add_request(
        self,
        employee_id,
        shift_id,
        start_date: int,
        end_date: Optional[int] = None,
        start_time=None,
        end_time=None,
        status=2,
        is_blocked=0,
        note=None,
    ):
        with self.engine.begin() as conn:
            conn.execute(
                text(
                    "INSERT INTO requests (employee_id, shift_id, start_date, start_time, "
                    "end_date, end_time, status, is_blocked, note) VALUES (:employee, :shift, "
                    ":start_date, :start_time, :end_date, :end_time, :status, :blocked, :note)"
                ),
                {
                    "employee": employee_id,
                    "shift": shift_id,
                    "start_date": start_date,
                    "start_time": start_time,
                    "end_date": end_date if end_date is not None else start_date,
                    "end_time": end_time,
                    "status": status,
                    "blocked": is_blocked,
                    "note": note,
                },
            )


@pytest.fixture
def db_url(tmp_path):
    return f"sqlite:///{tmp_path / 'scheduling.db'}"


@pytest.fixture
def engine(db_url):
    engine = create_engine(db_url)
    yield engine
    engine.dispose()


@pytest.fixture
def scheduling_db(engine):
    return SchedulingDb(engine)


@pytest.fixture
def extraction_config(db_url, tmp_path):
    return ExtractionConfig.from_defaults(
        db_url=db_url,
        output_path=str(tmp_path / "out" / "report.json"),
    )
