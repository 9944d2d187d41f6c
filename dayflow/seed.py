"""Seed script for development data.

Run with:  python -m dayflow.seed

Creates a handful of employees and leave types and allocates each employee
a balance for the current year. Rows that already exist are left alone, so
the script can be re-run safely.
"""

from __future__ import annotations

import asyncio
import logging
import uuid
from dataclasses import dataclass
from datetime import date
from typing import TYPE_CHECKING

from sqlalchemy import select
from sqlmodel import col

from dayflow.config import get_settings
from dayflow.db import dispose_engine, get_session_factory, transaction
from dayflow.models.balance import LeaveBalance
from dayflow.models.employee import Employee
from dayflow.models.leave_type import LeaveType

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession

logger = logging.getLogger(__name__)

# Well-known employee UUIDs
ADMIN_ID = uuid.UUID("00000000-0000-0000-0000-000000000001")
ALICE_ID = uuid.UUID("00000000-0000-0000-0000-000000000002")
BOB_ID = uuid.UUID("00000000-0000-0000-0000-000000000003")

EMPLOYEES = [
    {"id": ADMIN_ID, "employee_code": "EMP-0001", "first_name": "Hana", "last_name": "Reyes", "department": "HR"},
    {"id": ALICE_ID, "employee_code": "EMP-0002", "first_name": "Alice", "last_name": "Johnson",
     "department": "Engineering"},
    {"id": BOB_ID, "employee_code": "EMP-0003", "first_name": "Bob", "last_name": "Smith", "department": "Sales"},
]

LEAVE_TYPES = [
    {"name": "Annual Leave", "description": "Paid vacation", "default_days_per_year": 20, "is_paid": True},
    {"name": "Sick Leave", "description": "Illness or medical appointments", "default_days_per_year": 10,
     "is_paid": True, "requires_document": True},
    {"name": "Unpaid Leave", "description": "Leave without pay", "default_days_per_year": 30, "is_paid": False},
]


@dataclass
class SeedResult:
    employees: int = 0
    leave_types: int = 0
    balances: int = 0


async def seed_reference_data(session: AsyncSession, year: int) -> SeedResult:
    """Insert missing employees, leave types and ``year`` balances in one transaction."""
    result = SeedResult()

    async with transaction(session):
        employee_ids: list[uuid.UUID] = []
        for data in EMPLOYEES:
            existing = await session.execute(
                select(col(Employee.id)).where(col(Employee.employee_code) == data["employee_code"])
            )
            employee_id = existing.scalar_one_or_none()
            if employee_id is None:
                employee = Employee(**data)
                session.add(employee)
                employee_id = employee.id
                result.employees += 1
            employee_ids.append(employee_id)

        allocations: list[tuple[uuid.UUID, int]] = []
        for data in LEAVE_TYPES:
            existing = await session.execute(select(LeaveType).where(col(LeaveType.name) == data["name"]))
            leave_type = existing.scalar_one_or_none()
            if leave_type is None:
                leave_type = LeaveType(**data)
                session.add(leave_type)
                result.leave_types += 1
            allocations.append((leave_type.id, leave_type.default_days_per_year))

        await session.flush()

        for employee_id in employee_ids:
            for leave_type_id, days in allocations:
                existing = await session.execute(
                    select(col(LeaveBalance.id)).where(
                        col(LeaveBalance.employee_id) == employee_id,
                        col(LeaveBalance.leave_type_id) == leave_type_id,
                        col(LeaveBalance.year) == year,
                    )
                )
                if existing.scalar_one_or_none() is None:
                    session.add(
                        LeaveBalance(
                            employee_id=employee_id,
                            leave_type_id=leave_type_id,
                            year=year,
                            total_allocated=days,
                        )
                    )
                    result.balances += 1

    return result


async def _run() -> None:
    year = date.today().year
    try:
        async with get_session_factory()() as session:
            result = await seed_reference_data(session, year)
    finally:
        await dispose_engine()
    logger.info(
        "Seed complete for %d: employees=%d leave_types=%d balances=%d",
        year,
        result.employees,
        result.leave_types,
        result.balances,
    )


def main() -> None:
    """Entry point for the seed script."""
    settings = get_settings()
    logging.basicConfig(level=settings.log_level.upper(), format="%(asctime)s %(name)s %(levelname)s %(message)s")
    asyncio.run(_run())


if __name__ == "__main__":
    main()
