"""HTTP tests for the leave request and balance endpoints."""

from __future__ import annotations

import uuid
from datetime import date, timedelta
from typing import TYPE_CHECKING

from conftest import add_balance, add_employee, add_leave_type

if TYPE_CHECKING:
    from httpx import AsyncClient
    from sqlalchemy.ext.asyncio import AsyncSession

EMPLOYEE_ID = uuid.UUID("20000000-0000-0000-0000-000000000001")
OTHER_EMPLOYEE_ID = uuid.UUID("20000000-0000-0000-0000-000000000002")
HR_ID = uuid.UUID("20000000-0000-0000-0000-000000000003")

EMPLOYEE_HEADERS = {"X-Employee-Id": str(EMPLOYEE_ID), "X-Role": "employee"}
OTHER_HEADERS = {"X-Employee-Id": str(OTHER_EMPLOYEE_ID), "X-Role": "employee"}
HR_HEADERS = {"X-Employee-Id": str(HR_ID), "X-Role": "hr"}
ADMIN_HEADERS = {"X-Employee-Id": str(HR_ID), "X-Role": "admin"}

REQUESTS_URL = "/leave-requests"
START = date.today() + timedelta(days=14)


# ---------------------------------------------------------------------------
# Test helpers
# ---------------------------------------------------------------------------


async def _setup(session: AsyncSession, total_allocated: int = 20) -> uuid.UUID:
    await add_employee(session, EMPLOYEE_ID, first_name="Alice", last_name="Johnson")
    await add_employee(session, OTHER_EMPLOYEE_ID, first_name="Bob", last_name="Smith")
    await add_employee(session, HR_ID, first_name="Hana", last_name="Reyes")
    leave_type_id = await add_leave_type(session)
    await add_balance(session, EMPLOYEE_ID, leave_type_id, START.year, total_allocated=total_allocated)
    return leave_type_id


def _submit_body(leave_type_id: uuid.UUID, days: int = 3, start: date = START) -> dict:
    return {
        "leave_type_id": str(leave_type_id),
        "start_date": start.isoformat(),
        "end_date": (start + timedelta(days=days - 1)).isoformat(),
        "reason": "Visiting family abroad",
    }


async def _submit(client: AsyncClient, leave_type_id: uuid.UUID, days: int = 3) -> str:
    response = await client.post(REQUESTS_URL, json=_submit_body(leave_type_id, days), headers=EMPLOYEE_HEADERS)
    assert response.status_code == 201, response.text
    return response.json()["id"]


async def _balance(client: AsyncClient) -> dict:
    response = await client.get(
        f"/employees/{EMPLOYEE_ID}/balances", params={"year": START.year}, headers=EMPLOYEE_HEADERS
    )
    assert response.status_code == 200
    return response.json()["items"][0]


# ---------------------------------------------------------------------------
# Submit
# ---------------------------------------------------------------------------


async def test_submit_returns_201(async_client: AsyncClient, db_session: AsyncSession) -> None:
    leave_type_id = await _setup(db_session)

    response = await async_client.post(REQUESTS_URL, json=_submit_body(leave_type_id), headers=EMPLOYEE_HEADERS)

    assert response.status_code == 201
    data = response.json()
    assert data["status"] == "PENDING"
    assert data["total_days"] == 3
    assert data["employee"]["id"] == str(EMPLOYEE_ID)
    assert data["leave_type"]["name"] == "Annual Leave"
    assert data["approver"] is None

    balance = await _balance(async_client)
    assert balance["pending"] == 3
    assert balance["available"] == 17


async def test_submit_insufficient_balance_returns_400(async_client: AsyncClient, db_session: AsyncSession) -> None:
    leave_type_id = await _setup(db_session, total_allocated=2)

    response = await async_client.post(REQUESTS_URL, json=_submit_body(leave_type_id), headers=EMPLOYEE_HEADERS)

    assert response.status_code == 400
    data = response.json()
    assert data["error"] == "InsufficientBalanceError"
    assert data["detail"] == "Insufficient leave balance"
    assert data["status_code"] == 400


async def test_submit_past_start_returns_400(async_client: AsyncClient, db_session: AsyncSession) -> None:
    leave_type_id = await _setup(db_session)
    body = _submit_body(leave_type_id, start=date.today() - timedelta(days=1))

    response = await async_client.post(REQUESTS_URL, json=body, headers=EMPLOYEE_HEADERS)

    assert response.status_code == 400
    assert response.json()["error"] == "ValidationError"


async def test_submit_short_reason_returns_422(async_client: AsyncClient, db_session: AsyncSession) -> None:
    leave_type_id = await _setup(db_session)
    body = {**_submit_body(leave_type_id), "reason": "tired"}

    response = await async_client.post(REQUESTS_URL, json=body, headers=EMPLOYEE_HEADERS)

    assert response.status_code == 422


async def test_submit_without_identity_returns_422(async_client: AsyncClient, db_session: AsyncSession) -> None:
    leave_type_id = await _setup(db_session)

    response = await async_client.post(REQUESTS_URL, json=_submit_body(leave_type_id))

    assert response.status_code == 422


async def test_unknown_role_returns_422(async_client: AsyncClient) -> None:
    headers = {"X-Employee-Id": str(EMPLOYEE_ID), "X-Role": "superuser"}

    response = await async_client.get(f"{REQUESTS_URL}/me", headers=headers)

    assert response.status_code == 422


# ---------------------------------------------------------------------------
# Decisions
# ---------------------------------------------------------------------------


async def test_hr_approves(async_client: AsyncClient, db_session: AsyncSession) -> None:
    leave_type_id = await _setup(db_session)
    request_id = await _submit(async_client, leave_type_id)

    response = await async_client.patch(
        f"{REQUESTS_URL}/{request_id}/approve", json={"approver_comment": "Approved"}, headers=HR_HEADERS
    )

    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "APPROVED"
    assert data["approver"]["id"] == str(HR_ID)
    assert data["approved_at"] is not None

    balance = await _balance(async_client)
    assert (balance["used"], balance["pending"]) == (3, 0)


async def test_approve_without_body(async_client: AsyncClient, db_session: AsyncSession) -> None:
    leave_type_id = await _setup(db_session)
    request_id = await _submit(async_client, leave_type_id)

    response = await async_client.patch(f"{REQUESTS_URL}/{request_id}/approve", headers=ADMIN_HEADERS)

    assert response.status_code == 200
    assert response.json()["status"] == "APPROVED"


async def test_employee_cannot_approve(async_client: AsyncClient, db_session: AsyncSession) -> None:
    leave_type_id = await _setup(db_session)
    request_id = await _submit(async_client, leave_type_id)

    response = await async_client.patch(f"{REQUESTS_URL}/{request_id}/approve", headers=EMPLOYEE_HEADERS)

    assert response.status_code == 403
    assert response.json()["detail"] == "HR or admin access required"


async def test_approve_twice_returns_409(async_client: AsyncClient, db_session: AsyncSession) -> None:
    leave_type_id = await _setup(db_session)
    request_id = await _submit(async_client, leave_type_id)
    first = await async_client.patch(f"{REQUESTS_URL}/{request_id}/approve", headers=HR_HEADERS)
    assert first.status_code == 200

    response = await async_client.patch(f"{REQUESTS_URL}/{request_id}/approve", headers=HR_HEADERS)

    assert response.status_code == 409
    assert response.json()["error"] == "InvalidStateError"


async def test_approve_unknown_request_returns_404(async_client: AsyncClient, db_session: AsyncSession) -> None:
    await _setup(db_session)

    response = await async_client.patch(f"{REQUESTS_URL}/{uuid.uuid4()}/approve", headers=HR_HEADERS)

    assert response.status_code == 404


async def test_approve_by_unknown_approver_returns_404(async_client: AsyncClient, db_session: AsyncSession) -> None:
    leave_type_id = await _setup(db_session)
    request_id = await _submit(async_client, leave_type_id)
    headers = {"X-Employee-Id": str(uuid.uuid4()), "X-Role": "hr"}

    response = await async_client.patch(f"{REQUESTS_URL}/{request_id}/approve", headers=headers)

    assert response.status_code == 404
    data = response.json()
    assert data["error"] == "NotFoundError"
    assert data["detail"] == "Approver employee profile not found"
    balance = await _balance(async_client)
    assert (balance["used"], balance["pending"]) == (0, 3)


async def test_reject_releases_days(async_client: AsyncClient, db_session: AsyncSession) -> None:
    leave_type_id = await _setup(db_session)
    request_id = await _submit(async_client, leave_type_id)

    response = await async_client.patch(
        f"{REQUESTS_URL}/{request_id}/reject", json={"approver_comment": "policy conflict"}, headers=HR_HEADERS
    )

    assert response.status_code == 200
    assert response.json()["status"] == "REJECTED"
    assert response.json()["approver_comment"] == "policy conflict"
    balance = await _balance(async_client)
    assert (balance["used"], balance["pending"]) == (0, 0)


async def test_reject_blank_comment_returns_400(async_client: AsyncClient, db_session: AsyncSession) -> None:
    leave_type_id = await _setup(db_session)
    request_id = await _submit(async_client, leave_type_id)

    response = await async_client.patch(
        f"{REQUESTS_URL}/{request_id}/reject", json={"approver_comment": "  "}, headers=HR_HEADERS
    )

    assert response.status_code == 400
    assert response.json()["detail"] == "Approver comment is required for rejection"


async def test_reject_without_body_returns_422(async_client: AsyncClient, db_session: AsyncSession) -> None:
    leave_type_id = await _setup(db_session)
    request_id = await _submit(async_client, leave_type_id)

    response = await async_client.patch(f"{REQUESTS_URL}/{request_id}/reject", headers=HR_HEADERS)

    assert response.status_code == 422


# ---------------------------------------------------------------------------
# Cancel
# ---------------------------------------------------------------------------


async def test_owner_cancels(async_client: AsyncClient, db_session: AsyncSession) -> None:
    leave_type_id = await _setup(db_session)
    request_id = await _submit(async_client, leave_type_id)

    response = await async_client.patch(f"{REQUESTS_URL}/{request_id}/cancel", headers=EMPLOYEE_HEADERS)

    assert response.status_code == 200
    assert response.json()["status"] == "CANCELLED"
    assert (await _balance(async_client))["pending"] == 0


async def test_other_employee_cancel_returns_403(async_client: AsyncClient, db_session: AsyncSession) -> None:
    leave_type_id = await _setup(db_session)
    request_id = await _submit(async_client, leave_type_id)

    response = await async_client.patch(f"{REQUESTS_URL}/{request_id}/cancel", headers=OTHER_HEADERS)

    assert response.status_code == 403
    assert (await _balance(async_client))["pending"] == 3


async def test_hr_cancel_of_others_request_returns_403(
    async_client: AsyncClient, db_session: AsyncSession
) -> None:
    leave_type_id = await _setup(db_session)
    request_id = await _submit(async_client, leave_type_id)

    response = await async_client.patch(f"{REQUESTS_URL}/{request_id}/cancel", headers=HR_HEADERS)

    assert response.status_code == 403
    detail = await async_client.get(f"{REQUESTS_URL}/{request_id}", headers=HR_HEADERS)
    assert detail.json()["status"] == "PENDING"
    assert (await _balance(async_client))["pending"] == 3


async def test_cancel_decided_request_returns_409(async_client: AsyncClient, db_session: AsyncSession) -> None:
    leave_type_id = await _setup(db_session)
    request_id = await _submit(async_client, leave_type_id)
    await async_client.patch(
        f"{REQUESTS_URL}/{request_id}/reject", json={"approver_comment": "Short staffed"}, headers=HR_HEADERS
    )

    response = await async_client.patch(f"{REQUESTS_URL}/{request_id}/cancel", headers=EMPLOYEE_HEADERS)

    assert response.status_code == 409


# ---------------------------------------------------------------------------
# Reads
# ---------------------------------------------------------------------------


async def test_get_request_visibility(async_client: AsyncClient, db_session: AsyncSession) -> None:
    leave_type_id = await _setup(db_session)
    request_id = await _submit(async_client, leave_type_id)

    own = await async_client.get(f"{REQUESTS_URL}/{request_id}", headers=EMPLOYEE_HEADERS)
    hr = await async_client.get(f"{REQUESTS_URL}/{request_id}", headers=HR_HEADERS)
    other = await async_client.get(f"{REQUESTS_URL}/{request_id}", headers=OTHER_HEADERS)

    assert own.status_code == 200
    assert hr.status_code == 200
    assert other.status_code == 404


async def test_my_requests(async_client: AsyncClient, db_session: AsyncSession) -> None:
    leave_type_id = await _setup(db_session)
    request_id = await _submit(async_client, leave_type_id)

    mine = await async_client.get(f"{REQUESTS_URL}/me", headers=EMPLOYEE_HEADERS)
    theirs = await async_client.get(f"{REQUESTS_URL}/me", headers=OTHER_HEADERS)

    assert [item["id"] for item in mine.json()] == [request_id]
    assert theirs.json() == []


async def test_my_summary(async_client: AsyncClient, db_session: AsyncSession) -> None:
    leave_type_id = await _setup(db_session)
    await _submit(async_client, leave_type_id)

    response = await async_client.get(f"{REQUESTS_URL}/me/summary", headers=EMPLOYEE_HEADERS)

    assert response.status_code == 200
    data = response.json()
    assert data["year"] == date.today().year
    assert data["stats"]["total_requests"] == 1
    assert data["stats"]["pending_requests"] == 1
    assert len(data["recent_requests"]) == 1


async def test_list_requires_approver(async_client: AsyncClient, db_session: AsyncSession) -> None:
    await _setup(db_session)

    response = await async_client.get(REQUESTS_URL, headers=EMPLOYEE_HEADERS)

    assert response.status_code == 403


async def test_list_with_status_filter(async_client: AsyncClient, db_session: AsyncSession) -> None:
    leave_type_id = await _setup(db_session)
    approved_id = await _submit(async_client, leave_type_id, days=1)
    pending_id = await _submit(async_client, leave_type_id, days=2)
    await async_client.patch(f"{REQUESTS_URL}/{approved_id}/approve", headers=HR_HEADERS)

    response = await async_client.get(REQUESTS_URL, params={"status": "PENDING"}, headers=HR_HEADERS)

    assert response.status_code == 200
    data = response.json()
    assert [item["id"] for item in data["items"]] == [pending_id]
    assert data["pagination"] == {"page": 1, "limit": 20, "total": 1, "total_pages": 1}


async def test_list_rejects_oversized_page(async_client: AsyncClient, db_session: AsyncSession) -> None:
    await _setup(db_session)

    response = await async_client.get(REQUESTS_URL, params={"limit": 500}, headers=HR_HEADERS)

    assert response.status_code == 422


async def test_balances_forbidden_for_other_employee(async_client: AsyncClient, db_session: AsyncSession) -> None:
    await _setup(db_session)

    response = await async_client.get(f"/employees/{EMPLOYEE_ID}/balances", headers=OTHER_HEADERS)

    assert response.status_code == 403


async def test_balances_visible_to_hr(async_client: AsyncClient, db_session: AsyncSession) -> None:
    await _setup(db_session)

    response = await async_client.get(
        f"/employees/{EMPLOYEE_ID}/balances", params={"year": START.year}, headers=HR_HEADERS
    )

    assert response.status_code == 200
    data = response.json()
    assert data["total"] == 1
    assert data["items"][0]["total_allocated"] == 20
