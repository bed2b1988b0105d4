"""
Integration tests for the order and task endpoints.

Tests:
- Order creation and completion
- 422 for a missing invoicing decision, 409 for a concurrent closer
- 502 when the order was completed but the invoice task failed
- Invoice task done moves the order to invoiced
- Task due dates in and out as UTC, acting operator stored
"""

from unittest.mock import AsyncMock, patch
from uuid import uuid4

import pytest

from core.exceptions import ConcurrentModificationError, StoreError
from crud import OrderCRUD, TaskCRUD
from db import OrderStatus

API = "/api/v1"


class TestOrderEndpoints:
    """Tests for /orders."""

    @pytest.mark.asyncio
    async def test_create_order(self, client, sample_customer, sample_facility):
        actor_id = str(uuid4())

        response = await client.post(
            f"{API}/orders",
            json={
                "orderNumber": "2024-118",
                "workType": "Annual fire alarm control",
                "customerId": str(sample_customer.id),
                "facilityId": str(sample_facility.id),
                "categories": ["fire_alarm"],
            },
            headers={"X-Actor-ID": actor_id},
        )

        assert response.status_code == 201
        data = response.json()
        assert data["status"] == "pending"
        assert data["revision"] == 0
        assert data["updatedBy"] == actor_id

    @pytest.mark.asyncio
    async def test_complete_order_with_invoice_task(
        self, client, sample_order, sample_technician
    ):
        response = await client.post(
            f"{API}/orders/{sample_order.id}/complete",
            json={
                "alreadyInvoiced": False,
                "invoiceTechnicianId": str(sample_technician.id),
            },
        )

        assert response.status_code == 200
        data = response.json()
        assert data["succeeded"] is True
        assert data["order"]["status"] == "completed"
        assert data["invoiceTask"]["taskType"] == "invoice"
        assert data["invoiceTask"]["priority"] == "high"
        assert data["invoiceTask"]["technicianId"] == str(sample_technician.id)

    @pytest.mark.asyncio
    async def test_complete_without_technician_returns_422(
        self, client, db_session, sample_order
    ):
        response = await client.post(
            f"{API}/orders/{sample_order.id}/complete",
            json={"alreadyInvoiced": False},
        )

        assert response.status_code == 422
        stored = await OrderCRUD.read(db_session, sample_order.id, refresh=True)
        assert stored.status == OrderStatus.IN_PROGRESS

    @pytest.mark.asyncio
    async def test_concurrent_close_returns_409(
        self, client, sample_order, sample_technician
    ):
        conflict = ConcurrentModificationError(
            "order", sample_order.id, 0, operation="compare_and_set_status"
        )
        with patch.object(
            OrderCRUD, "compare_and_set_status", AsyncMock(side_effect=conflict)
        ):
            response = await client.post(
                f"{API}/orders/{sample_order.id}/complete",
                json={
                    "alreadyInvoiced": False,
                    "invoiceTechnicianId": str(sample_technician.id),
                },
            )

        assert response.status_code == 409
        assert response.json()["entityId"] == str(sample_order.id)

    @pytest.mark.asyncio
    async def test_task_failure_returns_502_with_steps(
        self, client, db_session, sample_order, sample_technician
    ):
        with patch.object(
            TaskCRUD,
            "insert",
            AsyncMock(side_effect=StoreError("insert rejected", entity="task")),
        ):
            response = await client.post(
                f"{API}/orders/{sample_order.id}/complete",
                json={
                    "alreadyInvoiced": False,
                    "invoiceTechnicianId": str(sample_technician.id),
                },
            )

        assert response.status_code == 502
        data = response.json()
        assert data["succeeded"] is False
        assert data["order"]["status"] == "completed"
        assert [s["result"] for s in data["steps"]] == ["succeeded", "failed"]

        stored = await OrderCRUD.read(db_session, sample_order.id, refresh=True)
        assert stored.status == OrderStatus.COMPLETED

    @pytest.mark.asyncio
    async def test_edit_to_invoiced_returns_422(self, client, sample_order):
        response = await client.patch(
            f"{API}/orders/{sample_order.id}", json={"status": "invoiced"}
        )

        assert response.status_code == 422

    @pytest.mark.asyncio
    async def test_missing_order_returns_404(self, client):
        response = await client.post(
            f"{API}/orders/{uuid4()}/complete", json={"alreadyInvoiced": True}
        )

        assert response.status_code == 404


class TestTaskEndpoints:
    """Tests for /tasks."""

    @pytest.mark.asyncio
    async def test_invoice_task_done_invoices_order(
        self, client, sample_order, sample_technician
    ):
        completion = await client.post(
            f"{API}/orders/{sample_order.id}/complete",
            json={
                "alreadyInvoiced": False,
                "invoiceTechnicianId": str(sample_technician.id),
            },
        )
        task_id = completion.json()["invoiceTask"]["id"]

        response = await client.patch(f"{API}/tasks/{task_id}", json={"status": "done"})

        assert response.status_code == 200
        data = response.json()
        assert data["task"]["status"] == "done"
        assert data["orderOutcome"]["result"] == "succeeded"

        order = await client.get(f"{API}/orders/{sample_order.id}")
        assert order.json()["status"] == "invoiced"

    @pytest.mark.asyncio
    async def test_order_failure_returns_502(
        self, client, sample_order, sample_technician
    ):
        completion = await client.post(
            f"{API}/orders/{sample_order.id}/complete",
            json={
                "alreadyInvoiced": False,
                "invoiceTechnicianId": str(sample_technician.id),
            },
        )
        task_id = completion.json()["invoiceTask"]["id"]

        with patch.object(
            OrderCRUD,
            "compare_and_set_status",
            AsyncMock(side_effect=StoreError("database unavailable", entity="order")),
        ):
            response = await client.patch(f"{API}/tasks/{task_id}", json={"status": "done"})

        assert response.status_code == 502
        data = response.json()
        assert data["task"]["status"] == "done"
        assert data["orderOutcome"]["result"] == "failed"

    @pytest.mark.asyncio
    async def test_create_task_with_missing_reference(self, client):
        response = await client.post(
            f"{API}/tasks", json={"taskType": "internal", "orderId": str(uuid4())}
        )

        assert response.status_code == 404

    @pytest.mark.asyncio
    async def test_create_task_with_due_date(self, client, sample_customer, sample_technician):
        actor_id = str(uuid4())

        response = await client.post(
            f"{API}/tasks",
            json={
                "taskType": "purchase",
                "customerId": str(sample_customer.id),
                "technicianId": str(sample_technician.id),
                "dueDate": "2026-11-01T09:00:00+01:00",
            },
            headers={"X-Actor-ID": actor_id},
        )

        assert response.status_code == 201
        data = response.json()
        assert data["dueDate"] == "2026-11-01T08:00:00Z"
        assert data["updatedBy"] == actor_id

        stored = await client.get(f"{API}/tasks/{data['id']}")
        assert stored.json()["dueDate"] == "2026-11-01T08:00:00Z"

    @pytest.mark.asyncio
    async def test_update_task_due_date(self, client, sample_customer):
        created = await client.post(
            f"{API}/tasks",
            json={"taskType": "internal", "customerId": str(sample_customer.id)},
        )
        task_id = created.json()["id"]

        response = await client.patch(
            f"{API}/tasks/{task_id}", json={"dueDate": "2026-12-15T12:00:00Z"}
        )

        assert response.status_code == 200
        data = response.json()
        assert data["task"]["dueDate"] == "2026-12-15T12:00:00Z"
        assert data["orderOutcome"] is None
