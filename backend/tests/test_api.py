"""
Tests for the HTTP API: listing, seat map, waiting room, reserve and purchase.
"""

import uuid

import pytest
from httpx import AsyncClient

from ticketgate.services.admission_service import AdmissionController


async def admit(controller: AdmissionController, user_id, event_id) -> None:
    await controller.join_waiting_room(user_id, event_id)
    await controller.admit_batch(event_id, 1)


@pytest.mark.asyncio
async def test_login_creates_user(client: AsyncClient):
    first = await client.post("/api/auth/login")
    second = await client.post("/api/auth/login")

    assert first.status_code == 200
    data = first.json()
    uuid.UUID(data["user_id"])
    assert data["email"].endswith("@example.com")
    assert data["user_id"] != second.json()["user_id"]


@pytest.mark.asyncio
async def test_list_events(client: AsyncClient, test_event, inactive_event):
    """Only active events are listed, with their available seat counts."""
    response = await client.get("/api/events")
    assert response.status_code == 200
    data = response.json()
    assert data["total"] == 1
    assert data["cached"] is False
    event = data["events"][0]
    assert event["id"] == str(test_event.id)
    assert event["name"] == "Test Concert"
    assert event["total_seats"] == 20
    assert event["available_seats"] == 20


@pytest.mark.asyncio
async def test_seat_map(client: AsyncClient, test_event, seat_ids):
    response = await client.get(f"/api/events/{test_event.id}/seats")
    assert response.status_code == 200
    seats = response.json()
    assert len(seats) == 20
    assert {s["id"] for s in seats} == set(seat_ids)
    assert all(s["status"] == "Available" for s in seats)
    assert [(s["row_number"], s["seat_number"]) for s in seats[:2]] == [("1", "01"), ("1", "02")]


@pytest.mark.asyncio
async def test_seat_map_unknown_event(client: AsyncClient):
    response = await client.get(f"/api/events/{uuid.uuid4()}/seats")
    assert response.status_code == 200
    assert response.json() == []


@pytest.mark.asyncio
async def test_join_and_poll_queue(client: AsyncClient, test_event):
    user_id = str(uuid.uuid4())
    response = await client.post(
        f"/api/events/{test_event.id}/queue/join",
        json={"userId": user_id, "eventId": str(test_event.id)},
    )
    assert response.status_code == 200
    assert response.json()["message"] == "Joined waiting room"

    position = await client.get(f"/api/events/{test_event.id}/queue/position/{user_id}")
    assert position.status_code == 200
    assert position.json()["position"] == 0
    assert position.json()["queue_length"] == 1

    active = await client.get(f"/api/events/{test_event.id}/queue/active/{user_id}")
    assert active.json()["is_active"] is False


@pytest.mark.asyncio
async def test_join_with_mismatched_event(client: AsyncClient, test_event):
    response = await client.post(
        f"/api/events/{test_event.id}/queue/join",
        json={"user_id": str(uuid.uuid4()), "event_id": str(uuid.uuid4())},
    )
    assert response.status_code == 400
    assert response.json()["detail"] == "Invalid request"


@pytest.mark.asyncio
async def test_join_with_empty_user_id(client: AsyncClient, controller, test_event):
    response = await client.post(
        f"/api/events/{test_event.id}/queue/join",
        json={"user_id": str(uuid.UUID(int=0)), "event_id": str(test_event.id)},
    )
    assert response.status_code == 400
    assert response.json()["detail"] == "Invalid request"
    assert await controller.get_queue_length(test_event.id) == 0


@pytest.mark.asyncio
async def test_position_when_not_queued(client: AsyncClient, test_event):
    response = await client.get(f"/api/events/{test_event.id}/queue/position/{uuid.uuid4()}")
    assert response.status_code == 404
    assert response.json()["detail"] == "User not in queue"


@pytest.mark.asyncio
async def test_admitted_user_is_active(client: AsyncClient, controller, test_user, test_event):
    await admit(controller, test_user.id, test_event.id)

    active = await client.get(f"/api/events/{test_event.id}/queue/active/{test_user.id}")
    assert active.json()["is_active"] is True
    position = await client.get(f"/api/events/{test_event.id}/queue/position/{test_user.id}")
    assert position.status_code == 404


@pytest.mark.asyncio
async def test_reserve_requires_active_session(client: AsyncClient, test_user, test_event, seat_ids):
    response = await client.post(
        "/api/reservations/reserve",
        json={"user_id": str(test_user.id), "event_id": str(test_event.id), "seat_ids": seat_ids[:1]},
    )
    assert response.status_code == 403


@pytest.mark.asyncio
async def test_reserve_and_purchase_flow(client: AsyncClient, controller, test_user, test_event, seat_ids):
    """Admitted user reserves, purchases, and gives up the active session."""
    await admit(controller, test_user.id, test_event.id)

    reserve = await client.post(
        "/api/reservations/reserve",
        json={"userId": str(test_user.id), "eventId": str(test_event.id), "seatIds": seat_ids[:2]},
    )
    assert reserve.status_code == 200
    assert reserve.json()["seat_ids"] == sorted(seat_ids[:2])

    listing = await client.get("/api/events")
    assert listing.json()["events"][0]["available_seats"] == 18

    purchase = await client.post(
        "/api/reservations/purchase",
        json={"user_id": str(test_user.id), "seat_ids": seat_ids[:2], "event_id": str(test_event.id)},
    )
    assert purchase.status_code == 200
    assert purchase.json()["message"] == "Purchase successful"
    uuid.UUID(purchase.json()["order_id"])

    seats = (await client.get(f"/api/events/{test_event.id}/seats")).json()
    sold = {s["id"] for s in seats if s["status"] == "Sold"}
    assert sold == set(seat_ids[:2])
    assert not await controller.is_active(test_user.id, test_event.id)


@pytest.mark.asyncio
async def test_reserve_taken_seat(client: AsyncClient, controller, test_user, other_user, test_event, seat_ids):
    for user in (other_user, test_user):
        await admit(controller, user.id, test_event.id)

    first = await client.post(
        "/api/reservations/reserve",
        json={"user_id": str(other_user.id), "event_id": str(test_event.id), "seat_ids": seat_ids[:1]},
    )
    assert first.status_code == 200

    second = await client.post(
        "/api/reservations/reserve",
        json={"user_id": str(test_user.id), "event_id": str(test_event.id), "seat_ids": seat_ids[:2]},
    )
    assert second.status_code == 409


@pytest.mark.asyncio
async def test_reserve_invalid_seats(client: AsyncClient, controller, test_user, test_event):
    await admit(controller, test_user.id, test_event.id)

    response = await client.post(
        "/api/reservations/reserve",
        json={"user_id": str(test_user.id), "event_id": str(test_event.id), "seat_ids": [999_999]},
    )
    assert response.status_code == 400
    assert response.json()["detail"] == "Invalid seats selected"


@pytest.mark.asyncio
async def test_purchase_without_reservation(client: AsyncClient, test_user, seat_ids):
    response = await client.post(
        "/api/reservations/purchase",
        json={"user_id": str(test_user.id), "seat_ids": seat_ids[:1]},
    )
    assert response.status_code == 400
    assert response.json()["detail"] == "Invalid seats"


@pytest.mark.asyncio
async def test_request_validation(client: AsyncClient):
    response = await client.post("/api/reservations/reserve", json={"user_id": "not-a-uuid"})
    assert response.status_code == 422


@pytest.mark.asyncio
async def test_health(client: AsyncClient):
    response = await client.get("/health")
    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "healthy"
    assert data["inventory_store"] == "ok"
    assert data["queue_store"] == "ok"


@pytest.mark.asyncio
async def test_health_reports_queue_store_outage(client: AsyncClient, queue_store, monkeypatch):
    async def down():
        return False

    monkeypatch.setattr(queue_store, "ping", down)

    response = await client.get("/health")
    assert response.status_code == 503
    assert response.json()["queue_store"] == "unavailable"


@pytest.mark.asyncio
async def test_metrics(client: AsyncClient):
    response = await client.get("/metrics")
    assert response.status_code == 200
    assert "queue_joins_total" in response.text


@pytest.mark.asyncio
async def test_request_id_is_echoed(client: AsyncClient):
    response = await client.get("/", headers={"X-Request-ID": "abc123"})
    assert response.headers["X-Request-ID"] == "abc123"
