"""
Locust Load Test Suite

Needs an active event with seats already in the database.

Run scenarios:
  locust -f locustfile.py --tags onsale     # Full flow: queue -> active -> reserve -> purchase
  locust -f locustfile.py --tags browse     # Event listing cache and seat maps
  locust -f locustfile.py                   # All tests
"""

import random

import requests
from locust import HttpUser, task, between, tag, events

# Shared state
EVENT_IDS = []


@events.test_start.add_listener
def on_test_start(environment, **kwargs):
    """Setup: pick up the active events to hammer."""
    print("\n" + "=" * 60)
    print("SETUP: Loading active events...")
    print("=" * 60)
    if environment.host:
        resp = requests.get(f"{environment.host}/api/events", timeout=10)
        if resp.status_code == 200:
            EVENT_IDS.extend(e["id"] for e in resp.json()["events"])
    print(f"  {len(EVENT_IDS)} active events\n")


class OnSaleUser(HttpUser):
    """
    TEST 1: On-sale burst - every user joins the waiting room, waits for an
    active session, then fights for seats.

    Run: locust -f locustfile.py --tags onsale -u 2000 -r 200 --run-time 60s

    After test, verify no oversell:
      SELECT id, COUNT(*) FROM seats WHERE status <> 'Available' GROUP BY id HAVING COUNT(*) > 1;
    Should return nothing. Reserved + Sold never exceeds total seats.
    """
    wait_time = between(0.5, 1.5)

    def on_start(self):
        self.user_id = None
        self.event_id = None
        self.reserved = []
        self.purchased = False

        resp = self.client.post("/api/auth/login")
        if resp.status_code != 200 or not EVENT_IDS:
            return

        self.user_id = resp.json()["user_id"]
        self.event_id = random.choice(EVENT_IDS)
        self.client.post(
            f"/api/events/{self.event_id}/queue/join",
            json={"user_id": self.user_id, "event_id": self.event_id},
            name="/api/events/{id}/queue/join",
        )

    @tag("onsale")
    @task
    def advance(self):
        if not self.user_id or self.purchased:
            return

        if not self.reserved:
            self._wait_or_reserve()
        else:
            self._purchase()

    def _wait_or_reserve(self):
        resp = self.client.get(
            f"/api/events/{self.event_id}/queue/active/{self.user_id}",
            name="/api/events/{id}/queue/active/{user}",
        )
        if resp.status_code != 200 or not resp.json()["is_active"]:
            self.client.get(
                f"/api/events/{self.event_id}/queue/position/{self.user_id}",
                name="/api/events/{id}/queue/position/{user}",
            )
            return

        seats = self.client.get(
            f"/api/events/{self.event_id}/seats",
            name="/api/events/{id}/seats",
        ).json()
        available = [s["id"] for s in seats if s["status"] == "Available"]
        if not available:
            self.purchased = True  # sold out, nothing left to do
            return

        choice = random.sample(available, min(2, len(available)))
        with self.client.post(
            "/api/reservations/reserve",
            json={"user_id": self.user_id, "event_id": self.event_id, "seat_ids": choice},
            catch_response=True,
        ) as resp:
            if resp.status_code == 200:
                self.reserved = choice
                resp.success()
            elif resp.status_code == 409:
                resp.success()  # Expected: lost the race, try other seats
            else:
                resp.failure(f"Unexpected: {resp.status_code}")

    def _purchase(self):
        with self.client.post(
            "/api/reservations/purchase",
            json={"user_id": self.user_id, "seat_ids": self.reserved, "event_id": self.event_id},
            catch_response=True,
        ) as resp:
            if resp.status_code == 200:
                self.purchased = True
                resp.success()
            else:
                resp.failure(f"Unexpected: {resp.status_code}")


class BrowseUser(HttpUser):
    """
    TEST 2: Read load - listing cache effectiveness

    Run twice:
      1. With Redis: locust -f locustfile.py --tags browse -u 200 -r 50 --run-time 60s
      2. With REDIS_ENABLED=false, run again

    Compare avg/P95/P99 latency and requests/sec.
    """
    wait_time = between(0.1, 0.5)

    @tag("browse")
    @task(10)
    def list_events(self):
        self.client.get("/api/events", name="/api/events [cached]")

    @tag("browse")
    @task(3)
    def seat_map(self):
        if EVENT_IDS:
            self.client.get(f"/api/events/{random.choice(EVENT_IDS)}/seats", name="/api/events/{id}/seats")

    @tag("browse")
    @task(1)
    def health_check(self):
        self.client.get("/health")
