"""Reservation contention scenario.

Every user hammers the same product with small reservations. The stock
pool is provisioned once; the run passes when no more units were reserved
than existed (checked in locustfile's test_stop hook) and conflicts show
up as retries or 409s rather than negative stock.
"""

import threading

import requests
from locust import HttpUser, between, events, task

from loadtests.data_generators import inventory_data, reservation_data
from loadtests.helpers.response import extract_error_detail, is_business_rejection
from loadtests.helpers.state import ContentionStats

CONTENDED_PRODUCT_ID = "prod-lt-contended"
CONTENDED_STOCK = 500

_provisioned = threading.Event()


@events.test_start.add_listener
def provision_contended_stock(environment, **_kwargs):
    if environment.host is None or _provisioned.is_set():
        return
    requests.post(
        f"{environment.host}/inventory",
        json=inventory_data(CONTENDED_PRODUCT_ID, quantity=CONTENDED_STOCK),
        timeout=10,
    )
    _provisioned.set()


class ReservationContentionUser(HttpUser):
    wait_time = between(0.05, 0.2)

    def on_start(self):
        self.stats = ContentionStats()

    @task
    def reserve_one(self):
        with self.client.post(
            "/reservations",
            json=reservation_data(CONTENDED_PRODUCT_ID, quantity=1),
            catch_response=True,
            name="POST /reservations [contended]",
        ) as resp:
            if resp.status_code == 200 and resp.json().get("reserved"):
                self.stats.reserved += 1
            elif is_business_rejection(resp):
                self.stats.rejected += 1
                resp.success()
            elif resp.status_code == 409:
                self.stats.conflicts += 1
                resp.success()
            else:
                resp.failure(f"Reserve failed: {resp.status_code} — {extract_error_detail(resp)}")
