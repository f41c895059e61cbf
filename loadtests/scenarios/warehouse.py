"""Warehouse load test scenarios.

Stateful SequentialTaskSet journeys covering the reservation lifecycle
and the grosir purchasing flow (bundle setup, purchase order, receipt,
overflow checks).
"""

import random

from locust import HttpUser, SequentialTaskSet, between, task

from loadtests.data_generators import (
    SIZES,
    bundle_data,
    inventory_data,
    purchase_order_data,
    reservation_data,
    unique_product_id,
)
from loadtests.helpers.response import extract_error_detail
from loadtests.helpers.state import InventoryState, PurchaseOrderState


class ReservationLifecycleJourney(SequentialTaskSet):
    """Provision -> Reserve x3 -> Confirm one -> Release one -> Status."""

    def on_start(self):
        self.state = InventoryState(product_id=unique_product_id())

    @task
    def provision(self):
        with self.client.post(
            "/inventory",
            json=inventory_data(self.state.product_id, quantity=50),
            catch_response=True,
            name="POST /inventory",
        ) as resp:
            if resp.status_code == 201:
                self.state.inventory_id = resp.json()["inventory_id"]
            else:
                resp.failure(f"Provision failed: {resp.status_code} — {extract_error_detail(resp)}")
                self.interrupt()

    @task
    def reserve(self):
        for _ in range(3):
            with self.client.post(
                "/reservations",
                json=reservation_data(self.state.product_id),
                catch_response=True,
                name="POST /reservations",
            ) as resp:
                if resp.status_code == 200 and resp.json().get("reserved"):
                    self.state.reservation_ids.append(resp.json()["reservation_id"])
                else:
                    resp.failure(f"Reserve failed: {resp.status_code} — {extract_error_detail(resp)}")

    @task
    def confirm_one(self):
        if not self.state.reservation_ids:
            return
        reservation_id = self.state.reservation_ids.pop(0)
        with self.client.put(
            f"/reservations/{reservation_id}/confirm",
            catch_response=True,
            name="PUT /reservations/{id}/confirm",
        ) as resp:
            if resp.status_code != 200:
                resp.failure(f"Confirm failed: {resp.status_code} — {extract_error_detail(resp)}")

    @task
    def release_one(self):
        if not self.state.reservation_ids:
            return
        reservation_id = self.state.reservation_ids.pop(0)
        with self.client.put(
            f"/reservations/{reservation_id}/release",
            json={"reason": "order_cancelled"},
            catch_response=True,
            name="PUT /reservations/{id}/release",
        ) as resp:
            if resp.status_code != 200:
                resp.failure(f"Release failed: {resp.status_code} — {extract_error_detail(resp)}")

    @task
    def check_status(self):
        self.client.get(
            "/inventory/status",
            params={"product_id": self.state.product_id},
            name="GET /inventory/status",
        )

    @task
    def done(self):
        self.interrupt()


class GrosirPurchasingJourney(SequentialTaskSet):
    """Provision sizes -> Configure bundle + tolerances -> PO -> Receive -> Overflow checks."""

    def on_start(self):
        self.product_id = unique_product_id()
        self.po = PurchaseOrderState()

    @task
    def provision_sizes(self):
        for size in SIZES:
            resp = self.client.post(
                "/inventory",
                json=inventory_data(self.product_id, variant_id=size, quantity=0),
                name="POST /inventory",
            )
            if resp.status_code != 201:
                self.interrupt()

    @task
    def configure_bundle(self):
        with self.client.put(
            f"/bundles/{self.product_id}",
            json=bundle_data(),
            catch_response=True,
            name="PUT /bundles/{product_id}",
        ) as resp:
            if resp.status_code != 200:
                resp.failure(f"Bundle config failed: {resp.status_code} — {extract_error_detail(resp)}")
                self.interrupt()
        for size in SIZES:
            self.client.put(
                f"/bundles/{self.product_id}/tolerances",
                json={"variant_id": size, "size": size, "max_excess_units": random.choice([4, 8, 12])},
                name="PUT /bundles/{product_id}/tolerances",
            )

    @task
    def create_purchase_order(self):
        with self.client.post(
            "/purchase-orders",
            json=purchase_order_data(self.product_id),
            catch_response=True,
            name="POST /purchase-orders",
        ) as resp:
            if resp.status_code == 201:
                self.po.purchase_order_id = resp.json()["purchase_order_id"]
            else:
                resp.failure(f"Create PO failed: {resp.status_code} — {extract_error_detail(resp)}")
                self.interrupt()

        detail = self.client.get(
            f"/purchase-orders/{self.po.purchase_order_id}",
            name="GET /purchase-orders/{id}",
        ).json()
        for item in detail["items"]:
            self.po.item_ids.append(item["item_id"])
            self.po.item_units[item["item_id"]] = item["total_units"]

    @task
    def receive_in_two_deliveries(self):
        for fraction in (0.5, 0.5):
            items = [
                {
                    "item_id": item_id,
                    "received_units": max(1, int(units * fraction)),
                    "damaged_units": random.choice([0, 0, 1]),
                }
                for item_id, units in self.po.item_units.items()
            ]
            with self.client.put(
                f"/purchase-orders/{self.po.purchase_order_id}/receive",
                json={"items": items},
                catch_response=True,
                name="PUT /purchase-orders/{id}/receive",
            ) as resp:
                if resp.status_code == 200:
                    self.po.status = resp.json()["status"]
                else:
                    resp.failure(f"Receive failed: {resp.status_code} — {extract_error_detail(resp)}")

    @task
    def check_overflow(self):
        self.client.get(
            f"/bundles/{self.product_id}/overflow",
            params={"variant_id": random.choice(SIZES)},
            name="GET /bundles/{product_id}/overflow",
        )
        self.client.get(f"/bundles/{self.product_id}/variants", name="GET /bundles/{product_id}/variants")

    @task
    def done(self):
        self.interrupt()


class WarehouseUser(HttpUser):
    """Mixed warehouse traffic: mostly reservations, some purchasing."""

    wait_time = between(0.5, 2)
    tasks = {ReservationLifecycleJourney: 4, GrosirPurchasingJourney: 1}
