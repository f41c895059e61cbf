"""Warehouse Load Testing — Locust entry point.

Discovers all user classes from the scenarios package.

Usage:
    # All scenarios (web UI):
    locust -f loadtests/locustfile.py --host http://localhost:8000

    # Oversell check: many users fighting over a small stock pool
    locust -f loadtests/locustfile.py ReservationContentionUser

    # Headless (CI mode):
    locust -f loadtests/locustfile.py WarehouseUser --headless \
           -u 50 -r 5 -t 300s --csv=results/loadtest
"""

import logging
import time

import requests
from locust import events

# Import all user classes so Locust discovers them
from loadtests.helpers.response import extract_error_detail
from loadtests.scenarios.contention import ReservationContentionUser  # noqa: F401
from loadtests.scenarios.warehouse import WarehouseUser  # noqa: F401

logger = logging.getLogger("loadtest")


@events.request.add_listener
def on_request(request_type, name, response, exception, **_kw):
    """Log error details for every failed request."""
    if exception:
        logger.error("[EXCEPTION] %s %s: %s", request_type, name, exception)
    elif response is not None and response.status_code >= 400:
        detail = extract_error_detail(response)
        logger.error("[%s] %s %s: %s", response.status_code, request_type, name, detail)


@events.test_start.add_listener
def on_test_start(environment, **_kwargs):
    print(f"\n[LOADTEST] Started at {time.strftime('%H:%M:%S')}")
    print(f"[LOADTEST] Target host: {environment.host}")
    print()


@events.test_stop.add_listener
def on_test_stop(environment, **_kwargs):
    """Print the contended stock counters so an oversell is visible at a glance."""
    from loadtests.scenarios.contention import CONTENDED_PRODUCT_ID

    print(f"\n[LOADTEST] Stopped at {time.strftime('%H:%M:%S')}")
    if not environment.host:
        return
    try:
        resp = requests.get(
            f"{environment.host}/inventory/status",
            params={"product_id": CONTENDED_PRODUCT_ID},
            timeout=5,
        )
        body = resp.json()
        print(
            "[LOADTEST] Contended stock: "
            f"quantity={body.get('quantity')} available={body.get('available_quantity')} "
            f"reserved={body.get('reserved_quantity')}"
        )
        if (body.get("available_quantity") or 0) < 0:
            print("[LOADTEST] OVERSELL DETECTED: available quantity went negative")
    except Exception as e:
        print(f"[LOADTEST] Could not fetch contended stock status: {e}")
