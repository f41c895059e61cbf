"""Shared BDD fixtures and step definitions for the Warehouse domain."""

import json

import pytest
from protean import current_domain
from protean.exceptions import ValidationError
from pytest_bdd import given, parsers, then
from warehouse.errors import InvalidStateTransition, NegativeQuantityGuard
from warehouse.grosir.configuration import ConfigureBundle
from warehouse.grosir.lookup import find_tolerance
from warehouse.grosir.tolerance import GrosirTolerance
from warehouse.ledger.lookup import find_inventory
from warehouse.ledger.provisioning import CreateInventory

PRODUCT_ID = "prod-kaos"

_ERROR_CLASSES = {
    "validation": ValidationError,
    "negative quantity": NegativeQuantityGuard,
    "state transition": InvalidStateTransition,
}


def variant_of(size):
    return f"var-{size.lower()}"


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------
@pytest.fixture()
def error():
    """Container for captured domain errors."""
    return {"exc": None}


@pytest.fixture()
def outcome():
    """Container for the last command result."""
    return {"result": None, "reservations": []}


# ---------------------------------------------------------------------------
# Given steps
# ---------------------------------------------------------------------------
@given(parsers.cfparse("size {size} has {quantity:d} units in stock"))
def size_in_stock(size, quantity):
    current_domain.process(
        CreateInventory(
            product_id=PRODUCT_ID,
            variant_id=variant_of(size),
            sku=f"KAOS-{size}",
            quantity=quantity,
            min_stock_level=2,
        ),
        asynchronous=False,
    )


@given(parsers.cfparse("the bundle holds {breakdown}"))
def bundle_holds(breakdown):
    # "S:4, M:4, L:4"
    sizes = {}
    for part in breakdown.split(","):
        size, units = part.strip().split(":")
        sizes[size] = int(units)
    current_domain.process(
        ConfigureBundle(
            product_id=PRODUCT_ID,
            total_units=sum(sizes.values()),
            size_breakdown=json.dumps(sizes),
            bundle_cost=30_000.0 * sum(sizes.values()),
        ),
        asynchronous=False,
    )


@given(parsers.cfparse("size {size} has {excess:d} excess units with a maximum of {maximum:d}"))
def size_has_excess(size, excess, maximum):
    current_domain.repository_for(GrosirTolerance).add(
        GrosirTolerance.configure(
            product_id=PRODUCT_ID,
            variant_id=variant_of(size),
            size=size,
            max_excess_units=maximum,
            current_excess=excess,
        )
    )


# ---------------------------------------------------------------------------
# Then steps
# ---------------------------------------------------------------------------
@then(parsers.cfparse("size {size} has {available:d} available and {reserved:d} reserved"))
def size_counters(size, available, reserved):
    record = find_inventory(PRODUCT_ID, variant_of(size))
    assert record.available_quantity == available
    assert record.reserved_quantity == reserved
    assert record.available_quantity + record.reserved_quantity == record.quantity


@then(parsers.cfparse("size {size} has {quantity:d} units on hand"))
def size_on_hand(size, quantity):
    assert find_inventory(PRODUCT_ID, variant_of(size)).quantity == quantity


@then(parsers.cfparse("size {size} is locked"))
def size_is_locked(size):
    assert find_tolerance(PRODUCT_ID, variant_of(size)).is_locked is True


@then(parsers.cfparse("size {size} is not locked"))
def size_is_not_locked(size):
    assert find_tolerance(PRODUCT_ID, variant_of(size)).is_locked is False


@then(parsers.cfparse("the action fails with a {kind} error"))
def action_fails(error, kind):
    assert error["exc"] is not None, f"Expected a {kind} error but none was raised"
    assert isinstance(error["exc"], _ERROR_CLASSES[kind])
