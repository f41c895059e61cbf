"""Bundle arithmetic for grosir purchasing.

Factories ship fixed-size bundles. A tolerance, expressed as a percentage
of the bundle size, makes demand near a bundle boundary round up to the
next bundle early: with ``bundle_size=100`` and ``tolerance_percent=10``,
90 units fit in one bundle but 95 need two.
"""

import math


def _require(value, name, positive=False):
    if isinstance(value, bool) or not isinstance(value, (int, float)) or not math.isfinite(value):
        raise ValueError(f"{name} must be a finite number")
    if positive and value <= 0:
        raise ValueError(f"{name} must be a positive number")
    if value < 0:
        raise ValueError(f"{name} must be a non-negative number")


def calculate_bundles_needed(requested_quantity, bundle_size, tolerance_percent) -> int:
    _require(requested_quantity, "requested_quantity")
    _require(bundle_size, "bundle_size", positive=True)
    _require(tolerance_percent, "tolerance_percent")

    if requested_quantity == 0:
        return 0
    # Exactly one bundle's worth never gets the tolerance added
    if requested_quantity == bundle_size:
        return 1

    tolerance_units = bundle_size * tolerance_percent / 100
    return math.ceil((requested_quantity + tolerance_units) / bundle_size)


def can_fulfill_demand(requested_quantity, bundle_size, available_bundles, tolerance_percent) -> bool:
    _require(available_bundles, "available_bundles")
    return available_bundles >= calculate_bundles_needed(requested_quantity, bundle_size, tolerance_percent)


def calculate_actual_quantity_received(bundles_ordered, bundle_size):
    _require(bundles_ordered, "bundles_ordered")
    _require(bundle_size, "bundle_size", positive=True)
    return bundles_ordered * bundle_size


def calculate_wastage(requested_quantity, allocated_bundles, bundle_size):
    """Units received beyond what was asked for."""
    _require(requested_quantity, "requested_quantity")
    _require(allocated_bundles, "allocated_bundles")
    _require(bundle_size, "bundle_size", positive=True)
    return allocated_bundles * bundle_size - requested_quantity
