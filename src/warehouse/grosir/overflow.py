"""Grosir overflow checks — can an empty size be refilled without overflowing its siblings?

A size is refilled by ordering a whole bundle, which adds
``units_in_bundle`` to the excess of every size in it. The bundle is
blocked when any size would end up strictly above its maximum; landing
exactly on the maximum is allowed.

These are read-only queries; nothing here mutates state.
"""

from warehouse.grosir.lookup import find_bundle_config, find_tolerances
from warehouse.ledger.lookup import find_inventory


def project_bundle(size_breakdown: dict, tolerances_by_size: dict) -> list[dict]:
    """Excess of every tolerance-tracked size after one more bundle arrives.

    Sizes without a tolerance row are not constrained and are left out.
    """
    projections = []
    for size, units_in_bundle in size_breakdown.items():
        tolerance = tolerances_by_size.get(size)
        if tolerance is None:
            continue
        current = tolerance.current_excess or 0
        after_bundle = current + units_in_bundle
        projections.append(
            {
                "size": size,
                "current_excess": current,
                "units_in_bundle": units_in_bundle,
                "after_bundle": after_bundle,
                "max_excess_units": tolerance.max_excess_units,
                "overflows": after_bundle > tolerance.max_excess_units,
            }
        )
    return projections


def describe_overflow(projection: dict) -> str:
    return (
        f"{projection['size']} ({projection['current_excess']} + {projection['units_in_bundle']} "
        f"= {projection['after_bundle']} > {projection['max_excess_units']})"
    )


def _by_size(tolerances) -> dict:
    return {t.size: t for t in tolerances if t.size}


def check_bundle_overflow(product_id, variant_id=None) -> dict:
    bundle = find_bundle_config(product_id)
    if bundle is None:
        return {
            "is_locked": False,
            "can_order": True,
            "reason": "Product not configured for bundle checking",
        }

    inventory = find_inventory(product_id, variant_id)
    if inventory is not None and inventory.available_quantity > 0:
        return {
            "is_locked": False,
            "can_order": True,
            "reason": "Stock available - no bundle order needed",
            "available_quantity": inventory.available_quantity,
        }

    projections = project_bundle(bundle.sizes, _by_size(find_tolerances(product_id)))
    overflows = [describe_overflow(p) for p in projections if p["overflows"]]
    if overflows:
        return {
            "is_locked": True,
            "can_order": False,
            "reason": f"Ordering a bundle would exceed max stock for: {', '.join(overflows)}",
            "overflow_variants": overflows,
        }

    return {
        "is_locked": False,
        "can_order": True,
        "reason": "Bundle can be ordered without overflow",
    }


def check_all_variants_overflow(product_id) -> dict:
    bundle = find_bundle_config(product_id)
    if bundle is None:
        return {
            "product_id": str(product_id),
            "variants": [],
            "message": "Product not configured for bundle checking",
        }

    tolerances = _by_size(find_tolerances(product_id))
    overflowing_sizes = [p["size"] for p in project_bundle(bundle.sizes, tolerances) if p["overflows"]]

    variants = []
    for size in bundle.sizes:
        tolerance = tolerances.get(size)

        if tolerance is None:
            variants.append(_variant_view(size, None, False, "No tolerance configured"))
            continue

        variant_id = str(tolerance.variant_id) if tolerance.variant_id else None

        if tolerance.is_locked:
            variants.append(_variant_view(size, variant_id, True, tolerance.locked_reason or "Variant is locked"))
            continue

        inventory = find_inventory(product_id, tolerance.variant_id)
        available = inventory.available_quantity if inventory is not None else 0
        if available > 0:
            variants.append(
                _variant_view(size, variant_id, False, f"Stock available ({available} units)", available=available)
            )
            continue

        if overflowing_sizes:
            view = _variant_view(size, variant_id, True, f"Would overflow: {', '.join(overflowing_sizes)}")
            view["overflow_variants"] = list(overflowing_sizes)
        else:
            view = _variant_view(size, variant_id, False, "Can order (bundle has room)")
        variants.append(view)

    return {
        "product_id": str(product_id),
        "bundle_name": bundle.bundle_name,
        "total_units_per_bundle": bundle.total_units,
        "variants": variants,
    }


def _variant_view(size, variant_id, is_locked, reason, available=0):
    return {
        "size": size,
        "variant_id": variant_id,
        "is_locked": is_locked,
        "can_order": not is_locked,
        "reason": reason,
        "available_quantity": available,
    }
