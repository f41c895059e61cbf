"""Repository lookups for bundle configs and tolerances."""

from protean.utils.globals import current_domain

from warehouse.grosir.bundle import BundleConfig
from warehouse.grosir.tolerance import GrosirTolerance


def _optional(value):
    return str(value) if value else None


def find_bundle_config(product_id, supplier_id=None):
    """Bundle config for a product; without a supplier, the most recently updated one."""
    configs = current_domain.repository_for(BundleConfig)._dao.query.filter(product_id=str(product_id)).all().items
    if supplier_id is not None:
        return next((c for c in configs if _optional(c.supplier_id) == str(supplier_id)), None)
    if not configs:
        return None
    return max(configs, key=lambda c: c.updated_at or c.created_at)


def find_tolerances(product_id):
    return list(
        current_domain.repository_for(GrosirTolerance)._dao.query.filter(product_id=str(product_id)).all().items
    )


def find_tolerance(product_id, variant_id=None):
    """Tolerance of one product variant, or None when the variant is not tracked."""
    return next(
        (t for t in find_tolerances(product_id) if _optional(t.variant_id) == _optional(variant_id)),
        None,
    )
