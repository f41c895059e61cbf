"""BundleConfig aggregate (CQRS) — the fixed size mix of a factory (grosir) bundle.

A bundle can only be ordered whole: restocking one size means receiving
every size in ``size_breakdown`` at the same time.
"""

import json
from datetime import UTC, datetime

from protean import atomic_change, invariant
from protean.exceptions import ValidationError
from protean.fields import DateTime, Float, Identifier, Integer, String, Text

from warehouse.domain import warehouse
from warehouse.grosir.events import BundleConfigured


def _validate_breakdown(size_breakdown, total_units):
    if not isinstance(size_breakdown, dict) or not size_breakdown:
        raise ValidationError({"size_breakdown": ["Bundle must contain at least one size"]})
    for size, units in size_breakdown.items():
        if not isinstance(units, int) or isinstance(units, bool) or units <= 0:
            raise ValidationError({"size_breakdown": [f"Units for size {size} must be a positive integer"]})
    if sum(size_breakdown.values()) != total_units:
        raise ValidationError(
            {"size_breakdown": [f"Sizes add up to {sum(size_breakdown.values())}, bundle holds {total_units}"]}
        )


@warehouse.aggregate
class BundleConfig:
    product_id = Identifier(required=True)
    supplier_id = Identifier()
    bundle_name = String(max_length=255)
    total_units = Integer(required=True, min_value=1)
    size_breakdown = Text(required=True)  # JSON object: size -> units per bundle
    bundle_cost = Float(default=0.0)
    cost_per_unit = Float(default=0.0)
    min_bundle_order = Integer(default=1, min_value=1)
    created_at = DateTime()
    updated_at = DateTime()

    @invariant.post
    def breakdown_must_match_total_units(self):
        _validate_breakdown(self.sizes, self.total_units)

    @property
    def sizes(self) -> dict:
        """Size breakdown as a dict, in configured order."""
        return json.loads(self.size_breakdown) if self.size_breakdown else {}

    @classmethod
    def configure(cls, product_id, total_units, size_breakdown, bundle_cost, supplier_id=None, bundle_name=None,
                  min_bundle_order=1):
        _validate_breakdown(size_breakdown, total_units)
        now = datetime.now(UTC)
        config = cls(
            product_id=product_id,
            supplier_id=supplier_id,
            bundle_name=bundle_name,
            total_units=total_units,
            size_breakdown=json.dumps(size_breakdown),
            bundle_cost=bundle_cost,
            cost_per_unit=bundle_cost / total_units,
            min_bundle_order=min_bundle_order or 1,
            created_at=now,
            updated_at=now,
        )
        config._raise_configured(now)
        return config

    def reconfigure(self, total_units, size_breakdown, bundle_cost, bundle_name=None, min_bundle_order=None):
        _validate_breakdown(size_breakdown, total_units)
        now = datetime.now(UTC)
        with atomic_change(self):
            self.size_breakdown = json.dumps(size_breakdown)
            self.total_units = total_units
            self.bundle_cost = bundle_cost
            self.cost_per_unit = bundle_cost / total_units
            if bundle_name is not None:
                self.bundle_name = bundle_name
            if min_bundle_order is not None:
                self.min_bundle_order = min_bundle_order
            self.updated_at = now
        self._raise_configured(now)

    def _raise_configured(self, now):
        self.raise_(
            BundleConfigured(
                bundle_config_id=str(self.id),
                product_id=str(self.product_id),
                supplier_id=str(self.supplier_id) if self.supplier_id else None,
                bundle_name=self.bundle_name,
                total_units=self.total_units,
                size_breakdown=self.size_breakdown,
                bundle_cost=self.bundle_cost,
                configured_at=now,
            )
        )
