"""GrosirTolerance aggregate (CQRS) — permitted surplus stock of one size.

Ordering a whole bundle to refill one empty size also brings in units of
every sibling size. ``current_excess`` counts that surplus for a size and
``max_excess_units`` bounds it. The lock flag is never set by hand: it is
re-derived from the two counters after every change.
"""

from datetime import UTC, datetime

from protean import invariant
from protean.exceptions import ValidationError
from protean.fields import Boolean, DateTime, Identifier, Integer, String

from warehouse.domain import warehouse
from warehouse.grosir.events import ToleranceConfigured, VariantLocked, VariantUnlocked


@warehouse.aggregate
class GrosirTolerance:
    product_id = Identifier(required=True)
    variant_id = Identifier()
    size = String(max_length=20)
    max_excess_units = Integer(required=True, min_value=0)
    current_excess = Integer(default=0)
    is_locked = Boolean(default=False)
    locked_reason = String(max_length=500)
    locked_at = DateTime()
    updated_at = DateTime()

    @invariant.post
    def excess_cannot_be_negative(self):
        if (self.current_excess or 0) < 0:
            raise ValidationError({"current_excess": ["Excess stock cannot be negative"]})

    @classmethod
    def configure(cls, product_id, max_excess_units, variant_id=None, size=None, current_excess=0):
        if max_excess_units is None or max_excess_units < 0:
            raise ValidationError({"max_excess_units": ["Maximum excess cannot be negative"]})
        now = datetime.now(UTC)
        tolerance = cls(
            product_id=product_id,
            variant_id=variant_id,
            size=size,
            max_excess_units=max_excess_units,
            current_excess=current_excess or 0,
            updated_at=now,
        )
        tolerance._raise_configured(now)
        tolerance._recompute_lock(now, reason=tolerance._overflow_reason("configured"))
        return tolerance

    @property
    def label(self) -> str:
        return self.size or str(self.variant_id)

    def _overflow_reason(self, cause) -> str:
        return (
            f"Size {self.label} excess {self.current_excess} exceeds maximum "
            f"{self.max_excess_units} ({cause})"
        )

    def _identity(self):
        return {
            "tolerance_id": str(self.id),
            "product_id": str(self.product_id),
            "variant_id": str(self.variant_id) if self.variant_id else None,
            "size": self.size,
        }

    def _raise_configured(self, now):
        self.raise_(
            ToleranceConfigured(
                **self._identity(),
                max_excess_units=self.max_excess_units,
                current_excess=self.current_excess,
                configured_at=now,
            )
        )

    def _recompute_lock(self, now, reason):
        should_lock = self.current_excess > self.max_excess_units

        if should_lock and not self.is_locked:
            self.is_locked = True
            self.locked_reason = reason
            self.locked_at = now
            self.raise_(
                VariantLocked(
                    **self._identity(),
                    current_excess=self.current_excess,
                    max_excess_units=self.max_excess_units,
                    reason=reason,
                    locked_at=now,
                )
            )
        elif not should_lock and self.is_locked:
            self.is_locked = False
            self.locked_reason = None
            self.locked_at = None
            self.raise_(
                VariantUnlocked(
                    **self._identity(),
                    current_excess=self.current_excess,
                    max_excess_units=self.max_excess_units,
                    unlocked_at=now,
                )
            )

    # -------------------------------------------------------------------
    # Mutations
    # -------------------------------------------------------------------
    def absorb(self, units, reference=None):
        """Count units received from a bundle as excess for this size."""
        if units is None or units < 0:
            raise ValidationError({"units": ["Received units cannot be negative"]})
        now = datetime.now(UTC)
        self.current_excess += units
        self.updated_at = now
        self._recompute_lock(now, reason=self._overflow_reason(f"received {units} from {reference or 'restock'}"))

    def consume(self, units):
        """Sold units reduce the excess, never below zero."""
        if units is None or units < 0:
            raise ValidationError({"units": ["Sold units cannot be negative"]})
        now = datetime.now(UTC)
        self.current_excess = max(0, self.current_excess - units)
        self.updated_at = now
        self._recompute_lock(now, reason=self._overflow_reason(f"sold {units}"))

    def change_maximum(self, max_excess_units):
        if max_excess_units is None or max_excess_units < 0:
            raise ValidationError({"max_excess_units": ["Maximum excess cannot be negative"]})
        now = datetime.now(UTC)
        self.max_excess_units = max_excess_units
        self.updated_at = now
        self._raise_configured(now)
        self._recompute_lock(now, reason=self._overflow_reason("maximum lowered"))
