"""Warehouse-specific failures.

Each error extends the Protean exception it specialises, so generic Protean
handling (HTTP mapping, sweeper isolation) keeps working for callers that
only know the base classes.
"""

from protean.exceptions import (
    ExpectedVersionError,
    InvalidOperationError,
    ObjectNotFoundError,
    ValidationError,
)


class NotConfigured(ObjectNotFoundError):
    """No inventory record exists for the requested product/variant."""

    def __init__(self, product_id, variant_id=None):
        self.product_id = product_id
        self.variant_id = variant_id
        target = f"product {product_id}" + (f" variant {variant_id}" if variant_id else "")
        super().__init__(f"Inventory not configured for {target}")


class InvalidStateTransition(InvalidOperationError):
    """A reservation was asked to leave a state it cannot leave."""

    def __init__(self, reservation_id, current_status, target_status):
        self.reservation_id = reservation_id
        self.current_status = current_status
        self.target_status = target_status
        super().__init__(
            f"Reservation {reservation_id} is {current_status} and cannot be {target_status}"
        )


class NegativeQuantityGuard(ValidationError):
    """A mutation would drive a stock counter below zero."""

    def __init__(self, field, current, change):
        self.field = field
        self.current = current
        self.change = change
        super().__init__(
            {field: [f"Change of {change} would take {field} below zero (current: {current})"]}
        )


class ConcurrencyConflict(ExpectedVersionError):
    """A command kept losing the optimistic-lock race and gave up."""

    def __init__(self, command_name, attempts):
        self.command_name = command_name
        self.attempts = attempts
        super().__init__(f"{command_name} gave up after {attempts} conflicting attempts")
