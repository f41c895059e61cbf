"""Warehouse bounded context — Stock Ledger, Reservations and Grosir Bundles.

Tracks physical and reserved stock per product variant, holds stock for
orders through time-limited reservations, receives purchase orders, and
guards wholesale (grosir) bundle restocks against per-size overflow.
All aggregates are CQRS (not event sourced); the aggregate version doubles
as the optimistic lock for concurrent reservations.
"""

from protean.domain import Domain

from warehouse.utils.logging import configure_logging, get_logger

# Configure logging for the application
configure_logging()

logger = get_logger(__name__)

# Domain Composition Root
warehouse = Domain(name="warehouse")
