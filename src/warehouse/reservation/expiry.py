"""Reservation expiry — command and handler for sweeping stale reservations.

Meant to be triggered periodically by an external scheduler (cron, K8s
CronJob) through the maintenance endpoint or ``manage.py
expire-reservations``. Each expired reservation is released in its own
unit of work, so one failure does not hold up the rest of the batch.
"""

from datetime import UTC, datetime

import structlog
from protean import handle
from protean.exceptions import (
    ExpectedVersionError,
    InvalidOperationError,
    ObjectNotFoundError,
    ValidationError,
)
from protean.fields import DateTime
from protean.utils.globals import current_domain

from warehouse.concurrency import process_with_retry
from warehouse.domain import warehouse
from warehouse.reservation.reservation import ReservationStatus, StockReservation

logger = structlog.get_logger(__name__)


def _naive_utc(value):
    """Datetimes come back naive from some providers; compare everything as naive UTC."""
    if value is None:
        return None
    if value.tzinfo is not None:
        value = value.astimezone(UTC).replace(tzinfo=None)
    return value


@warehouse.command(part_of="StockReservation")
class ExpireStaleReservations:
    """Expire every reservation still held past its expiry time."""

    as_of = DateTime()  # Optional: defaults to now


@warehouse.command_handler(part_of=StockReservation)
class ExpireStaleReservationsHandler:
    @handle(ExpireStaleReservations)
    def expire_stale_reservations(self, command):
        cutoff = _naive_utc(command.as_of or datetime.now(UTC))

        held = (
            current_domain.repository_for(StockReservation)
            ._dao.query.filter(status=ReservationStatus.RESERVED.value)
            .all()
            .items
        )
        expired = [r for r in held if r.expires_at and _naive_utc(r.expires_at) < cutoff]

        if not expired:
            logger.info("No stale reservations found", cutoff=cutoff.isoformat())
            return 0

        from warehouse.reservation.reserving import ExpireReservation

        expired_count = 0
        for reservation in expired:
            try:
                process_with_retry(ExpireReservation(reservation_id=str(reservation.id)))
                expired_count += 1
                logger.info(
                    "Expired stale reservation",
                    reservation_id=str(reservation.id),
                    order_id=str(reservation.order_id),
                    expires_at=str(reservation.expires_at),
                )
            except (ValidationError, InvalidOperationError, ObjectNotFoundError, ExpectedVersionError) as exc:
                logger.warning(
                    "Failed to expire stale reservation",
                    reservation_id=str(reservation.id),
                    error=str(exc),
                )

        logger.info("Stale reservation sweep complete", expired_count=expired_count, candidates=len(expired))
        return expired_count
