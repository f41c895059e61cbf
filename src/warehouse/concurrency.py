"""Optimistic-lock retry for commands that mutate contended aggregates.

Handlers read the aggregate, mutate it and save it inside a unit of work.
When another writer saved the same aggregate first, the repository raises
``ExpectedVersionError`` and nothing from the attempt is persisted, so the
whole command can simply be processed again from a fresh read.
"""

import structlog
from protean.exceptions import ExpectedVersionError
from protean.utils.globals import current_domain

from warehouse.config import max_conflict_retries
from warehouse.errors import ConcurrencyConflict

logger = structlog.get_logger(__name__)


def process_with_retry(command, max_attempts=None):
    """Process ``command`` synchronously, re-running it on version conflicts.

    Raises ConcurrencyConflict once ``max_attempts`` (default from config)
    attempts have all lost the race.
    """
    attempts = max_attempts or max_conflict_retries()
    command_name = command.__class__.__name__

    for attempt in range(1, attempts + 1):
        try:
            return current_domain.process(command, asynchronous=False)
        except ExpectedVersionError as exc:
            if isinstance(exc, ConcurrencyConflict):
                raise
            logger.warning(
                "Version conflict, retrying command",
                command=command_name,
                attempt=attempt,
                max_attempts=attempts,
                error=str(exc),
            )

    logger.error("Command abandoned after repeated version conflicts", command=command_name, attempts=attempts)
    raise ConcurrencyConflict(command_name, attempts)
