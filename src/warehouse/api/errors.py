"""HTTP mapping for warehouse domain errors.

Registered after Protean's ``register_exception_handlers``. Starlette picks
the handler of the most specific exception class, so these win for
warehouse errors while generic Protean errors keep Protean's mapping.
"""

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from protean.exceptions import ExpectedVersionError

from warehouse.errors import ConcurrencyConflict, InvalidStateTransition, NegativeQuantityGuard, NotConfigured


async def _not_configured(request: Request, exc: NotConfigured) -> JSONResponse:
    return JSONResponse(status_code=404, content={"error": str(exc), "code": "not_configured"})


async def _invalid_state_transition(request: Request, exc: InvalidStateTransition) -> JSONResponse:
    return JSONResponse(
        status_code=409,
        content={
            "error": str(exc),
            "code": "invalid_state_transition",
            "current_status": exc.current_status,
        },
    )


async def _negative_quantity(request: Request, exc: NegativeQuantityGuard) -> JSONResponse:
    return JSONResponse(status_code=400, content={"error": exc.messages, "code": "negative_quantity"})


async def _conflict(request: Request, exc: ExpectedVersionError) -> JSONResponse:
    return JSONResponse(status_code=409, content={"error": str(exc), "code": "concurrency_conflict"})


def register_warehouse_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(NotConfigured, _not_configured)
    app.add_exception_handler(InvalidStateTransition, _invalid_state_transition)
    app.add_exception_handler(NegativeQuantityGuard, _negative_quantity)
    app.add_exception_handler(ConcurrencyConflict, _conflict)
    app.add_exception_handler(ExpectedVersionError, _conflict)
