"""BDD tests for grosir bundle overflow checks."""

from pytest_bdd import parsers, scenarios, then, when
from warehouse.grosir.overflow import check_bundle_overflow

PRODUCT_ID = "prod-kaos"

scenarios("features/grosir_overflow.feature")


@when(parsers.cfparse("the overflow check runs for size {size}"), target_fixture="check")
def run_check(size):
    return check_bundle_overflow(PRODUCT_ID, f"var-{size.lower()}")


@then(parsers.cfparse("size {size} cannot be ordered"))
def cannot_order(check, size):
    assert check["can_order"] is False
    assert check["is_locked"] is True


@then(parsers.cfparse("size {size} can be ordered"))
def can_order(check, size):
    assert check["can_order"] is True


@then(parsers.cfparse('the overflowing sizes are "{sizes}"'))
def overflowing_sizes(check, sizes):
    assert ", ".join(check["overflow_variants"]) == sizes
