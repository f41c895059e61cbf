import pytest
from protean.integrations.pytest import DomainFixture


@pytest.fixture(scope="session")
def warehouse_bed():
    from warehouse.domain import warehouse

    bed = DomainFixture(warehouse)
    bed.setup()
    yield bed
    bed.teardown()


@pytest.fixture(autouse=True)
def _ctx(warehouse_bed):
    with warehouse_bed.domain_context():
        yield
