import pytest
from protean.integrations.pytest import DomainFixture


@pytest.fixture(scope="session")
def ordering_bed():
    from ordering.domain import ordering

    bed = DomainFixture(ordering)
    bed.setup()
    yield bed
    bed.teardown()


@pytest.fixture(autouse=True)
def _ctx(ordering_bed):
    from protean import current_domain

    with ordering_bed.domain_context():
        yield

        for _, provider in current_domain.providers.items():
            provider._data_reset()
        current_domain.event_store.store._data_reset()


@pytest.fixture()
def catalog():
    """The process-wide in-memory catalog, emptied after each test."""
    from ordering.catalog import get_catalog, reset_catalog

    reset_catalog()
    yield get_catalog()
    reset_catalog()


@pytest.fixture()
def shipping_address():
    return {
        "street": "Av. Insurgentes Sur 1602",
        "city": "Ciudad de México",
        "region": "CDMX",
        "postal_code": "03940",
        "contact_phone": "5512345678",
    }
