import pytest
from ordering.catalog import reset_catalog, set_catalog
from ordering.catalog.fake_adapter import InMemoryCatalog
from ordering.notifier import reset_notifier, set_notifier
from ordering.notifier.fake_adapter import FakeNotifier
from ordering.order.order import Order
from protean import current_domain
from protean.core.repository import BaseRepository
from protean.core.unit_of_work import UnitOfWork
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
    with ordering_bed.domain_context():
        yield

        # Clear all databases
        for _, provider in current_domain.providers.items():
            provider._data_reset()

        # Drain event stores
        current_domain.event_store.store._data_reset()

    reset_notifier()
    reset_catalog()


@pytest.fixture()
def catalog():
    """An empty in-memory catalog installed as both cart and product reader."""
    catalog = InMemoryCatalog()
    set_catalog(catalog)
    return catalog


@pytest.fixture()
def notifier():
    """A recording notifier installed as the active order notifier."""
    notifier = FakeNotifier()
    set_notifier(notifier)
    return notifier


@pytest.fixture()
def fail_order_commits(monkeypatch):
    """Returns a switch that makes the next unit of work storing an Order fail on commit."""

    def arm():
        stored = []
        original_add = BaseRepository.add
        original_commit = UnitOfWork.commit

        def add(repo, item, *args, **kwargs):
            if isinstance(item, Order):
                stored.append(item)
            return original_add(repo, item, *args, **kwargs)

        def commit(uow):
            if stored:
                stored.clear()
                raise RuntimeError("Database unavailable")
            return original_commit(uow)

        monkeypatch.setattr(BaseRepository, "add", add)
        monkeypatch.setattr(UnitOfWork, "commit", commit)

    return arm
