import os
import tempfile
from pathlib import Path

import pytest
from protean.integrations.pytest import DomainFixture


def pytest_addoption(parser):
    parser.addoption(
        "--env",
        action="store",
        default="test",
        help="Config environment to run tests on",
    )


def pytest_sessionstart(session):
    """Pytest hook to run before collecting tests.

    Logging is configured when the domain module is first imported, so the
    environment and log directory have to be in place before collection.
    """
    os.environ["PROTEAN_ENV"] = session.config.option.env
    os.environ.setdefault("PIZZERIA_LOG_DIR", tempfile.mkdtemp(prefix="pizzeria-logs-"))


def pytest_collection_modifyitems(config, items):
    """Automatically mark tests based on their directory location."""
    for item in items:
        test_path = str(Path(item.fspath))

        if "/domain/" in test_path:
            item.add_marker(pytest.mark.domain)
        elif "/bdd/" in test_path:
            item.add_marker(pytest.mark.bdd)
        else:
            item.add_marker(pytest.mark.application)


@pytest.fixture(scope="session")
def pizzeria_bed():
    from pizzeria.domain import pizzeria

    bed = DomainFixture(pizzeria)
    bed.setup()
    yield bed
    bed.teardown()


@pytest.fixture(autouse=True)
def _ctx(pizzeria_bed):
    with pizzeria_bed.domain_context():
        yield


@pytest.fixture()
def domain(pizzeria_bed):
    from pizzeria.domain import pizzeria

    return pizzeria


# ---------------------------------------------------------------------------
# Session stores, fresh for every test
# ---------------------------------------------------------------------------
@pytest.fixture()
def catalog():
    from pizzeria.catalogue.registry import CatalogRegistry
    from pizzeria.catalogue.seed import seed_catalog

    registry = CatalogRegistry()
    seed_catalog(registry)
    return registry


@pytest.fixture()
def accounts():
    from pizzeria.identity.registry import AccountRegistry

    return AccountRegistry()


@pytest.fixture()
def orders():
    from pizzeria.ordering.store import OrderStore

    return OrderStore()


@pytest.fixture()
def notifications():
    from pizzeria.notifications.log import NotificationLog

    return NotificationLog()


@pytest.fixture()
def ticker(domain, orders, notifications):
    """A ticker that is never started; tests drive it with ``tick()``."""
    from pizzeria.ordering.ticker import LifecycleTicker

    return LifecycleTicker(domain, orders, notifications, interval=3600)


@pytest.fixture()
def session(catalog, accounts, orders, notifications, ticker):
    from pizzeria.catalogue.seed import seed_promotions
    from pizzeria.payments.promotion import PromotionBook
    from pizzeria.session import SessionCoordinator
    from pizzeria.utils.settings import Settings

    return SessionCoordinator(
        catalog=catalog,
        accounts=accounts,
        orders=orders,
        notifications=notifications,
        promotions=PromotionBook(seed_promotions()),
        ticker=ticker,
        settings=Settings(tick_interval=3600),
    )


@pytest.fixture()
def margherita(catalog):
    return catalog.get(1)


@pytest.fixture()
def pepperoni(catalog):
    return catalog.get(2)
