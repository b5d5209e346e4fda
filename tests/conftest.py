"""Shared pytest fixtures for hisab tests."""

import tempfile
import os
from datetime import date
from decimal import Decimal
import pytest

from hisab.database.factories import create_sqlite_database
from hisab.domain.balance import BalancePropagator
from hisab.domain.entities import PartyRole
from hisab.domain.facade import LedgerFacade
from hisab.domain.party import PartyService
from hisab.domain.sync import LedgerSyncEngine


@pytest.fixture
def temp_db():
    """Create a temporary database for testing."""
    # Create a temporary file for the database
    fd, db_path = tempfile.mkstemp(suffix=".db")
    os.close(fd)

    # Create database
    db = create_sqlite_database(database_path=db_path)
    # Store the path for tests that need it
    db.database_path = db_path
    db.connect()
    db.initialize_schema()

    yield db

    # Cleanup
    db.disconnect()
    if os.path.exists(db_path):
        os.unlink(db_path)


@pytest.fixture
def party_service(temp_db):
    """Create a PartyService with a temporary database."""
    return PartyService(temp_db)


@pytest.fixture
def sync_engine(temp_db):
    """Create a LedgerSyncEngine with a temporary database."""
    return LedgerSyncEngine(temp_db)


@pytest.fixture
def propagator(temp_db):
    """Create a BalancePropagator with a temporary database."""
    return BalancePropagator(temp_db)


@pytest.fixture
def facade(temp_db):
    """Create a LedgerFacade with a temporary database."""
    ledger = LedgerFacade(temp_db)
    yield ledger
    ledger.close()


@pytest.fixture
def sample_party(party_service):
    """Create a sample customer for testing."""
    party_id = party_service.create_party(name="Aijaz", role=PartyRole.CUSTOMER)
    return party_service.get_party(party_id)


@pytest.fixture
def sample_supplier(party_service):
    """Create a sample supplier for testing."""
    party_id = party_service.create_party(name="Dairy Supplier", role=PartyRole.SELLER)
    return party_service.get_party(party_id)


@pytest.fixture
def day():
    """A fixed business day used across balance tests."""
    return date(2024, 3, 10)


@pytest.fixture
def opened_day(facade, day):
    """Seed ``day`` with an opening of 1000 cash and 5000 bank."""
    facade.set_opening(day, Decimal("1000"), Decimal("5000"))
    return day


@pytest.fixture
def cli_runner():
    """Create a Click CLI test runner."""
    from click.testing import CliRunner

    return CliRunner()
