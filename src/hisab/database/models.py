"""SQLAlchemy models for the hisab database.

Table and column names are the on-disk contract that backups restore into;
the mirror columns keep their historical camelCase names. Every table uses
AUTOINCREMENT so ids of deleted rows are never handed out again.
"""

from datetime import datetime, UTC
from sqlalchemy import (
    Column,
    Integer,
    String,
    ForeignKey,
    DateTime,
    Date,
    Numeric,
    Boolean,
    Enum,
    Index,
    create_engine,
    event,
)
from sqlalchemy.engine import Engine
from sqlalchemy.orm import declarative_base, relationship, sessionmaker, Session

from hisab.domain.entities import (
    PartyRole,
    LedgerEntryKind,
    PaymentChannel,
    CashMode,
    SourceKind,
)

Base = declarative_base()

Money = Numeric(12, 2)


def _enum(enum_cls: type, name: str) -> Enum:
    # Non-native enums are stored as VARCHAR and validated on the way in.
    return Enum(enum_cls, name=name, native_enum=False, validate_strings=True, length=16)


class Party(Base):
    """Customer / supplier model."""

    __tablename__ = "parties"

    id = Column(Integer, primary_key=True)
    name = Column(String, nullable=False)
    role = Column(_enum(PartyRole, "party_role"), nullable=False, default=PartyRole.CUSTOMER)
    opening_balance = Column(Money, nullable=False, default=0)
    phone = Column(String, nullable=True)
    notes = Column(String, nullable=True)
    created_at = Column(DateTime, default=lambda: datetime.now(UTC), nullable=False)

    __table_args__ = ({"sqlite_autoincrement": True},)

    # Relationships
    ledger_entries = relationship(
        "PartyLedgerEntry", back_populates="party", cascade="all, delete-orphan"
    )


class PartyLedgerEntry(Base):
    """Accrual against a party."""

    __tablename__ = "party_ledger_entries"

    id = Column(Integer, primary_key=True)
    party_id = Column(Integer, ForeignKey("parties.id", ondelete="CASCADE"), nullable=False, index=True)
    kind = Column(_enum(LedgerEntryKind, "ledger_entry_kind"), nullable=False)
    amount = Column(Money, nullable=False)
    date = Column(Date, nullable=False, index=True)
    note = Column(String, nullable=True)
    channel = Column(_enum(PaymentChannel, "payment_channel"), nullable=False, default=PaymentChannel.CASH)
    voice_note_path = Column(String, nullable=True)
    created_at = Column(DateTime, default=lambda: datetime.now(UTC), nullable=False)

    __table_args__ = ({"sqlite_autoincrement": True},)

    # Relationships
    party = relationship("Party", back_populates="ledger_entries")


class CashBookEntry(Base):
    """Daily cash/bank register line.

    ``linked_ledger_entry_id`` is a lookup-only reference, not a foreign key:
    cash-book history outlives the party ledger.
    """

    __tablename__ = "cash_book_entries"

    id = Column(Integer, primary_key=True)
    date = Column(Date, nullable=False)
    mode = Column(_enum(CashMode, "cash_mode"), nullable=False)
    amount = Column(Money, nullable=False)
    party_label = Column(String, nullable=True)
    note = Column(String, nullable=True)
    source_kind = Column("sourceType", _enum(SourceKind, "source_kind"), nullable=False, default=SourceKind.MANUAL)
    source_id = Column("sourceId", Integer, nullable=True)
    linked_ledger_entry_id = Column("linkedLedgerEntryId", Integer, nullable=True, index=True)
    created_at = Column(DateTime, default=lambda: datetime.now(UTC), nullable=False)

    __table_args__ = (
        Index("ix_cash_book_entries_date_created", "date", "created_at"),
        Index("ix_cash_book_entries_source", "sourceType", "sourceId"),
        {"sqlite_autoincrement": True},
    )


class DailyBalance(Base):
    """Per-day opening/closing snapshot."""

    __tablename__ = "daily_balances"

    id = Column(Integer, primary_key=True)
    date = Column(Date, nullable=False, unique=True)
    opening_cash = Column(Money, nullable=False, default=0)
    opening_bank = Column(Money, nullable=False, default=0)
    closing_cash = Column(Money, nullable=False, default=0)
    closing_bank = Column(Money, nullable=False, default=0)
    opening_overridden = Column(Boolean, nullable=False, default=False)
    note = Column(String, nullable=True)
    created_at = Column(DateTime, default=lambda: datetime.now(UTC), nullable=False)

    __table_args__ = ({"sqlite_autoincrement": True},)


@event.listens_for(Engine, "connect")
def _enable_sqlite_foreign_keys(dbapi_connection, connection_record):
    if type(dbapi_connection).__module__.startswith("sqlite3"):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()


def create_session_factory(database_url: str) -> sessionmaker[Session]:
    """Create a SQLAlchemy session factory."""
    connect_args = {}
    if database_url.startswith("sqlite"):
        connect_args["check_same_thread"] = False
    engine = create_engine(database_url, echo=False, connect_args=connect_args)
    Base.metadata.create_all(engine)
    return sessionmaker(bind=engine, expire_on_commit=False)
