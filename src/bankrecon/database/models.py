"""SQLAlchemy models for the bankrecon record store."""

from datetime import datetime, UTC
from sqlalchemy import (
    Column,
    Integer,
    String,
    DateTime,
    Date,
    Numeric,
    Boolean,
    Index,
    create_engine,
)
from sqlalchemy.orm import declarative_base, sessionmaker, Session

Base = declarative_base()


def _utcnow() -> datetime:
    return datetime.now(UTC)


class Transaction(Base):
    """Bank-ledger line model."""

    __tablename__ = "transactions"

    id = Column(String, primary_key=True)
    date = Column(Date, nullable=False)
    amount = Column(Numeric(14, 2), nullable=False)
    kind = Column(String(6), nullable=False)
    narration = Column(String, nullable=False, default="")
    bank_reference = Column(String, nullable=True)
    party_name = Column(String, nullable=False, default="")
    external_reference = Column(String, nullable=False, default="")
    added_to_external_system = Column(Boolean, default=False, nullable=False)
    hold = Column(Boolean, default=False, nullable=False)
    self_transfer = Column(Boolean, default=False, nullable=False)
    notes = Column(String, nullable=True)
    created_at = Column(DateTime, default=_utcnow, nullable=False)
    updated_at = Column(DateTime, default=_utcnow, nullable=False)

    __table_args__ = (Index("ix_transactions_external_reference", "external_reference"),)


class NameMapping(Base):
    """Learned narration pattern model."""

    __tablename__ = "name_mappings"

    id = Column(Integer, primary_key=True)
    original_pattern = Column(String, unique=True, nullable=False)
    corrected_name = Column(String, nullable=False)
    confidence = Column(Integer, default=1, nullable=False)
    last_used_at = Column(DateTime, default=_utcnow, nullable=False)
    created_at = Column(DateTime, default=_utcnow, nullable=False)


class Party(Base):
    """Directory entry model (authoritative party/supplier names)."""

    __tablename__ = "parties"

    id = Column(Integer, primary_key=True)
    name = Column(String, nullable=False)
    normalized_name = Column(String, unique=True, nullable=False)
    created_at = Column(DateTime, default=_utcnow, nullable=False)


def create_session_factory(database_url: str) -> sessionmaker[Session]:
    """Create a SQLAlchemy session factory."""
    engine = create_engine(database_url, echo=False)
    Base.metadata.create_all(engine)
    return sessionmaker(bind=engine)
