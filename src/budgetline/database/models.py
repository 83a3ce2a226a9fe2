"""SQLAlchemy models for the budgetline database."""

from datetime import datetime, UTC
from sqlalchemy import (
    CheckConstraint,
    Column,
    Integer,
    String,
    ForeignKey,
    DateTime,
    Date,
    Numeric,
    Boolean,
    create_engine,
)
from sqlalchemy.orm import declarative_base, relationship, sessionmaker, Session

Base = declarative_base()


def _now() -> datetime:
    return datetime.now(UTC)


class Account(Base):
    """Account model. Rows are soft-deleted through ``is_active``."""

    __tablename__ = "accounts"

    id = Column(Integer, primary_key=True)
    account_type = Column(String, nullable=False)
    account_name = Column(String, nullable=False)
    initial_balance = Column(Numeric(12, 2), default=0, nullable=False)
    interest_rate = Column(Numeric(6, 3), default=0, nullable=False)
    minimum_payment = Column(Numeric(12, 2), default=0, nullable=False)
    due_date = Column(Integer, default=1, nullable=False)
    is_active = Column(Boolean, default=True, nullable=False)
    created_at = Column(DateTime, default=_now, nullable=False)
    updated_at = Column(DateTime, default=_now, onupdate=_now, nullable=False)

    __table_args__ = (
        CheckConstraint(
            "account_type IN ('checking', 'savings', 'credit_card', 'student_loan')",
            name="ck_account_type",
        ),
    )

    # Relationships
    transactions = relationship(
        "Transaction", back_populates="account", foreign_keys="Transaction.account_id"
    )


class Transaction(Base):
    """Transaction model. ``amount`` is non-negative, ``type`` carries direction."""

    __tablename__ = "transactions"

    id = Column(String, primary_key=True)
    date = Column(Date, nullable=False)
    description = Column(String, nullable=False)
    amount = Column(Numeric(12, 2), nullable=False)
    category = Column(String, nullable=False)
    type = Column(String, nullable=False)
    account_id = Column(
        Integer, ForeignKey("accounts.id", ondelete="SET NULL"), nullable=True
    )
    transfer_to_account_id = Column(
        Integer, ForeignKey("accounts.id", ondelete="SET NULL"), nullable=True
    )
    tags = Column(String, nullable=True)
    notes = Column(String, nullable=True)
    created_at = Column(DateTime, default=_now, nullable=False)
    updated_at = Column(DateTime, default=_now, onupdate=_now, nullable=False)

    __table_args__ = (
        CheckConstraint("type IN ('income', 'expense', 'transfer')", name="ck_transaction_type"),
    )

    # Relationships
    account = relationship("Account", back_populates="transactions", foreign_keys=[account_id])
    transfer_to_account = relationship("Account", foreign_keys=[transfer_to_account_id])


class BudgetItem(Base):
    """Monthly budget item model. Deletion is permanent."""

    __tablename__ = "monthly_budget"

    id = Column(String, primary_key=True)
    name = Column(String, nullable=False)
    amount = Column(Numeric(12, 2), nullable=False)
    type = Column(String, nullable=False)
    category = Column(String, nullable=False)
    due_date = Column(Date, nullable=False)
    is_recurring = Column(Boolean, default=True, nullable=False)
    is_active = Column(Boolean, default=True, nullable=False)
    created_at = Column(DateTime, default=_now, nullable=False)
    updated_at = Column(DateTime, default=_now, onupdate=_now, nullable=False)

    __table_args__ = (
        CheckConstraint("type IN ('income', 'expense')", name="ck_budget_item_type"),
    )


def create_session_factory(database_url: str) -> sessionmaker[Session]:
    """Create a SQLAlchemy session factory."""
    engine = create_engine(database_url, echo=False)
    Base.metadata.create_all(engine)
    return sessionmaker(bind=engine)
