"""ORM entities read by the insights layer."""

from __future__ import annotations

import enum
from datetime import date, datetime, timezone
from decimal import Decimal

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    Date,
    DateTime,
    ForeignKey,
    Index,
    Numeric,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from ledgerview.db.base import Base, BigIntId


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class TransactionDirection(str, enum.Enum):
    IN = "in"
    OUT = "out"


class QuoteStatus(str, enum.Enum):
    DRAFT = "draft"
    SENT = "sent"
    ACCEPTED = "accepted"
    REJECTED = "rejected"
    EXPIRED = "expired"
    CANCELLED = "cancelled"


class TaskStatus(str, enum.Enum):
    TODO = "todo"
    IN_PROGRESS = "in_progress"
    BLOCKED = "blocked"
    DONE = "done"

    @classmethod
    def parse(cls, value: str | None) -> TaskStatus:
        """Map a stored status string to a member; unknown values count as todo."""

        try:
            return cls(value)
        except ValueError:
            return cls.TODO


class User(Base):
    __tablename__ = "users"

    id: Mapped[int] = mapped_column(BigIntId, primary_key=True, autoincrement=True)
    email: Mapped[str] = mapped_column(String(255), unique=True, nullable=False)
    display_name: Mapped[str | None] = mapped_column(String(255), nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=_utcnow)

    settings: Mapped[UserSettings | None] = relationship(back_populates="user", uselist=False)


class UserSettings(Base):
    __tablename__ = "user_settings"

    user_id: Mapped[int] = mapped_column(BigIntId, ForeignKey("users.id"), primary_key=True)
    main_currency: Mapped[str] = mapped_column(String(10), nullable=False, default="EUR")

    user: Mapped[User] = relationship(back_populates="settings")


class Business(Base):
    __tablename__ = "businesses"
    __table_args__ = (
        UniqueConstraint("user_id", "name", name="uq_businesses"),
        Index("idx_businesses_user_active", "user_id", "is_active"),
    )

    id: Mapped[int] = mapped_column(BigIntId, primary_key=True, autoincrement=True)
    user_id: Mapped[int] = mapped_column(BigIntId, ForeignKey("users.id"), nullable=False)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    currency: Mapped[str | None] = mapped_column(String(10), nullable=True)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=_utcnow)


class Account(Base):
    __tablename__ = "accounts"
    __table_args__ = (
        Index("idx_accounts_user", "user_id"),
        Index("idx_accounts_business", "business_id"),
    )

    id: Mapped[int] = mapped_column(BigIntId, primary_key=True, autoincrement=True)
    user_id: Mapped[int] = mapped_column(BigIntId, ForeignKey("users.id"), nullable=False)
    business_id: Mapped[int | None] = mapped_column(BigIntId, ForeignKey("businesses.id"), nullable=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    currency: Mapped[str] = mapped_column(String(10), nullable=False, default="EUR")
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    include_in_budget: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)


class IncomeSource(Base):
    __tablename__ = "income_sources"

    id: Mapped[int] = mapped_column(BigIntId, primary_key=True, autoincrement=True)
    user_id: Mapped[int] = mapped_column(BigIntId, ForeignKey("users.id"), nullable=False)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    type: Mapped[str | None] = mapped_column(String(50), nullable=True)


class Category(Base):
    __tablename__ = "categories"

    id: Mapped[int] = mapped_column(BigIntId, primary_key=True, autoincrement=True)
    user_id: Mapped[int] = mapped_column(BigIntId, ForeignKey("users.id"), nullable=False)
    name: Mapped[str] = mapped_column(String(255), nullable=False)


class Transaction(Base):
    __tablename__ = "transactions"
    __table_args__ = (
        CheckConstraint("amount > 0", name="ck_transactions_amount_positive"),
        CheckConstraint("direction IN ('in', 'out')", name="ck_transactions_direction"),
        Index("idx_transactions_user_date", "user_id", "date"),
        Index("idx_transactions_business_date", "business_id", "date"),
    )

    id: Mapped[int] = mapped_column(BigIntId, primary_key=True, autoincrement=True)
    user_id: Mapped[int] = mapped_column(BigIntId, ForeignKey("users.id"), nullable=False)
    business_id: Mapped[int | None] = mapped_column(BigIntId, ForeignKey("businesses.id"), nullable=True)
    account_id: Mapped[int] = mapped_column(BigIntId, ForeignKey("accounts.id"), nullable=False)
    income_source_id: Mapped[int | None] = mapped_column(
        BigIntId, ForeignKey("income_sources.id"), nullable=True
    )
    category_id: Mapped[int | None] = mapped_column(BigIntId, ForeignKey("categories.id"), nullable=True)
    occurred_on: Mapped[date] = mapped_column("date", Date, nullable=False)
    amount: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    direction: Mapped[str] = mapped_column(String(3), nullable=False)
    type: Mapped[str | None] = mapped_column(String(30), nullable=True)
    label: Mapped[str] = mapped_column(String(255), nullable=False, default="")
    raw_label: Mapped[str | None] = mapped_column(String(255), nullable=True)

    account: Mapped[Account] = relationship()
    income_source: Mapped[IncomeSource | None] = relationship()
    category: Mapped[Category | None] = relationship()


class Client(Base):
    __tablename__ = "clients"
    __table_args__ = (UniqueConstraint("business_id", "name", name="uq_clients"),)

    id: Mapped[int] = mapped_column(BigIntId, primary_key=True, autoincrement=True)
    business_id: Mapped[int] = mapped_column(BigIntId, ForeignKey("businesses.id"), nullable=False)
    name: Mapped[str] = mapped_column(String(255), nullable=False)


class Service(Base):
    __tablename__ = "services"
    __table_args__ = (UniqueConstraint("business_id", "name", name="uq_services"),)

    id: Mapped[int] = mapped_column(BigIntId, primary_key=True, autoincrement=True)
    business_id: Mapped[int] = mapped_column(BigIntId, ForeignKey("businesses.id"), nullable=False)
    name: Mapped[str] = mapped_column(String(255), nullable=False)


class Quote(Base):
    __tablename__ = "quotes"
    __table_args__ = (Index("idx_quotes_business_status", "business_id", "status"),)

    id: Mapped[int] = mapped_column(BigIntId, primary_key=True, autoincrement=True)
    business_id: Mapped[int] = mapped_column(BigIntId, ForeignKey("businesses.id"), nullable=False)
    client_id: Mapped[int | None] = mapped_column(BigIntId, ForeignKey("clients.id"), nullable=True)
    quote_number: Mapped[str] = mapped_column(String(50), nullable=False)
    issue_date: Mapped[date | None] = mapped_column(Date, nullable=True)
    status: Mapped[str] = mapped_column(String(20), nullable=False, default=QuoteStatus.DRAFT.value)
    total_ttc: Mapped[Decimal | None] = mapped_column(Numeric(12, 2), nullable=True, default=Decimal("0.00"))
    updated_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True, default=_utcnow)


class Invoice(Base):
    __tablename__ = "invoices"
    __table_args__ = (
        Index("idx_invoices_business_client", "business_id", "client_id"),
        Index("idx_invoices_business_date", "business_id", "invoice_date"),
    )

    id: Mapped[int] = mapped_column(BigIntId, primary_key=True, autoincrement=True)
    business_id: Mapped[int] = mapped_column(BigIntId, ForeignKey("businesses.id"), nullable=False)
    client_id: Mapped[int | None] = mapped_column(BigIntId, ForeignKey("clients.id"), nullable=True)
    project_id: Mapped[int | None] = mapped_column(BigIntId, ForeignKey("projects.id"), nullable=True)
    invoice_number: Mapped[str] = mapped_column(String(50), nullable=False)
    invoice_date: Mapped[date] = mapped_column(Date, nullable=False)
    total_ttc: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False, default=Decimal("0.00"))

    lines: Mapped[list[InvoiceLine]] = relationship(order_by="InvoiceLine.id")
    payments: Mapped[list[InvoicePayment]] = relationship(order_by="InvoicePayment.id")


class InvoiceLine(Base):
    __tablename__ = "invoice_lines"
    __table_args__ = (Index("idx_invoice_lines_invoice", "invoice_id"),)

    id: Mapped[int] = mapped_column(BigIntId, primary_key=True, autoincrement=True)
    invoice_id: Mapped[int] = mapped_column(BigIntId, ForeignKey("invoices.id"), nullable=False)
    service_id: Mapped[int | None] = mapped_column(BigIntId, ForeignKey("services.id"), nullable=True)
    description: Mapped[str] = mapped_column(Text, nullable=False, default="")
    quantity: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False, default=Decimal("1.00"))
    unit_price: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False, default=Decimal("0.00"))


class InvoicePayment(Base):
    __tablename__ = "invoice_payments"
    __table_args__ = (
        CheckConstraint("amount > 0", name="ck_invoice_payments_amount_positive"),
        Index("idx_invoice_payments_invoice", "invoice_id"),
    )

    id: Mapped[int] = mapped_column(BigIntId, primary_key=True, autoincrement=True)
    invoice_id: Mapped[int] = mapped_column(BigIntId, ForeignKey("invoices.id"), nullable=False)
    amount: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    paid_at: Mapped[date] = mapped_column(Date, nullable=False)


class Project(Base):
    __tablename__ = "projects"
    __table_args__ = (
        Index("idx_projects_business_status", "business_id", "status"),
        Index("idx_projects_user", "user_id"),
    )

    id: Mapped[int] = mapped_column(BigIntId, primary_key=True, autoincrement=True)
    user_id: Mapped[int] = mapped_column(BigIntId, ForeignKey("users.id"), nullable=False)
    business_id: Mapped[int | None] = mapped_column(BigIntId, ForeignKey("businesses.id"), nullable=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    status: Mapped[str] = mapped_column(String(20), nullable=False, default="planned")
    start_date: Mapped[date | None] = mapped_column(Date, nullable=True)
    due_date: Mapped[date | None] = mapped_column(Date, nullable=True)
    completed_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=_utcnow)


class ProjectTask(Base):
    __tablename__ = "project_tasks"
    __table_args__ = (
        CheckConstraint(
            "estimated_hours IS NULL OR estimated_hours >= 0",
            name="ck_project_tasks_estimated_hours_non_negative",
        ),
        CheckConstraint(
            "actual_hours IS NULL OR actual_hours >= 0",
            name="ck_project_tasks_actual_hours_non_negative",
        ),
        Index("idx_project_tasks_project", "project_id"),
    )

    id: Mapped[int] = mapped_column(BigIntId, primary_key=True, autoincrement=True)
    project_id: Mapped[int] = mapped_column(BigIntId, ForeignKey("projects.id"), nullable=False)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    status: Mapped[str] = mapped_column(String(20), nullable=False, default=TaskStatus.TODO.value)
    start_date: Mapped[date | None] = mapped_column(Date, nullable=True)
    due_date: Mapped[date | None] = mapped_column(Date, nullable=True)
    estimated_hours: Mapped[Decimal | None] = mapped_column(Numeric(10, 2), nullable=True)
    actual_hours: Mapped[Decimal | None] = mapped_column(Numeric(10, 2), nullable=True)
    sort_index: Mapped[int] = mapped_column(nullable=False, default=0)
