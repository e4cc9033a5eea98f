"""Read-only row snapshots handed from the repository to aggregators.

Aggregators never touch ORM instances directly; they reduce over these
frozen records so that every computation is a pure function of its input.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import Decimal


@dataclass(frozen=True, slots=True)
class TransactionRow:
    id: int
    account_id: int
    direction: str
    amount: Decimal | None
    occurred_on: date
    business_id: int | None = None
    type: str | None = None
    label: str | None = None
    raw_label: str | None = None
    income_source_name: str | None = None
    income_source_type: str | None = None
    category_name: str | None = None


@dataclass(frozen=True, slots=True)
class QuoteRow:
    id: int
    business_id: int
    status: str
    total_amount: Decimal | None
    issue_date: date | None = None
    updated_at: datetime | None = None


@dataclass(frozen=True, slots=True)
class PaymentRow:
    amount: Decimal | None
    paid_at: date | datetime | None


@dataclass(frozen=True, slots=True)
class InvoiceLineRow:
    service_id: int | None
    description: str | None
    quantity: Decimal | None
    unit_price: Decimal | None


@dataclass(frozen=True, slots=True)
class InvoiceRow:
    id: int
    business_id: int
    invoice_date: date
    total_amount: Decimal | None
    client_id: int | None = None
    project_id: int | None = None
    payments: tuple[PaymentRow, ...] = field(default_factory=tuple)
    lines: tuple[InvoiceLineRow, ...] = field(default_factory=tuple)


@dataclass(frozen=True, slots=True)
class ProjectRow:
    id: int
    status: str
    created_at: datetime
    business_id: int | None = None
    start_date: date | None = None
    due_date: date | None = None
    completed_at: datetime | None = None


@dataclass(frozen=True, slots=True)
class ProjectTaskRow:
    id: int
    project_id: int
    name: str
    status: str
    start_date: date | None = None
    due_date: date | None = None
    estimated_hours: Decimal | None = None
    actual_hours: Decimal | None = None
