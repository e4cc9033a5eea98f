"""Read-only persistence queries backing the insights aggregators."""

from __future__ import annotations

from collections.abc import Iterable
from datetime import date

from sqlalchemy import and_, select
from sqlalchemy.orm import Session, selectinload

from ledgerview.models.entities import (
    Account,
    Business,
    Client,
    Invoice,
    Project,
    ProjectTask,
    Quote,
    Service,
    Transaction,
    TransactionDirection,
    User,
    UserSettings,
)
from ledgerview.models.rows import (
    InvoiceLineRow,
    InvoiceRow,
    PaymentRow,
    ProjectRow,
    ProjectTaskRow,
    QuoteRow,
    TransactionRow,
)


def _transaction_row(row: Transaction) -> TransactionRow:
    income_source = row.income_source
    category = row.category
    return TransactionRow(
        id=row.id,
        account_id=row.account_id,
        direction=row.direction,
        amount=row.amount,
        occurred_on=row.occurred_on,
        business_id=row.business_id,
        type=row.type,
        label=row.label,
        raw_label=row.raw_label,
        income_source_name=income_source.name if income_source is not None else None,
        income_source_type=income_source.type if income_source is not None else None,
        category_name=category.name if category is not None else None,
    )


class InsightsRepository:
    """Queries returning scoped row snapshots; never writes."""

    def __init__(self, db: Session) -> None:
        self.db = db

    # ---------- Scope lookups ----------
    def get_user(self, user_id: int) -> User | None:
        return self.db.scalar(select(User).where(User.id == user_id))

    def get_business(self, business_id: int) -> Business | None:
        return self.db.scalar(select(Business).where(Business.id == business_id))

    def get_project(self, project_id: int) -> Project | None:
        return self.db.scalar(select(Project).where(Project.id == project_id))

    def get_user_currency(self, user_id: int) -> str | None:
        return self.db.scalar(select(UserSettings.main_currency).where(UserSettings.user_id == user_id))

    # ---------- Transactions ----------
    def list_budget_transactions(
        self,
        user_id: int,
        *,
        business_id: int | None,
        since: date,
        until: date,
    ) -> list[TransactionRow]:
        """Transactions on active, budget-eligible accounts of one scope.

        ``business_id=None`` selects the personal scope: neither the
        transaction nor its account may belong to a business.
        """

        if business_id is None:
            scope = and_(Transaction.business_id.is_(None), Account.business_id.is_(None))
        else:
            scope = and_(Transaction.business_id == business_id, Account.business_id == business_id)

        rows = self.db.scalars(
            select(Transaction)
            .join(Account, Account.id == Transaction.account_id)
            .options(selectinload(Transaction.income_source))
            .where(
                and_(
                    Transaction.user_id == user_id,
                    scope,
                    Transaction.occurred_on >= since,
                    Transaction.occurred_on <= until,
                    Account.is_active.is_(True),
                    Account.include_in_budget.is_(True),
                )
            )
            .order_by(Transaction.occurred_on.asc(), Transaction.id.asc())
        ).all()
        return [_transaction_row(row) for row in rows]

    def list_personal_income_transactions(self, user_id: int, *, since: date, until: date) -> list[TransactionRow]:
        rows = self.db.scalars(
            select(Transaction)
            .options(selectinload(Transaction.income_source))
            .where(
                and_(
                    Transaction.user_id == user_id,
                    Transaction.business_id.is_(None),
                    Transaction.direction == TransactionDirection.IN.value,
                    Transaction.occurred_on >= since,
                    Transaction.occurred_on <= until,
                )
            )
            .order_by(Transaction.occurred_on.asc(), Transaction.id.asc())
        ).all()
        return [_transaction_row(row) for row in rows]

    def list_personal_spending_transactions(self, user_id: int, *, since: date, until: date) -> list[TransactionRow]:
        rows = self.db.scalars(
            select(Transaction)
            .options(selectinload(Transaction.category))
            .where(
                and_(
                    Transaction.user_id == user_id,
                    Transaction.business_id.is_(None),
                    Transaction.direction == TransactionDirection.OUT.value,
                    Transaction.occurred_on >= since,
                    Transaction.occurred_on <= until,
                )
            )
            .order_by(Transaction.occurred_on.asc(), Transaction.id.asc())
        ).all()
        return [_transaction_row(row) for row in rows]

    def list_personal_transactions_since(self, user_id: int, *, since: date) -> list[TransactionRow]:
        rows = self.db.scalars(
            select(Transaction)
            .options(selectinload(Transaction.income_source))
            .where(
                and_(
                    Transaction.user_id == user_id,
                    Transaction.business_id.is_(None),
                    Transaction.occurred_on >= since,
                )
            )
            .order_by(Transaction.occurred_on.asc(), Transaction.id.asc())
        ).all()
        return [_transaction_row(row) for row in rows]

    # ---------- Quotes and projects ----------
    def list_quotes(self, business_id: int) -> list[QuoteRow]:
        rows = self.db.scalars(
            select(Quote).where(Quote.business_id == business_id).order_by(Quote.issue_date.desc(), Quote.id.asc())
        ).all()
        return [
            QuoteRow(
                id=row.id,
                business_id=row.business_id,
                status=row.status,
                total_amount=row.total_ttc,
                issue_date=row.issue_date,
                updated_at=row.updated_at,
            )
            for row in rows
        ]

    def list_projects(self, business_id: int) -> list[ProjectRow]:
        rows = self.db.scalars(
            select(Project).where(Project.business_id == business_id).order_by(Project.id.asc())
        ).all()
        return [
            ProjectRow(
                id=row.id,
                status=row.status,
                created_at=row.created_at,
                business_id=row.business_id,
                start_date=row.start_date,
                due_date=row.due_date,
                completed_at=row.completed_at,
            )
            for row in rows
        ]

    def list_project_tasks(self, project_id: int) -> list[ProjectTaskRow]:
        rows = self.db.scalars(
            select(ProjectTask)
            .where(ProjectTask.project_id == project_id)
            .order_by(ProjectTask.start_date.asc(), ProjectTask.sort_index.asc(), ProjectTask.id.asc())
        ).all()
        return [
            ProjectTaskRow(
                id=row.id,
                project_id=row.project_id,
                name=row.name,
                status=row.status,
                start_date=row.start_date,
                due_date=row.due_date,
                estimated_hours=row.estimated_hours,
                actual_hours=row.actual_hours,
            )
            for row in rows
        ]

    # ---------- Invoices ----------
    def list_invoices_in_window(self, business_id: int, *, since: date, until: date) -> list[InvoiceRow]:
        """Invoices issued in the window, each with its in-window payments and all lines."""

        rows = self.db.scalars(
            select(Invoice)
            .options(selectinload(Invoice.payments), selectinload(Invoice.lines))
            .where(
                and_(
                    Invoice.business_id == business_id,
                    Invoice.invoice_date >= since,
                    Invoice.invoice_date <= until,
                )
            )
            .order_by(Invoice.invoice_date.desc(), Invoice.id.asc())
        ).all()
        return [
            InvoiceRow(
                id=row.id,
                business_id=row.business_id,
                invoice_date=row.invoice_date,
                total_amount=row.total_ttc,
                client_id=row.client_id,
                project_id=row.project_id,
                payments=tuple(
                    PaymentRow(amount=payment.amount, paid_at=payment.paid_at)
                    for payment in row.payments
                    if since <= payment.paid_at <= until
                ),
                lines=tuple(
                    InvoiceLineRow(
                        service_id=line.service_id,
                        description=line.description,
                        quantity=line.quantity,
                        unit_price=line.unit_price,
                    )
                    for line in row.lines
                ),
            )
            for row in rows
        ]

    def client_names(self, client_ids: Iterable[int]) -> dict[int, str]:
        ids = set(client_ids)
        if not ids:
            return {}
        rows = self.db.execute(select(Client.id, Client.name).where(Client.id.in_(ids))).all()
        return {client_id: name for client_id, name in rows}

    def service_names(self, service_ids: Iterable[int]) -> dict[int, str]:
        ids = set(service_ids)
        if not ids:
            return {}
        rows = self.db.execute(select(Service.id, Service.name).where(Service.id.in_(ids))).all()
        return {service_id: name for service_id, name in rows}
