from __future__ import annotations

from collections.abc import Generator
from datetime import date, datetime, timezone
from decimal import Decimal

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from ledgerview.db.base import Base
from ledgerview.db.dependencies import get_db_session
import ledgerview.models.entities  # noqa: F401
from ledgerview.main import create_app
from ledgerview.models.entities import (
    Account,
    Business,
    Category,
    Client,
    IncomeSource,
    Invoice,
    InvoiceLine,
    InvoicePayment,
    Project,
    ProjectTask,
    Quote,
    Service,
    Transaction,
    User,
    UserSettings,
)

FROZEN_NOW = datetime(2026, 3, 15, 12, 0, tzinfo=timezone.utc)


def frozen_clock() -> datetime:
    return FROZEN_NOW


@pytest.fixture()
def db_session() -> Generator[Session, None, None]:
    engine = create_engine(
        "sqlite+pysqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
        future=True,
    )
    Base.metadata.create_all(bind=engine)
    TestingSessionLocal = sessionmaker(bind=engine, autoflush=False, autocommit=False, future=True)

    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture()
def client(db_session: Session) -> Generator[TestClient, None, None]:
    app = create_app()

    def override_db() -> Generator[Session, None, None]:
        yield db_session

    app.dependency_overrides[get_db_session] = override_db
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


class Seed:
    """Row builders for service and API tests; every call commits."""

    def __init__(self, db: Session) -> None:
        self.db = db

    def _save(self, row):
        self.db.add(row)
        self.db.commit()
        self.db.refresh(row)
        return row

    def user(self, email: str = "owner@test.local", *, currency: str | None = None) -> User:
        user = self._save(User(email=email, display_name=email.split("@")[0]))
        if currency is not None:
            self._save(UserSettings(user_id=user.id, main_currency=currency))
        return user

    def business(self, user: User, name: str = "Studio", *, currency: str | None = "EUR") -> Business:
        return self._save(Business(user_id=user.id, name=name, currency=currency))

    def account(
        self,
        user: User,
        *,
        business: Business | None = None,
        is_active: bool = True,
        include_in_budget: bool = True,
    ) -> Account:
        return self._save(
            Account(
                user_id=user.id,
                business_id=business.id if business is not None else None,
                name="Main account",
                is_active=is_active,
                include_in_budget=include_in_budget,
            )
        )

    def income_source(self, user: User, name: str, *, type: str | None = None) -> IncomeSource:
        return self._save(IncomeSource(user_id=user.id, name=name, type=type))

    def category(self, user: User, name: str) -> Category:
        return self._save(Category(user_id=user.id, name=name))

    def transaction(
        self,
        account: Account,
        *,
        amount: str,
        direction: str,
        occurred_on: date,
        type: str | None = None,
        raw_label: str | None = None,
        income_source: IncomeSource | None = None,
        category: Category | None = None,
    ) -> Transaction:
        return self._save(
            Transaction(
                user_id=account.user_id,
                business_id=account.business_id,
                account_id=account.id,
                income_source_id=income_source.id if income_source is not None else None,
                category_id=category.id if category is not None else None,
                occurred_on=occurred_on,
                amount=Decimal(amount),
                direction=direction,
                type=type,
                label=raw_label or "",
                raw_label=raw_label,
            )
        )

    def client(self, business: Business, name: str) -> Client:
        return self._save(Client(business_id=business.id, name=name))

    def service(self, business: Business, name: str) -> Service:
        return self._save(Service(business_id=business.id, name=name))

    def quote(
        self,
        business: Business,
        *,
        status: str,
        total: str,
        issue_date: date | None = None,
        updated_at: datetime | None = None,
    ) -> Quote:
        return self._save(
            Quote(
                business_id=business.id,
                quote_number=f"Q-{status}-{total}",
                status=status,
                total_ttc=Decimal(total),
                issue_date=issue_date,
                updated_at=updated_at,
            )
        )

    def invoice(
        self,
        business: Business,
        *,
        total: str,
        invoice_date: date,
        client: Client | None = None,
        project: Project | None = None,
        payments: tuple[tuple[str, date], ...] = (),
        lines: tuple[tuple[Service | None, str, str, str], ...] = (),
    ) -> Invoice:
        invoice = self._save(
            Invoice(
                business_id=business.id,
                client_id=client.id if client is not None else None,
                project_id=project.id if project is not None else None,
                invoice_number=f"INV-{invoice_date.isoformat()}-{total}",
                invoice_date=invoice_date,
                total_ttc=Decimal(total),
            )
        )
        for amount, paid_at in payments:
            self.db.add(InvoicePayment(invoice_id=invoice.id, amount=Decimal(amount), paid_at=paid_at))
        for service, description, quantity, unit_price in lines:
            self.db.add(
                InvoiceLine(
                    invoice_id=invoice.id,
                    service_id=service.id if service is not None else None,
                    description=description,
                    quantity=Decimal(quantity),
                    unit_price=Decimal(unit_price),
                )
            )
        self.db.commit()
        return invoice

    def project(
        self,
        user: User,
        *,
        business: Business | None = None,
        name: str = "Website",
        status: str = "planned",
        start_date: date | None = None,
        due_date: date | None = None,
        completed_at: datetime | None = None,
        created_at: datetime | None = None,
    ) -> Project:
        return self._save(
            Project(
                user_id=user.id,
                business_id=business.id if business is not None else None,
                name=name,
                status=status,
                start_date=start_date,
                due_date=due_date,
                completed_at=completed_at,
                created_at=created_at or FROZEN_NOW,
            )
        )

    def task(
        self,
        project: Project,
        name: str,
        *,
        status: str = "todo",
        start_date: date | None = None,
        due_date: date | None = None,
        estimated_hours: str | None = None,
        actual_hours: str | None = None,
    ) -> ProjectTask:
        return self._save(
            ProjectTask(
                project_id=project.id,
                name=name,
                status=status,
                start_date=start_date,
                due_date=due_date,
                estimated_hours=Decimal(estimated_hours) if estimated_hours is not None else None,
                actual_hours=Decimal(actual_hours) if actual_hours is not None else None,
            )
        )


@pytest.fixture()
def seed(db_session: Session) -> Seed:
    return Seed(db_session)


@pytest.fixture()
def now() -> datetime:
    return FROZEN_NOW


@pytest.fixture()
def clock():
    return frozen_clock
