"""ORM model package."""

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
    QuoteStatus,
    Service,
    TaskStatus,
    Transaction,
    TransactionDirection,
    User,
    UserSettings,
)

__all__ = [
    "Account",
    "Business",
    "Category",
    "Client",
    "IncomeSource",
    "Invoice",
    "InvoiceLine",
    "InvoicePayment",
    "Project",
    "ProjectTask",
    "Quote",
    "QuoteStatus",
    "Service",
    "TaskStatus",
    "Transaction",
    "TransactionDirection",
    "User",
    "UserSettings",
]
