"""Top clients and top services rankings over a business's invoices."""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import Decimal

from ledgerview.core.errors import InvalidInputError
from ledgerview.models.rows import InvoiceRow
from ledgerview.services.aggregation import (
    ZERO,
    as_utc_datetime,
    isoformat_utc,
    safe_div,
    to_decimal,
    to_number,
    trailing_year_start,
)
from ledgerview.services.base import InsightsService

logger = logging.getLogger(__name__)

UNKNOWN_KEY = "unknown"
UNKNOWN_CLIENT_NAME = "Unknown client"
DEFAULT_SERVICE_NAME = "Service"


@dataclass(slots=True)
class _Bucket:
    name: str
    total_invoiced: Decimal = ZERO
    total_paid: Decimal = ZERO
    invoice_ids: set[int] = field(default_factory=set)
    project_ids: set[int] = field(default_factory=set)
    last_activity: datetime | None = None
    price_sum: Decimal = ZERO
    line_count: int = 0

    def touch(self, moment: date | datetime | None) -> None:
        if moment is None:
            return
        moment = as_utc_datetime(moment)
        if self.last_activity is None or moment > self.last_activity:
            self.last_activity = moment


@dataclass(frozen=True, slots=True)
class RankedEntry:
    key: str
    name: str
    total_invoiced: Decimal
    total_paid: Decimal
    invoice_count: int
    project_count: int
    average: Decimal
    last_activity_at: datetime | None


@dataclass(frozen=True, slots=True)
class RankingSummary:
    business_id: int
    currency: str
    period_from: datetime
    period_to: datetime
    entries: tuple[RankedEntry, ...]
    generated_at: datetime


def rank_entries(entries: Iterable[RankedEntry], *, limit: int) -> tuple[RankedEntry, ...]:
    """Order by paid then invoiced, both descending, and keep the first ``limit``."""

    ordered = sorted(entries, key=lambda entry: (entry.total_paid, entry.total_invoiced), reverse=True)
    return tuple(ordered[:limit])


def _paid_amount(invoice: InvoiceRow) -> Decimal:
    total = ZERO
    for payment in invoice.payments:
        total += to_decimal(payment.amount)
    return total


def aggregate_clients(
    invoices: Iterable[InvoiceRow],
    *,
    client_names: Mapping[int, str],
    limit: int,
) -> tuple[RankedEntry, ...]:
    buckets: dict[int | None, _Bucket] = {}
    for invoice in invoices:
        key = invoice.client_id
        bucket = buckets.get(key)
        if bucket is None:
            name = client_names.get(key) if key is not None else None
            bucket = buckets[key] = _Bucket(name=name or UNKNOWN_CLIENT_NAME)

        bucket.total_invoiced += to_decimal(invoice.total_amount)
        bucket.invoice_ids.add(invoice.id)
        if invoice.project_id is not None:
            bucket.project_ids.add(invoice.project_id)
        bucket.touch(invoice.invoice_date)

        for payment in invoice.payments:
            bucket.total_paid += to_decimal(payment.amount)
            bucket.touch(payment.paid_at)

    entries = [
        RankedEntry(
            key=str(key) if key is not None else UNKNOWN_KEY,
            name=bucket.name,
            total_invoiced=bucket.total_invoiced,
            total_paid=bucket.total_paid,
            invoice_count=len(bucket.invoice_ids),
            project_count=len(bucket.project_ids),
            average=safe_div(bucket.total_invoiced, len(bucket.invoice_ids)),
            last_activity_at=bucket.last_activity,
        )
        for key, bucket in buckets.items()
    ]
    return rank_entries(entries, limit=limit)


def aggregate_services(
    invoices: Iterable[InvoiceRow],
    *,
    service_names: Mapping[int, str],
    limit: int,
) -> tuple[RankedEntry, ...]:
    """Group invoice lines by service.

    The paid amount of an invoice is spread over its lines pro rata to each
    line's share of the invoice total.
    """

    buckets: dict[str, _Bucket] = {}
    for invoice in invoices:
        invoice_total = to_decimal(invoice.total_amount)
        invoice_paid = _paid_amount(invoice)
        last_payment = max(
            (as_utc_datetime(payment.paid_at) for payment in invoice.payments if payment.paid_at is not None),
            default=None,
        )

        for line in invoice.lines:
            unit_price = to_decimal(line.unit_price)
            line_subtotal = unit_price * to_decimal(line.quantity)
            key = str(line.service_id) if line.service_id is not None else UNKNOWN_KEY

            bucket = buckets.get(key)
            if bucket is None:
                name = service_names.get(line.service_id) if line.service_id is not None else None
                bucket = buckets[key] = _Bucket(name=name or line.description or DEFAULT_SERVICE_NAME)

            bucket.total_invoiced += line_subtotal
            bucket.price_sum += unit_price
            bucket.line_count += 1
            bucket.invoice_ids.add(invoice.id)
            if invoice.project_id is not None:
                bucket.project_ids.add(invoice.project_id)
            bucket.touch(invoice.invoice_date)
            bucket.touch(last_payment)

            if invoice_total > ZERO and invoice_paid > ZERO:
                bucket.total_paid += invoice_paid * (line_subtotal / invoice_total)

    entries = [
        RankedEntry(
            key=key,
            name=bucket.name,
            total_invoiced=bucket.total_invoiced,
            total_paid=bucket.total_paid,
            invoice_count=len(bucket.invoice_ids),
            project_count=len(bucket.project_ids),
            average=safe_div(bucket.price_sum, bucket.line_count),
            last_activity_at=bucket.last_activity,
        )
        for key, bucket in buckets.items()
    ]
    return rank_entries(entries, limit=limit)


class RankingService(InsightsService):
    """Top clients / top services for one business and period."""

    @staticmethod
    def _serialize(summary: RankingSummary, *, list_key: str, id_key: str, average_key: str) -> dict[str, object]:
        return {
            "businessId": str(summary.business_id),
            "currency": summary.currency,
            "period": {
                "from": isoformat_utc(summary.period_from),
                "to": isoformat_utc(summary.period_to),
            },
            list_key: [
                {
                    id_key: entry.key,
                    "name": entry.name,
                    "totalInvoiced": to_number(entry.total_invoiced),
                    "totalPaid": to_number(entry.total_paid),
                    "invoiceCount": entry.invoice_count,
                    "projectCount": entry.project_count,
                    average_key: to_number(entry.average),
                    "lastActivityAt": isoformat_utc(entry.last_activity_at),
                }
                for entry in summary.entries
            ],
            "generatedAt": isoformat_utc(summary.generated_at),
        }

    @classmethod
    def serialize_top_clients(cls, summary: RankingSummary) -> dict[str, object]:
        return cls._serialize(summary, list_key="topClients", id_key="clientId", average_key="averageInvoice")

    @classmethod
    def serialize_top_services(cls, summary: RankingSummary) -> dict[str, object]:
        return cls._serialize(summary, list_key="topServices", id_key="serviceId", average_key="averagePrice")

    def _period(
        self,
        date_from: date | datetime | None,
        date_to: date | datetime | None,
        now: datetime,
    ) -> tuple[datetime, datetime]:
        period_from = as_utc_datetime(date_from) if date_from is not None else trailing_year_start(now)
        period_to = as_utc_datetime(date_to) if date_to is not None else as_utc_datetime(now)
        if period_to < period_from:
            raise InvalidInputError("to must be greater than or equal to from.")
        return period_from, period_to

    def _load(
        self,
        *,
        user_id: int,
        business_id: int,
        date_from: date | datetime | None,
        date_to: date | datetime | None,
    ):
        business = self._ensure_business_owned(user_id=user_id, business_id=business_id)
        now = self.clock()
        period_from, period_to = self._period(date_from, date_to, now)
        invoices = self.repo.list_invoices_in_window(
            business_id,
            since=period_from.date(),
            until=period_to.date(),
        )
        return business, now, period_from, period_to, invoices

    def top_clients(
        self,
        *,
        user_id: int,
        business_id: int,
        date_from: date | datetime | None = None,
        date_to: date | datetime | None = None,
    ) -> RankingSummary:
        business, now, period_from, period_to, invoices = self._load(
            user_id=user_id,
            business_id=business_id,
            date_from=date_from,
            date_to=date_to,
        )
        names = self.repo.client_names(
            invoice.client_id for invoice in invoices if invoice.client_id is not None
        )
        logger.debug("top clients business_id=%s invoices=%s", business_id, len(invoices))
        return RankingSummary(
            business_id=business_id,
            currency=self._business_currency(business),
            period_from=period_from,
            period_to=period_to,
            entries=aggregate_clients(invoices, client_names=names, limit=self.settings.insights_top_n),
            generated_at=now,
        )

    def top_services(
        self,
        *,
        user_id: int,
        business_id: int,
        date_from: date | datetime | None = None,
        date_to: date | datetime | None = None,
    ) -> RankingSummary:
        business, now, period_from, period_to, invoices = self._load(
            user_id=user_id,
            business_id=business_id,
            date_from=date_from,
            date_to=date_to,
        )
        names = self.repo.service_names(
            line.service_id for invoice in invoices for line in invoice.lines if line.service_id is not None
        )
        logger.debug("top services business_id=%s invoices=%s", business_id, len(invoices))
        return RankingSummary(
            business_id=business_id,
            currency=self._business_currency(business),
            period_from=period_from,
            period_to=period_to,
            entries=aggregate_services(invoices, service_names=names, limit=self.settings.insights_top_n),
            generated_at=now,
        )
