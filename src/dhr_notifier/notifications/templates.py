"""Template rendering for notification titles and bodies.

Recognised placeholders::

    {VALOR}      amount, e.g. "R$ 100.00"
    {CLIENTE}    customer name ("Cliente" if absent, "Você" for withdrawals)
    {EMAIL}      customer e-mail
    {DOCUMENTO}  customer document (CPF/CNPJ)
    {METODO}     payment method
    {ID}         provider record id
    {DATA}       time of rendering, "dd/mm/YYYY, HH:MM:SS"
    {PARCELAS}   number of installments

Anything else between braces is left as written.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from typing import TYPE_CHECKING

from dhr_notifier.provider.models import RecordKind

if TYPE_CHECKING:
    from dhr_notifier.engine.events import Event

NOT_AVAILABLE = "N/A"
DEFAULT_CUSTOMER_NAME = "Cliente"
SELF_NAME = "Você"
CURRENCY_PREFIX = "R$"
DATE_FORMAT = "%d/%m/%Y, %H:%M:%S"

_PLACEHOLDER = re.compile(r"\{(VALOR|CLIENTE|EMAIL|DOCUMENTO|METODO|ID|DATA|PARCELAS)\}")


@dataclass(frozen=True)
class TemplateValues:
    """Placeholder values resolved for one event."""

    amount: str
    customer_name: str
    customer_email: str
    customer_document: str
    payment_method: str
    record_id: str
    date: str
    installments: str

    def as_mapping(self) -> dict[str, str]:
        """Placeholder name → rendered value."""
        return {
            "VALOR": self.amount,
            "CLIENTE": self.customer_name,
            "EMAIL": self.customer_email,
            "DOCUMENTO": self.customer_document,
            "METODO": self.payment_method,
            "ID": self.record_id,
            "DATA": self.date,
            "PARCELAS": self.installments,
        }


def format_amount(amount: int) -> str:
    """Format minor units as reais: ``10000`` → ``"R$ 100.00"``."""
    return f"{CURRENCY_PREFIX} {Decimal(amount) / 100:.2f}"


def format_timestamp(moment: datetime) -> str:
    """Format a timestamp the way notifications display it."""
    return moment.strftime(DATE_FORMAT)


def resolve_values(event: Event, *, now: datetime | None = None) -> TemplateValues:
    """Compute placeholder values for *event* at time *now* (default: now)."""
    record = event.record
    moment = now or datetime.now()

    if event.event_type.subject_kind is RecordKind.WITHDRAWAL:
        return TemplateValues(
            amount=format_amount(record.amount),
            customer_name=SELF_NAME,
            customer_email=NOT_AVAILABLE,
            customer_document=NOT_AVAILABLE,
            payment_method=NOT_AVAILABLE,
            record_id=record.id or NOT_AVAILABLE,
            date=format_timestamp(moment),
            installments="1",
        )

    customer = record.customer
    return TemplateValues(
        amount=format_amount(record.amount),
        customer_name=(customer and customer.name) or DEFAULT_CUSTOMER_NAME,
        customer_email=(customer and customer.email) or NOT_AVAILABLE,
        customer_document=(customer and customer.document) or NOT_AVAILABLE,
        payment_method=record.payment_method or NOT_AVAILABLE,
        record_id=record.id or NOT_AVAILABLE,
        date=format_timestamp(moment),
        installments=str(record.installments or 1),
    )


def render(template: str, event: Event, *, now: datetime | None = None) -> str:
    """Replace every known placeholder in *template* with *event*'s values.

    Substitution is single-pass: values that themselves contain braces are
    not expanded again.
    """
    values = resolve_values(event, now=now).as_mapping()
    return _PLACEHOLDER.sub(lambda m: values[m.group(1)], template)
