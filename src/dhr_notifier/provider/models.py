"""DHR data models: RawRecord, Customer, RecordKind.

Only the fields the notifier reads are modelled; anything else the provider
returns is kept untouched in ``RawRecord.data``.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass, field
from typing import Any


class RecordKind(enum.StrEnum):
    """The two record collections polled from the provider."""

    TRANSACTION = "transaction"
    WITHDRAWAL = "withdrawal"


@dataclass(frozen=True)
class Customer:
    """Buyer information attached to a transaction."""

    name: str | None = None
    email: str | None = None
    document: str | None = None

    @classmethod
    def from_dict(cls, data: Any) -> Customer | None:
        """Create from the provider's ``customer`` object, if present."""
        if not isinstance(data, dict):
            return None
        return cls(
            name=data.get("name") or None,
            email=data.get("email") or None,
            document=data.get("document") or None,
        )


@dataclass(frozen=True)
class RawRecord:
    """A transaction or withdrawal snapshot as returned by one fetch.

    Attributes:
        id: Provider-unique record id.
        status: Provider status string (``paid``, ``pending``, ...).
        amount: Amount in minor currency units (centavos).
        customer: Optional buyer info (transactions only).
        payment_method: e.g. ``pix``, ``credit_card``.
        installments: Number of installments, if reported.
        data: The original JSON object.
    """

    id: str
    status: str
    amount: int = 0
    customer: Customer | None = None
    payment_method: str | None = None
    installments: int | None = None
    data: dict[str, Any] = field(default_factory=dict, compare=False, repr=False)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> RawRecord:
        """Create from a provider JSON object.

        Raises:
            ValueError: If the object has no usable ``id`` or ``status``.
        """
        record_id = data.get("id")
        status = data.get("status")
        if record_id in (None, "") or not isinstance(status, str):
            msg = f"record without id/status: {data!r}"
            raise ValueError(msg)

        installments = data.get("installments")
        return cls(
            id=str(record_id),
            status=status,
            amount=_to_int(data.get("amount")),
            customer=Customer.from_dict(data.get("customer")),
            payment_method=data.get("paymentMethod") or None,
            installments=_to_int(installments) if installments is not None else None,
            data=dict(data),
        )


def _to_int(value: Any) -> int:
    """Coerce a JSON number or numeric string to int, 0 when unusable."""
    if isinstance(value, bool):
        return 0
    try:
        return int(value)
    except (TypeError, ValueError):
        return 0
