"""Tests for DHR record models."""

from __future__ import annotations

import pytest

from dhr_notifier.provider.models import Customer, RawRecord


class TestCustomer:
    def test_from_dict(self) -> None:
        c = Customer.from_dict({"name": "Ana", "email": "ana@x.com", "document": "1"})
        assert c == Customer(name="Ana", email="ana@x.com", document="1")

    def test_empty_strings_become_none(self) -> None:
        c = Customer.from_dict({"name": "", "email": None})
        assert c == Customer()

    def test_not_a_dict(self) -> None:
        assert Customer.from_dict(None) is None
        assert Customer.from_dict("Ana") is None


class TestRawRecord:
    def test_full_transaction(self) -> None:
        data = {
            "id": "T1",
            "status": "paid",
            "amount": 12345,
            "customer": {"name": "Ana"},
            "paymentMethod": "credit_card",
            "installments": 3,
            "extra": "kept",
        }
        rec = RawRecord.from_dict(data)
        assert rec.id == "T1"
        assert rec.status == "paid"
        assert rec.amount == 12345
        assert rec.customer is not None and rec.customer.name == "Ana"
        assert rec.payment_method == "credit_card"
        assert rec.installments == 3
        assert rec.data["extra"] == "kept"

    def test_numeric_id_is_stringified(self) -> None:
        assert RawRecord.from_dict({"id": 42, "status": "paid"}).id == "42"

    def test_minimal(self) -> None:
        rec = RawRecord.from_dict({"id": "W1", "status": "pending"})
        assert rec.amount == 0
        assert rec.customer is None
        assert rec.payment_method is None
        assert rec.installments is None

    @pytest.mark.parametrize("amount", ["abc", None, True, [1]])
    def test_unusable_amount_is_zero(self, amount: object) -> None:
        assert RawRecord.from_dict({"id": "T", "status": "paid", "amount": amount}).amount == 0

    def test_numeric_string_amount(self) -> None:
        assert RawRecord.from_dict({"id": "T", "status": "paid", "amount": "500"}).amount == 500

    @pytest.mark.parametrize(
        "data",
        [{"status": "paid"}, {"id": "", "status": "paid"}, {"id": "T1"}, {"id": "T1", "status": 3}],
    )
    def test_missing_id_or_status(self, data: dict) -> None:
        with pytest.raises(ValueError, match="without id/status"):
            RawRecord.from_dict(data)

    def test_equality_ignores_raw_data(self) -> None:
        a = RawRecord.from_dict({"id": "T1", "status": "paid", "x": 1})
        b = RawRecord.from_dict({"id": "T1", "status": "paid", "x": 2})
        assert a == b
