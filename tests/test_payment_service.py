"""
Tests for PaymentService: balance updates, status transitions, rejected
payments leaving no trace, tenant isolation and concurrent payments.
"""
import asyncio
from datetime import date, timedelta
from decimal import Decimal

import pytest
from sqlalchemy import func, select, text

from exceptions import NotFoundError, ValidationError
from models import InvoiceStatus, Payment, PaymentMethod
from services import InvoiceService, PaymentService

from conftest import invoice_payload, payment_payload


async def payment_count(db) -> int:
    return await db.scalar(select(func.count(Payment.id)))


class TestCreatePayment:

    @pytest.mark.asyncio
    async def test_full_payment_settles_invoice(self, db, north_invoice, north_admin, payments):
        payment = await payments.create_payment(payment_payload(north_invoice.id, "1000", "BANK_TRANSFER"), north_admin)

        assert payment.id is not None
        assert payment.payment_number.startswith("PAY-")
        assert payment.amount == Decimal("1000.00")
        assert payment.payment_method == PaymentMethod.BANK_TRANSFER
        assert payment.received_by_id == north_admin.user_id
        assert payment.payment_date is not None

        invoice = await InvoiceService(db).get_invoice(north_invoice.id, north_admin)
        assert invoice.paid_amount == Decimal("1000.00")
        assert invoice.balance_amount == Decimal("0.00")
        assert invoice.status == InvoiceStatus.PAID

    @pytest.mark.asyncio
    async def test_any_payment_on_settled_invoice_fails(self, db, north_invoice, north_admin, payments):
        await payments.create_payment(payment_payload(north_invoice.id, "1000"), north_admin)

        with pytest.raises(ValidationError) as exc:
            await payments.create_payment(payment_payload(north_invoice.id, "0.01"), north_admin)
        assert exc.value.message == "Payment amount exceeds balance. Maximum: 0.00"
        assert await payment_count(db) == 1

    @pytest.mark.asyncio
    async def test_two_payments_move_pending_partial_paid(self, db, north_invoice, north_admin, payments):
        invoices = InvoiceService(db)
        assert north_invoice.status == InvoiceStatus.PENDING

        await payments.create_payment(payment_payload(north_invoice.id, "400"), north_admin)
        invoice = await invoices.get_invoice(north_invoice.id, north_admin)
        assert invoice.status == InvoiceStatus.PARTIAL
        assert invoice.balance_amount == Decimal("600.00")

        await payments.create_payment(payment_payload(north_invoice.id, "600"), north_admin)
        invoice = await invoices.get_invoice(north_invoice.id, north_admin)
        assert invoice.status == InvoiceStatus.PAID
        assert invoice.balance_amount == Decimal("0.00")
        # newest first
        assert [p.amount for p in invoice.payments] == [Decimal("600.00"), Decimal("400.00")]

    @pytest.mark.asyncio
    async def test_overpayment_changes_nothing(self, db, north_invoice, north_admin, payments):
        # a rejected payment rolls the session back and expires loaded rows
        invoice_id = north_invoice.id
        await payments.create_payment(payment_payload(invoice_id, "500"), north_admin)

        with pytest.raises(ValidationError) as exc:
            await payments.create_payment(payment_payload(invoice_id, "500.01"), north_admin)
        assert exc.value.message == "Payment amount exceeds balance. Maximum: 500.00"

        invoice = await InvoiceService(db).get_invoice(invoice_id, north_admin)
        assert invoice.paid_amount == Decimal("500.00")
        assert invoice.balance_amount == Decimal("500.00")
        assert invoice.status == InvoiceStatus.PARTIAL
        assert await payment_count(db) == 1

    @pytest.mark.asyncio
    async def test_non_positive_amount_is_rejected(self, north_invoice, north_admin, payments):
        data = payment_payload(north_invoice.id, "1")
        data.amount = Decimal("0")
        with pytest.raises(ValidationError):
            await payments.create_payment(data, north_admin)

    @pytest.mark.asyncio
    async def test_cancelled_invoice_accepts_no_payments(self, db, north_invoice, north_admin, payments):
        await InvoiceService(db).update_invoice_status(north_invoice.id, InvoiceStatus.CANCELLED, north_admin)
        with pytest.raises(ValidationError):
            await payments.create_payment(payment_payload(north_invoice.id, "10"), north_admin)
        assert await payment_count(db) == 0

    @pytest.mark.asyncio
    async def test_other_school_cannot_pay(self, db, north_invoice, south_admin, payments):
        with pytest.raises(NotFoundError):
            await payments.create_payment(payment_payload(north_invoice.id, "10"), south_admin)
        assert await payment_count(db) == 0

    @pytest.mark.asyncio
    async def test_missing_invoice_is_not_found(self, north_admin, payments):
        with pytest.raises(NotFoundError):
            await payments.create_payment(payment_payload(999999, "10"), north_admin)

    @pytest.mark.asyncio
    async def test_conditional_update_refuses_more_than_balance(self, db, north_invoice, payments):
        assert await payments._apply_to_invoice(north_invoice.id, Decimal("1000.01")) is False
        assert await payments._apply_to_invoice(north_invoice.id, Decimal("1000.00")) is True
        await db.rollback()

    @pytest.mark.asyncio
    async def test_money_invariants_hold_after_many_payments(self, db, north_invoice, north_admin, payments):
        for amount in ("0.10", "0.20", "99.70", "250.00", "150.00"):
            await payments.create_payment(payment_payload(north_invoice.id, amount), north_admin)

        invoice = await InvoiceService(db).get_invoice(north_invoice.id, north_admin)
        paid = sum((p.amount for p in invoice.payments), Decimal("0"))
        assert invoice.paid_amount == paid == Decimal("500.00")
        assert invoice.balance_amount == invoice.total_amount - invoice.paid_amount
        assert invoice.total_amount == invoice.subtotal - invoice.discount + invoice.tax

    @pytest.mark.asyncio
    async def test_paying_the_shown_balance_after_cent_payments_settles(self, db, north_invoice, north_admin, payments):
        invoices = InvoiceService(db)
        for amount in ("0.10", "0.20"):
            await payments.create_payment(payment_payload(north_invoice.id, amount), north_admin)

        invoice = await invoices.get_invoice(north_invoice.id, north_admin)
        assert str(invoice.balance_amount) == "999.70"

        await payments.create_payment(payment_payload(north_invoice.id, str(invoice.balance_amount)), north_admin)

        invoice = await invoices.get_invoice(north_invoice.id, north_admin)
        assert invoice.status == InvoiceStatus.PAID
        assert invoice.paid_amount == Decimal("1000.00")
        assert invoice.balance_amount == Decimal("0.00")

    @pytest.mark.asyncio
    async def test_sqlite_stores_amounts_as_whole_cents(self, db, north_invoice, north_admin, payments):
        await payments.create_payment(payment_payload(north_invoice.id, "0.10"), north_admin)
        await payments.create_payment(payment_payload(north_invoice.id, "0.20"), north_admin)

        row = (await db.execute(
            text("SELECT paid_amount, balance_amount FROM invoices WHERE id = :id"), {"id": north_invoice.id}
        )).one()
        assert tuple(row) == (30, 99970)


class TestConcurrentPayments:

    @pytest.mark.asyncio
    async def test_only_one_of_two_racing_payments_succeeds(self, session_factory, world, north_admin):
        async with session_factory() as session:
            invoice = await InvoiceService(session).create_invoice(invoice_payload(world.north_student.id, "1000"), north_admin)
            await session.commit()

        async def pay():
            async with session_factory() as session:
                try:
                    await PaymentService(session).create_payment(payment_payload(invoice.id, "600"), north_admin)
                    return "ok"
                except ValidationError as exc:
                    return exc.message

        outcomes = await asyncio.gather(pay(), pay())

        assert sorted(outcomes) == ["Payment amount exceeds balance. Maximum: 400.00", "ok"]

        async with session_factory() as session:
            stored = await InvoiceService(session).get_invoice(invoice.id, north_admin)
            assert stored.paid_amount == Decimal("600.00")
            assert stored.balance_amount == Decimal("400.00")
            assert stored.status == InvoiceStatus.PARTIAL
            assert len(stored.payments) == 1


class TestReadPayments:

    @pytest.mark.asyncio
    async def test_get_payment_is_scoped(self, north_invoice, north_admin, south_admin, super_admin, payments):
        payment = await payments.create_payment(payment_payload(north_invoice.id, "10"), north_admin)

        assert (await payments.get_payment(payment.id, north_admin)).id == payment.id
        assert (await payments.get_payment(payment.id, super_admin)).id == payment.id
        with pytest.raises(NotFoundError):
            await payments.get_payment(payment.id, south_admin)

    @pytest.mark.asyncio
    async def test_list_payments_filters(self, db, world, north_invoice, north_admin, south_admin, payments):
        other = await InvoiceService(db).create_invoice(invoice_payload(world.north_student.id, "300"), north_admin)
        await payments.create_payment(payment_payload(north_invoice.id, "10"), north_admin)
        await payments.create_payment(payment_payload(north_invoice.id, "20"), north_admin)
        await payments.create_payment(payment_payload(other.id, "30"), north_admin)

        _, total = await payments.list_payments(north_admin)
        assert total == 3

        by_invoice, total = await payments.list_payments(north_admin, invoice_id=north_invoice.id)
        assert total == 2
        assert {p.invoice_id for p in by_invoice} == {north_invoice.id}

        today = date.today()
        _, in_range = await payments.list_payments(
            north_admin, date_from=today - timedelta(days=1), date_to=today + timedelta(days=1)
        )
        assert in_range == 3
        _, future = await payments.list_payments(north_admin, date_from=today + timedelta(days=2))
        assert future == 0

        _, south_total = await payments.list_payments(south_admin)
        assert south_total == 0
