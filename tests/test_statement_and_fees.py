"""
Tests for the fee statement rollup and the fee structure catalogue.
"""
from decimal import Decimal

import pytest

from exceptions import NotFoundError, ValidationError
from models import FeeFrequency, InvoiceStatus
from schemas import FeeStructureCreate, FeeStructureUpdate
from services import FeeStatementService, FeeStructureService, InvoiceService

from conftest import caller_for, invoice_payload, payment_payload


class TestFeeStatement:

    @pytest.mark.asyncio
    async def test_statement_sums_live_invoices(self, db, world, north_admin, payments):
        invoices = InvoiceService(db)
        first = await invoices.create_invoice(invoice_payload(world.north_student.id, "1000"), north_admin)
        second = await invoices.create_invoice(invoice_payload(world.north_student.id, "250.50"), north_admin)
        dropped = await invoices.create_invoice(invoice_payload(world.north_student.id, "75"), north_admin)
        await payments.create_payment(payment_payload(first.id, "400"), north_admin)
        await invoices.delete_invoice(dropped.id, north_admin)

        statement = await FeeStatementService(db).get_student_fee_statement(world.north_student.id, north_admin)

        assert statement["student"] == {
            "id": world.north_student.id,
            "admission_number": "N-001",
            "name": "Ada Lovelace",
            "email": "ada@north.example.com",
            "class_name": "Grade 5",
        }
        assert {line["invoice_number"] for line in statement["invoices"]} == {first.invoice_number, second.invoice_number}
        assert statement["summary"] == {
            "total_due": Decimal("1250.50"),
            "total_paid": Decimal("400.00"),
            "current_balance": Decimal("850.50"),
        }
        by_number = {line["invoice_number"]: line for line in statement["invoices"]}
        assert by_number[first.invoice_number]["balance"] == Decimal("600.00")
        assert by_number[first.invoice_number]["status"] == InvoiceStatus.PARTIAL

    @pytest.mark.asyncio
    async def test_student_without_invoices_has_zero_totals(self, db, world, north_admin):
        statement = await FeeStatementService(db).get_student_fee_statement(world.north_student.id, north_admin)
        assert statement["invoices"] == []
        assert statement["summary"]["current_balance"] == Decimal("0.00")

    @pytest.mark.asyncio
    async def test_statement_is_tenant_scoped(self, db, world, north_admin, super_admin):
        service = FeeStatementService(db)
        with pytest.raises(NotFoundError):
            await service.get_student_fee_statement(world.south_student.id, north_admin)
        statement = await service.get_student_fee_statement(world.south_student.id, super_admin)
        assert statement["student"]["name"] == "Alan Turing"
        assert statement["student"]["class_name"] is None


def fee(name, amount, year, **extra):
    return FeeStructureCreate(name=name, amount=Decimal(amount), academic_year_id=year.id, **extra)


class TestFeeStructures:

    @pytest.mark.asyncio
    async def test_admin_creates_in_own_school(self, db, north_admin, south_admin, world):
        service = FeeStructureService(db)
        created = await service.create_fee_structure(
            fee("Tuition", "1500", world.north_year, frequency=FeeFrequency.QUARTERLY, class_id=world.grade_5.id),
            north_admin,
        )
        assert created.school_id == world.north.id
        assert created.amount == Decimal("1500.00")
        assert created.created_at is not None
        assert created.academic_year_name == "2026/2027"
        assert created.class_name == "Grade 5"

        _, south_total = await service.list_fee_structures(south_admin)
        assert south_total == 0
        with pytest.raises(NotFoundError):
            await service.get_fee_structure(created.id, south_admin)

    @pytest.mark.asyncio
    async def test_year_and_class_must_belong_to_the_school(self, db, north_admin, world):
        service = FeeStructureService(db)
        with pytest.raises(ValidationError):
            await service.create_fee_structure(fee("Bus", "20", world.south_year), north_admin)
        with pytest.raises(ValidationError):
            await service.create_fee_structure(fee("Bus", "20", world.north_year, class_id=world.south_class.id), north_admin)
        _, total = await service.list_fee_structures(north_admin)
        assert total == 0

    @pytest.mark.asyncio
    async def test_super_admin_must_name_a_school(self, db, super_admin, world):
        service = FeeStructureService(db)
        with pytest.raises(ValidationError):
            await service.create_fee_structure(fee("Bus", "20", world.south_year), super_admin)
        with pytest.raises(NotFoundError):
            await service.create_fee_structure(fee("Bus", "20", world.south_year, school_id=424242), super_admin)
        created = await service.create_fee_structure(fee("Bus", "20", world.south_year, school_id=world.south.id), super_admin)
        assert created.school_id == world.south.id

    @pytest.mark.asyncio
    async def test_admin_without_school_cannot_create(self, db, world):
        with pytest.raises(ValidationError):
            await FeeStructureService(db).create_fee_structure(
                fee("Bus", "20", world.north_year), caller_for(world.orphan_admin)
            )

    @pytest.mark.asyncio
    async def test_update_search_and_delete(self, db, north_admin, world):
        service = FeeStructureService(db)
        tuition = await service.create_fee_structure(fee("Tuition", "900", world.north_year), north_admin)
        await service.create_fee_structure(fee("Library", "30", world.north_year), north_admin)

        updated = await service.update_fee_structure(tuition.id, FeeStructureUpdate(amount=Decimal("950.5")), north_admin)
        assert updated.amount == Decimal("950.50")
        assert updated.name == "Tuition"

        found, total = await service.list_fee_structures(north_admin, search="tui")
        assert total == 1
        assert found[0].id == tuition.id

        await service.delete_fee_structure(tuition.id, north_admin)
        with pytest.raises(NotFoundError):
            await service.get_fee_structure(tuition.id, north_admin)
        _, remaining = await service.list_fee_structures(north_admin)
        assert remaining == 1

    @pytest.mark.asyncio
    async def test_update_moves_fee_to_another_class(self, db, north_admin, world):
        service = FeeStructureService(db)
        created = await service.create_fee_structure(fee("Trip", "45", world.north_year, class_id=world.grade_5.id), north_admin)

        updated = await service.update_fee_structure(created.id, FeeStructureUpdate(class_id=world.grade_6.id), north_admin)
        assert updated.class_id == world.grade_6.id
        assert updated.class_name == "Grade 6"

        with pytest.raises(ValidationError):
            await service.update_fee_structure(created.id, FeeStructureUpdate(academic_year_id=None), north_admin)

    @pytest.mark.asyncio
    async def test_list_filters_by_class_and_year(self, db, north_admin, world):
        service = FeeStructureService(db)
        await service.create_fee_structure(fee("Tuition", "900", world.north_year, class_id=world.grade_5.id), north_admin)
        await service.create_fee_structure(fee("Tuition", "950", world.north_year, class_id=world.grade_6.id), north_admin)
        await service.create_fee_structure(fee("Library", "30", world.north_year), north_admin)

        grade_5, total = await service.list_fee_structures(north_admin, class_id=world.grade_5.id)
        assert total == 1
        assert grade_5[0].amount == Decimal("900.00")

        _, this_year = await service.list_fee_structures(north_admin, academic_year_id=world.north_year.id)
        assert this_year == 3
        _, other_year = await service.list_fee_structures(north_admin, academic_year_id=world.south_year.id)
        assert other_year == 0

    @pytest.mark.asyncio
    async def test_fees_for_class_include_school_wide_ones(self, db, north_admin, south_admin, super_admin, world):
        service = FeeStructureService(db)
        await service.create_fee_structure(fee("Tuition", "900", world.north_year, class_id=world.grade_5.id), north_admin)
        await service.create_fee_structure(fee("Tuition", "950", world.north_year, class_id=world.grade_6.id), north_admin)
        await service.create_fee_structure(fee("Library", "30", world.north_year), north_admin)
        await service.create_fee_structure(fee("Bus", "20", world.north_year), north_admin)
        dropped = await service.create_fee_structure(fee("Art", "15", world.north_year), north_admin)
        await service.delete_fee_structure(dropped.id, north_admin)

        fees = await service.get_fees_for_class(world.grade_5.id, world.north_year.id, north_admin)
        assert [(f.name, f.amount) for f in fees] == [
            ("Bus", Decimal("20.00")),
            ("Library", Decimal("30.00")),
            ("Tuition", Decimal("900.00")),
        ]

        assert len(await service.get_fees_for_class(world.grade_5.id, world.north_year.id, super_admin)) == 3
        assert await service.get_fees_for_class(world.grade_5.id, world.north_year.id, south_admin) == []
        assert await service.get_fees_for_class(world.grade_5.id, world.south_year.id, north_admin) == []
