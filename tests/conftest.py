"""
Shared fixtures.

Each test gets its own file-backed SQLite database (aiosqlite) seeded with
two schools, an academic year and classes per school, users of every role
and one student per school.
"""
import os

os.environ.setdefault("JWT_SECRET", "test-secret")
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")

from datetime import date, timedelta
from decimal import Decimal
from types import SimpleNamespace

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from database import build_engine, build_session_factory, get_session, init_db
from dependencies import create_access_token
from main import app
from models import AcademicYear, Role, School, SchoolClass, Student, User
from schemas import InvoiceCreate, InvoiceItemCreate, PaymentCreate
from services import Caller, InvoiceService, PaymentService


def caller_for(user: User) -> Caller:
    return Caller(user_id=user.id, role=user.role, school_id=user.school_id, email=user.email)


def auth_headers(user: User) -> dict:
    return {"Authorization": f"Bearer {create_access_token(user)}"}


def invoice_payload(student_id: int, *amounts, discount="0", tax="0", due_in_days=30) -> InvoiceCreate:
    return InvoiceCreate(
        student_id=student_id,
        due_date=date.today() + timedelta(days=due_in_days),
        items=[
            InvoiceItemCreate(description=f"Fee {i + 1}", unit_price=Decimal(amount))
            for i, amount in enumerate(amounts or ("1000",))
        ],
        discount=Decimal(discount),
        tax=Decimal(tax),
    )


def payment_payload(invoice_id: int, amount: str, method: str = "CASH") -> PaymentCreate:
    return PaymentCreate(invoice_id=invoice_id, amount=Decimal(amount), payment_method=method)


@pytest_asyncio.fixture
async def engine(tmp_path):
    engine = build_engine(f"sqlite+aiosqlite:///{tmp_path / 'finance.db'}")
    await init_db(engine)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine):
    return build_session_factory(engine)


@pytest_asyncio.fixture
async def db(session_factory):
    async with session_factory() as session:
        yield session


@pytest_asyncio.fixture
async def world(session_factory):
    """Two schools (north, south), their classes and years, and their people."""
    async with session_factory() as session:
        north = School(name="North High", code="NORTH")
        south = School(name="South High", code="SOUTH")
        session.add_all([north, south])
        await session.flush()

        north_year = AcademicYear(school_id=north.id, name="2026/2027", is_current=True)
        south_year = AcademicYear(school_id=south.id, name="2026/2027", is_current=True)
        grade_5 = SchoolClass(school_id=north.id, name="Grade 5")
        grade_6 = SchoolClass(school_id=north.id, name="Grade 6")
        south_class = SchoolClass(school_id=south.id, name="Form 1")
        session.add_all([north_year, south_year, grade_5, grade_6, south_class])
        await session.flush()

        def user(email, role, school, first="Test", last="User"):
            return User(
                email=email,
                first_name=first,
                last_name=last,
                role=role,
                school_id=school.id if school else None,
            )

        super_admin = user("root@example.com", Role.SUPER_ADMIN, None)
        north_admin = user("admin@north.example.com", Role.SCHOOL_ADMIN, north)
        south_admin = user("admin@south.example.com", Role.SCHOOL_ADMIN, south)
        north_teacher = user("teacher@north.example.com", Role.TEACHER, north)
        north_parent = user("parent@north.example.com", Role.PARENT, north)
        orphan_admin = user("orphan@example.com", Role.SCHOOL_ADMIN, None)
        north_pupil = user("ada@north.example.com", Role.STUDENT, north, "Ada", "Lovelace")
        south_pupil = user("alan@south.example.com", Role.STUDENT, south, "Alan", "Turing")
        session.add_all([
            super_admin, north_admin, south_admin, north_teacher,
            north_parent, orphan_admin, north_pupil, south_pupil,
        ])
        await session.flush()

        north_student = Student(
            school_id=north.id, user_id=north_pupil.id, admission_number="N-001", current_class_id=grade_5.id
        )
        south_student = Student(school_id=south.id, user_id=south_pupil.id, admission_number="S-001")
        session.add_all([north_student, south_student])
        await session.commit()

    return SimpleNamespace(
        north=north,
        south=south,
        north_year=north_year,
        south_year=south_year,
        grade_5=grade_5,
        grade_6=grade_6,
        south_class=south_class,
        super_admin=super_admin,
        north_admin=north_admin,
        south_admin=south_admin,
        north_teacher=north_teacher,
        north_parent=north_parent,
        orphan_admin=orphan_admin,
        north_pupil=north_pupil,
        south_pupil=south_pupil,
        north_student=north_student,
        south_student=south_student,
    )


@pytest.fixture
def north_admin(world):
    return caller_for(world.north_admin)


@pytest.fixture
def south_admin(world):
    return caller_for(world.south_admin)


@pytest.fixture
def super_admin(world):
    return caller_for(world.super_admin)


@pytest_asyncio.fixture
async def north_invoice(db, world, north_admin):
    """A fresh 1000.00 invoice for the north student."""
    return await InvoiceService(db).create_invoice(invoice_payload(world.north_student.id, "1000"), north_admin)


@pytest.fixture
def payments(db):
    return PaymentService(db)


@pytest_asyncio.fixture
async def client(session_factory):
    async def override_get_session():
        async with session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    app.dependency_overrides[get_session] = override_get_session
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()
