"""
Aarohi Task Management System - Test Configuration and Fixtures
"""
import os
from datetime import datetime

import pytest
from faker import Faker
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

# Set testing environment before the application reads its settings
os.environ['DATABASE_URL'] = 'sqlite://'
os.environ['SECRET_KEY'] = 'test-secret-key-for-testing-only'
os.environ['RATE_LIMIT_ENABLED'] = 'false'
os.environ['SEED_DEFAULT_ADMIN'] = 'false'

from tms.main import app  # noqa: E402
from tms.database import Base, get_db  # noqa: E402
from tms.auth_utils import create_access_token, get_password_hash  # noqa: E402
from tms.models import Complaint, Priority, Role, Status, User  # noqa: E402

fake = Faker()

TEST_PASSWORD = 'testpassword123'

# In-memory database shared by every connection of a test
test_engine = create_engine(
    'sqlite://',
    connect_args={'check_same_thread': False},
    poolclass=StaticPool,
)
TestSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=test_engine)


@pytest.fixture(scope='function')
def db_session():
    """Create a fresh database for each test"""
    Base.metadata.create_all(bind=test_engine)
    session = TestSessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=test_engine)


@pytest.fixture
def client(db_session):
    """Create test client with database override"""
    def override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = override_get_db
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


def make_user(db_session, role=Role.STAFF, **overrides) -> User:
    values = {
        'username': f"{fake.user_name()}{fake.random_int(100, 999)}"[:50],
        'email': fake.unique.email(),
        'full_name': fake.name()[:100],
        'mobile_number': fake.unique.numerify('9#########'),
        'hashed_password': get_password_hash(TEST_PASSWORD),
        'role': role,
        'is_active': True,
    }
    values.update(overrides)
    user = User(**values)
    db_session.add(user)
    db_session.commit()
    db_session.refresh(user)
    return user


def make_complaint(db_session, **overrides) -> Complaint:
    now = datetime.now()
    values = {
        'customer_name': fake.name()[:100],
        'mobile_number': fake.unique.numerify('8#########'),
        'address': fake.street_address(),
        'city': fake.city()[:50],
        'state': fake.state()[:50],
        'machine_name_model': 'Usha Janome Dream Stitch',
        'problem_description': 'Needle breaks while stitching denim',
        'status': Status.OPEN,
        'priority': Priority.MEDIUM,
        'created_date': now,
        'updated_date': now,
    }
    values.update(overrides)
    complaint = Complaint(**values)
    db_session.add(complaint)
    db_session.commit()
    db_session.refresh(complaint)
    return complaint


def headers_for(user: User) -> dict:
    token = create_access_token({'sub': user.username, 'uid': user.id, 'role': user.role.value})
    return {'Authorization': f'Bearer {token}'}


def complaint_payload(**overrides) -> dict:
    payload = {
        'customer_name': fake.name()[:100],
        'mobile_number': fake.unique.numerify('7#########'),
        'email': fake.email(),
        'address': fake.street_address(),
        'city': 'Pune',
        'state': 'Maharashtra',
        'machine_name_model': 'Singer Heavy Duty 4423',
        'problem_description': 'Bobbin thread keeps tangling',
        'under_warranty': True,
        'machine_purchase_date': '2023-08-14',
        'complaint_type': 'MACHINE_REPAIR',
    }
    payload.update(overrides)
    return payload


@pytest.fixture
def admin_user(db_session) -> User:
    return make_user(db_session, role=Role.ADMIN)


@pytest.fixture
def staff_user(db_session) -> User:
    return make_user(db_session, role=Role.STAFF)


@pytest.fixture
def other_staff(db_session) -> User:
    return make_user(db_session, role=Role.STAFF)


@pytest.fixture
def admin_headers(admin_user) -> dict:
    return headers_for(admin_user)


@pytest.fixture
def staff_headers(staff_user) -> dict:
    return headers_for(staff_user)


@pytest.fixture
def other_staff_headers(other_staff) -> dict:
    return headers_for(other_staff)
