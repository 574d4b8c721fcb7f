import os

os.environ["DATABASE_URL"] = "sqlite://"
os.environ["ORDER_LOCK_ENABLED"] = "false"
os.environ["CELERY_TASK_ALWAYS_EAGER"] = "true"

from decimal import Decimal
from itertools import count

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.orm import sessionmaker

import app.data.models  # noqa: F401
from app.data.database import Base, make_engine
from app.data.models import ListingModel, StudentModel, UserModel
from app.services.order_service import OrderService


class RecordingNotifier:
    def __init__(self):
        self.sent = []

    def send_order_notification(self, student_id, order_id, status):
        self.sent.append((student_id, order_id, status))


@pytest.fixture
def engine():
    engine = make_engine("sqlite://")
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(bind=engine, autocommit=False, autoflush=False)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    yield session
    session.close()


@pytest.fixture
def notifier():
    return RecordingNotifier()


@pytest.fixture
def service(db, notifier):
    return OrderService(db, notification_service=notifier)


@pytest.fixture
def make_student(db):
    seq = count(1)

    def _make(is_active=True):
        n = next(seq)
        user = UserModel(email=f"student{n}@campus.example")
        db.add(user)
        db.flush()
        student = StudentModel(user_id=user.id, is_active=is_active)
        db.add(student)
        db.commit()
        return student

    return _make


@pytest.fixture
def make_listing(db):
    def _make(owner, price="100.00", listing_type="SELL", is_available=True, title="Desk lamp"):
        listing = ListingModel(
            owner_id=owner.id,
            title=title,
            price=Decimal(price),
            listing_type=listing_type,
            is_available=is_available,
        )
        db.add(listing)
        db.commit()
        return listing

    return _make


@pytest.fixture
def seller(make_student):
    return make_student()


@pytest.fixture
def buyer(make_student):
    return make_student()


@pytest.fixture
def listing(make_listing, seller):
    return make_listing(seller)


@pytest.fixture
def client(session_factory, notifier):
    from app.api import create_app
    from app.api.routers.orders import get_service

    api = create_app()

    def _service():
        session = session_factory()
        try:
            yield OrderService(session, notification_service=notifier)
        finally:
            session.close()

    api.dependency_overrides[get_service] = _service
    with TestClient(api) as c:
        yield c
