"""Shared fixtures: a SQLite database per test, settings, and seeded data"""

import itertools
from datetime import timedelta
from decimal import Decimal
from uuid import uuid4

import pytest

from events_api.application.services.token_service import TokenService
from events_api.core.clock import utcnow
from events_api.core.config import Settings
from events_api.core.security import PasswordHasher
from events_api.db.database import build_engine, build_session_factory
from events_api.db.models import Base
from events_api.domain.entities.event import Event
from events_api.domain.entities.user import User
from events_api.domain.enums import EventCategory, EventStatus, UserRole
from events_api.domain.policies import Subject
from events_api.domain.value_objects.email import Email
from events_api.domain.value_objects.entity_ids import VenueId
from events_api.domain.value_objects.money import Money
from events_api.infrastructure.orm import VenueModel
from events_api.infrastructure.repositories.unit_of_work_impl import UnitOfWorkImpl


JWT_SECRET = "test-signing-key-0123456789-abcdefghijklmnop"
PASSWORD = "correct-horse-battery"


def make_settings(database_url: str, **overrides) -> Settings:
    values = {
        "DATABASE_URL": database_url,
        "JWT_SECRET": JWT_SECRET,
        "BCRYPT_ROUNDS": 10,
        "RATE_LIMIT_ENABLED": False,
        "LOG_LEVEL": "WARNING",
    }
    values.update(overrides)
    return Settings(_env_file=None, **values)


@pytest.fixture
def database_url(tmp_path) -> str:
    return f"sqlite:///{tmp_path / 'events.db'}"


@pytest.fixture
def settings(database_url) -> Settings:
    return make_settings(database_url)


@pytest.fixture
def settings_factory(database_url):
    def factory(**overrides) -> Settings:
        return make_settings(database_url, **overrides)

    return factory


@pytest.fixture
def engine(settings):
    engine = build_engine(settings)
    Base.metadata.create_all(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return build_session_factory(engine)


@pytest.fixture
def make_uow(session_factory):
    """Factory for units of work, each on its own session"""
    sessions = []

    def factory() -> UnitOfWorkImpl:
        session = session_factory()
        sessions.append(session)
        return UnitOfWorkImpl(session)

    yield factory
    for session in sessions:
        session.close()


@pytest.fixture
def uow(make_uow) -> UnitOfWorkImpl:
    return make_uow()


@pytest.fixture(scope="session")
def password_hasher() -> PasswordHasher:
    return PasswordHasher(rounds=10)


@pytest.fixture(scope="session")
def password() -> str:
    return PASSWORD


@pytest.fixture(scope="session")
def password_hash(password_hasher) -> str:
    return password_hasher.hash(PASSWORD)


@pytest.fixture
def token_service(settings, uow) -> TokenService:
    return TokenService(settings, uow)


@pytest.fixture
def user_factory(make_uow, password_hash):
    counter = itertools.count(1)

    async def factory(role: UserRole = UserRole.USER, email: str = None) -> User:
        n = next(counter)
        user = User.create(
            email=Email(email or f"person{n}@example.com"),
            hashed_password=password_hash,
            first_name="Test",
            last_name=f"Person{n}",
            role=role,
        )
        unit_of_work = make_uow()
        async with unit_of_work:
            await unit_of_work.users.add(user)
            await unit_of_work.commit()
        return user

    return factory


@pytest.fixture
async def users(user_factory) -> dict:
    return {
        "user": await user_factory(UserRole.USER, "alice@example.com"),
        "other_user": await user_factory(UserRole.USER, "bob@example.com"),
        "organizer": await user_factory(UserRole.ORGANIZER, "olga@example.com"),
        "other_organizer": await user_factory(UserRole.ORGANIZER, "oscar@example.com"),
        "admin": await user_factory(UserRole.ADMIN, "root@example.com"),
    }


@pytest.fixture
def subjects(users) -> dict:
    return {name: Subject(id=user.id, role=user.role) for name, user in users.items()}


@pytest.fixture
def venue(session_factory) -> VenueId:
    venue_id = uuid4()
    session = session_factory()
    try:
        session.add(VenueModel(
            id=venue_id,
            name="Main Hall",
            slug="main-hall",
            address="1 Example Street",
            city="Berlin",
            country="Germany",
            capacity=500,
        ))
        session.commit()
    finally:
        session.close()
    return VenueId(venue_id)


@pytest.fixture
def event_factory(make_uow, venue, users):
    counter = itertools.count(1)

    async def factory(
        capacity: int = 10,
        price: str = "25.00",
        status: EventStatus = EventStatus.PUBLISHED,
        starts_in: timedelta = timedelta(days=30),
        organizer: User = None,
    ) -> Event:
        n = next(counter)
        start = utcnow() + starts_in
        event = Event.create(
            slug=f"test-event-{n}",
            title=f"Test event {n}",
            description="An event created by the test-suite",
            category=EventCategory.MUSIC,
            start_date=start,
            end_date=start + timedelta(hours=3),
            price=Money(Decimal(price)),
            capacity=capacity,
            organizer_id=(organizer or users["organizer"]).id,
            venue_id=venue,
        )
        if status in (EventStatus.PUBLISHED, EventStatus.COMPLETED):
            event.publish()
        if status == EventStatus.COMPLETED:
            event.complete()
        if status == EventStatus.CANCELLED:
            event.cancel()
        event.get_events()

        unit_of_work = make_uow()
        async with unit_of_work:
            await unit_of_work.events.add(event)
            await unit_of_work.commit()
        return event

    return factory


@pytest.fixture
def reload_event(make_uow):
    async def reload(event: Event) -> Event:
        return await make_uow().events.get_by_id(event.id)

    return reload


class FakeRedis:
    """The handful of redis.asyncio commands the rate limiter uses"""

    def __init__(self):
        self.counts = {}
        self.expiries = {}
        self.closed = False

    async def incr(self, key):
        self.counts[key] = self.counts.get(key, 0) + 1
        return self.counts[key]

    async def expire(self, key, seconds):
        self.expiries[key] = seconds
        return True

    async def ttl(self, key):
        return self.expiries.get(key, -1)

    async def delete(self, key):
        self.counts.pop(key, None)
        self.expiries.pop(key, None)

    async def ping(self):
        return True

    async def aclose(self):
        self.closed = True


@pytest.fixture
def fake_redis() -> FakeRedis:
    return FakeRedis()
