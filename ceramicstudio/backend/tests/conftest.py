import logging

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from app.db.session import Base
from app.db import models
from app.services.events import EventSink


class RecordingEventSink(EventSink):
    def __init__(self):
        self.events = []

    def emit(self, event, level=logging.INFO, **fields):
        self.events.append((event, level, fields))

    def names(self):
        return [name for name, _, _ in self.events]


@pytest.fixture()
def db_session():
    engine = create_engine("sqlite+pysqlite:///:memory:", future=True)
    TestingSessionLocal = sessionmaker(bind=engine, autoflush=False, autocommit=False, expire_on_commit=False)
    Base.metadata.create_all(bind=engine)
    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture()
def events():
    return RecordingEventSink()
