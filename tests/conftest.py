"""Shared fixtures: an in-memory shared document and an in-memory local cache."""

import sys
import os
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from app.database import create_tables
from app.services.local_cache import LocalCache
from app.services.sync_engine import SyncEngine
from app.session import SessionConfig
from tests.factories import NETWORK_ID, FakeRemote


@pytest.fixture
def cache():
    db_engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    create_tables(bind=db_engine)
    return LocalCache(sessionmaker(bind=db_engine, autoflush=False))


@pytest.fixture
def remote():
    return FakeRemote()


@pytest.fixture
def engine(remote, cache):
    return SyncEngine(SessionConfig(network_id=NETWORK_ID), remote.client(), cache, interval=0.01)
