#!/usr/bin/env python
# -*- coding: utf-8 -*-

"""
    tests.conftest
    ~~~~~~~~~~~~~~

    Shared fixtures: an in-memory database, a pinned clock and an engine
    wired to both.

    :copyright: (c) 2015 by Authors.
    :license: see LICENSE for more details.
"""

import os

os.environ.setdefault("TESTING", "true")

import datetime
import pytest
from sqlalchemy.orm import sessionmaker

from circulation.core.clock import FixedClock
from circulation.core.db import Base, make_engine
from circulation.core.engine import LoanLifecycleEngine
from circulation.core.locks import EntityLocks
from circulation.core.notifications import MemoryNotifier
from circulation.core.policy import LoanPolicy

TODAY = datetime.date(2025, 1, 1)


@pytest.fixture
def db_session():
    engine = make_engine("sqlite://", echo=False)
    Base.metadata.create_all(engine)
    SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(engine)


@pytest.fixture
def clock():
    return FixedClock(TODAY)


@pytest.fixture
def notifier():
    return MemoryNotifier()


@pytest.fixture
def policy():
    return LoanPolicy(fine_per_day="2.0", max_books_by_role={"faculty": 10})


@pytest.fixture
def engine(db_session, policy, clock, notifier):
    return LoanLifecycleEngine(
        db=db_session, policy=policy, clock=clock,
        notifier=notifier, locks=EntityLocks())


@pytest.fixture
def make_borrower(engine):
    counter = iter(range(1, 1000))

    def _make(role="student"):
        n = next(counter)
        borrower = engine.directory.add(f"Borrower {n}", f"borrower{n}@college.edu", role)
        engine.db.commit()
        return borrower
    return _make


@pytest.fixture
def make_title(engine):
    def _make(copies=1, title="Introduction to Algorithms"):
        book = engine.inventory.add_title(title, author="Cormen", copies=copies)
        engine.db.commit()
        return book
    return _make
