"""
Shared fixtures for twig unit tests.
"""

import itertools
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Callable

import pytest

from twig.config import Config
from twig.repository import Repository

START_TIME = datetime(2024, 3, 1, 9, 30, tzinfo=timezone.utc)


def make_clock(start: datetime = START_TIME) -> Callable[[], datetime]:
    """Clock that advances one minute per call, so every commit id differs."""
    ticks = itertools.count()
    return lambda: start + timedelta(minutes=next(ticks))


@pytest.fixture
def clock() -> Callable[[], datetime]:
    return make_clock()


@pytest.fixture
def repo(tmp_path: Path, clock: Callable[[], datetime]) -> Repository:
    """An initialized repository in a fresh temporary directory."""
    repository = Repository(tmp_path, config=Config(), clock=clock)
    repository.init()
    return repository
