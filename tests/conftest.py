from __future__ import annotations

import logging
from pathlib import Path
from typing import Iterator

import pytest

from tests._fixtures.fake_tools import FakeRunner
from tests._fixtures.wit_builder import WitTreeBuilder


@pytest.fixture
def wit_tree(tmp_path: Path) -> WitTreeBuilder:
    """Provide a WIT project builder rooted at the pytest tmp_path."""
    return WitTreeBuilder(tmp_path)


@pytest.fixture
def fake_runner() -> FakeRunner:
    return FakeRunner()


@pytest.fixture(autouse=True)
def _reset_witpack_logger() -> Iterator[None]:
    yield
    logger = logging.getLogger("witpack")
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()
    logger.propagate = True
    logger.setLevel(logging.NOTSET)
