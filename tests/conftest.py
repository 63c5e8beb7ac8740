"""
Shared test fixtures for the crlset test suite.

CRLSet and container inputs are built in-memory (see tests/builders.py);
nothing here touches the network.
"""

from __future__ import annotations

from collections.abc import Iterator
from pathlib import Path

import pytest
import structlog

from tests.builders import scenario_crlset


@pytest.fixture(autouse=True)
def _reset_structlog() -> Iterator[None]:
    """
    Undo any structlog configuration a test performed.

    CLI tests configure structlog with the runner's temporary stderr; later
    tests must not log into that closed stream.
    """
    yield
    structlog.reset_defaults()


@pytest.fixture()
def scenario_bytes() -> bytes:
    return scenario_crlset()


@pytest.fixture()
def scenario_file(tmp_path: Path, scenario_bytes: bytes) -> Path:
    path = tmp_path / "crl-set"
    path.write_bytes(scenario_bytes)
    return path
