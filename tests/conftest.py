"""
Pytest configuration and shared fixtures for testing.

Provides reusable test fixtures:
- data_dir: Empty temporary data directory (NOMINA_DATA_DIR points at it)
- test_client: FastAPI TestClient running against data_dir
- reference_config: Legal configuration of the reference scenario
- employee / high_earner: Roster entries used across engine and batch tests
"""

import datetime
import os
import sys
import tempfile
from pathlib import Path

import pytest
from fastapi.testclient import TestClient

# Add project root to path for imports
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

# Keep log files out of the working tree; app.main configures logging on import
os.environ.setdefault("LOG_DIR", tempfile.mkdtemp(prefix="nomina-logs-"))
os.environ.pop("PRODUCTION", None)

# ruff: noqa: E402
from app.core.models import Employee, LegalConfiguration
from app.main import app


@pytest.fixture(scope="function")
def data_dir(tmp_path, monkeypatch):
    """
    Point the storage layer at a fresh temporary directory.

    Yields:
        Path: The data directory (initially empty)
    """
    directory = tmp_path / "data"
    directory.mkdir()
    monkeypatch.setenv("NOMINA_DATA_DIR", str(directory))
    yield directory


@pytest.fixture(scope="function")
def test_client(data_dir):
    """
    FastAPI TestClient with lifespan, so data files are initialized.

    Yields:
        TestClient: FastAPI test client for API testing
    """
    with TestClient(app) as client:
        yield client


@pytest.fixture
def reference_config():
    """Configuration of the reference scenario: 1,000,000 / 117,172 / 4% / 4% / 240."""
    return LegalConfiguration(
        minimum_wage=1_000_000,
        transport_subsidy=117_172,
        health_pct=4,
        pension_pct=4,
        hourly_divisor=240,
        year=2026,
    )


@pytest.fixture
def employee():
    """Minimum-wage employee on a savings account."""
    return Employee(
        id="1001",
        full_name="ANA GOMEZ",
        bank_account="123-456",
        base_salary=1_000_000,
        created_at=datetime.datetime(2026, 1, 5, tzinfo=datetime.timezone.utc),
    )


@pytest.fixture
def high_earner():
    """Stored salary above two minimum wages, flagged to use the statutory minimum."""
    return Employee(
        id="2002",
        full_name="CARLOS RUIZ",
        bank_account="987-654",
        base_salary=3_000_000,
        uses_statutory_minimum=True,
    )
