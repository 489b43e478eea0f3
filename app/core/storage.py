# app/core/storage.py
"""
JSON file persistence for configuration, the employee roster and payroll batches.

Layout under the data directory (NOMINA_DATA_DIR):

    config.json              legal configuration
    employees.json           {"employees": [...]}
    payrolls/<period>.json   one batch per pay period
"""

import datetime
import json
import logging
import shutil
import tempfile
import threading
from pathlib import Path
from typing import Any

from pydantic import BaseModel, ValidationError

from app.core.batch import new_batch
from app.core.config import get_data_dir
from app.core.errors import NotFoundError, StorageError
from app.core.errors import ValidationError as InputValidationError
from app.core.models import Employee, LegalConfiguration, PayrollBatch, PayType
from app.core.utils import is_valid_period_id

logger = logging.getLogger(__name__)

CONFIG_FILE = "config.json"
EMPLOYEES_FILE = "employees.json"
PAYROLLS_DIR = "payrolls"

_locks_guard = threading.Lock()
_period_locks: dict[str, threading.Lock] = {}

#: Serializes read-modify-write of employees.json.
roster_lock = threading.Lock()

#: Serializes read-modify-write of config.json.
config_lock = threading.Lock()


def period_lock(period_id: str) -> threading.Lock:
    """In-process lock for one payroll period; same object for the same id."""
    with _locks_guard:
        lock = _period_locks.get(period_id)
        if lock is None:
            lock = threading.Lock()
            _period_locks[period_id] = lock
        return lock


def config_path() -> Path:
    return get_data_dir() / CONFIG_FILE


def employees_path() -> Path:
    return get_data_dir() / EMPLOYEES_FILE


def payrolls_dir() -> Path:
    return get_data_dir() / PAYROLLS_DIR


def batch_path(period_id: str) -> Path:
    """
    Raises:
        ValidationError: If the period id could escape the payrolls directory
    """
    if not is_valid_period_id(period_id):
        raise InputValidationError(
            [("period_id", "Period id may only contain letters, digits, '-' and '_' (max 40)")]
        )
    return payrolls_dir() / f"{period_id}.json"


def _load_json(file_path: Path) -> list[Any] | dict[str, Any]:
    """
    Read and parse JSON with robust error handling.
    Args:
        file_path: Path to the JSON file
    Returns:
        Parsed JSON data as list or dict
    Raises:
        StorageError: If file cannot be read or JSON is invalid
    """
    try:
        raw = file_path.read_text(encoding="utf-8")
    except OSError as e:
        logger.exception("Failed to read JSON file %s", file_path)
        raise StorageError(f"Could not read JSON file {file_path}: {e}") from e

    try:
        return json.loads(raw)
    except json.JSONDecodeError as e:
        logger.exception("Invalid JSON in file %s", file_path)
        raise StorageError(f"Invalid JSON in file {file_path}: {e}") from e


def write_json_safely(file_path: Path, data: dict | list) -> None:
    """
    Write JSON using an atomic write pattern.
    Writes to a temp file in the same directory first, then replaces the original.

    Raises:
        StorageError: If the file cannot be written
    """
    try:
        file_path.parent.mkdir(parents=True, exist_ok=True)
        with tempfile.NamedTemporaryFile(
            mode="w", encoding="utf-8", dir=file_path.parent, delete=False, suffix=".tmp"
        ) as tmp_file:
            json.dump(data, tmp_file, indent=2, ensure_ascii=False)
            tmp_path = tmp_file.name
        shutil.move(tmp_path, file_path)
    except OSError as e:
        logger.exception("Failed to write JSON file %s", file_path)
        raise StorageError(f"Could not write JSON file {file_path}: {e}") from e


def _dump(model: BaseModel) -> dict:
    return model.model_dump(mode="json")


def load_configuration() -> LegalConfiguration:
    """
    Load the legal configuration, writing the defaults on first use.
    Raises:
        StorageError: If file cannot be loaded or parsed
    """
    file_path = config_path()
    if not file_path.exists():
        config = LegalConfiguration()
        save_configuration(config)
        logger.info("Created default configuration at %s", file_path)
        return config

    data = _load_json(file_path)
    try:
        if not isinstance(data, dict):
            raise TypeError("Expected configuration dict")
        config = LegalConfiguration(**data)
    except (TypeError, ValidationError) as e:
        logger.exception("Failed to parse configuration from %s", file_path)
        raise StorageError(f"Could not parse configuration from {file_path}: {e}") from e
    return config


def save_configuration(config: LegalConfiguration) -> None:
    write_json_safely(config_path(), _dump(config))


def load_employees() -> list[Employee]:
    """
    Load the employee roster; an absent file is an empty roster.
    Raises:
        StorageError: If file cannot be loaded or parsed
    """
    file_path = employees_path()
    if not file_path.exists():
        return []

    data = _load_json(file_path)
    try:
        if not isinstance(data, dict) or not isinstance(data.get("employees"), list):
            raise TypeError('Expected {"employees": [...]}')
        employees = [Employee(**item) for item in data["employees"]]
    except (TypeError, ValidationError) as e:
        logger.exception("Failed to parse employees from %s", file_path)
        raise StorageError(f"Could not parse employees from {file_path}: {e}") from e
    return employees


def save_employees(employees: list[Employee]) -> None:
    write_json_safely(employees_path(), {"employees": [_dump(e) for e in employees]})


def load_batch(period_id: str) -> PayrollBatch | None:
    """
    Load the batch of one period, or None when it was never saved.
    Raises:
        StorageError: If file cannot be loaded or parsed
    """
    file_path = batch_path(period_id)
    if not file_path.exists():
        return None

    data = _load_json(file_path)
    try:
        if not isinstance(data, dict):
            raise TypeError("Expected payroll batch dict")
        batch = PayrollBatch(**data)
    except (TypeError, ValidationError) as e:
        logger.exception("Failed to parse payroll batch from %s", file_path)
        raise StorageError(f"Could not parse payroll batch from {file_path}: {e}") from e
    return batch


def get_batch(period_id: str) -> PayrollBatch:
    """
    Raises:
        NotFoundError: If no batch is stored for the period
    """
    batch = load_batch(period_id)
    if batch is None:
        raise NotFoundError(f"Payroll {period_id} not found")
    return batch


def save_batch(period_id: str, batch: PayrollBatch) -> None:
    write_json_safely(batch_path(period_id), _dump(batch))
    logger.debug("Saved payroll %s (%d settlements)", period_id, len(batch.settlements))


def _last_activity(batch: PayrollBatch) -> str:
    stamp = batch.processed_at or batch.created_at
    return stamp.isoformat() if stamp else ""


def list_batches() -> list[PayrollBatch]:
    """All stored batches, newest processed first."""
    directory = payrolls_dir()
    if not directory.exists():
        return []

    batches = []
    for file_path in sorted(directory.glob("*.json")):
        if not is_valid_period_id(file_path.stem):
            logger.warning("Ignoring unexpected file %s", file_path)
            continue
        batch = load_batch(file_path.stem)
        if batch is not None:
            batches.append(batch)

    batches.sort(key=_last_activity, reverse=True)
    return batches


def initialize_data_files() -> None:
    """Create the data directories, default configuration and an empty roster when missing."""
    payrolls_dir().mkdir(parents=True, exist_ok=True)
    if not config_path().exists():
        save_configuration(LegalConfiguration())
        logger.info("Wrote default configuration to %s", config_path())
    if not employees_path().exists():
        save_employees([])
        logger.info("Wrote empty roster to %s", employees_path())


def validate_data_files() -> None:
    """
    Parse every data file once so broken files are reported at startup.
    Raises:
        StorageError: On the first file that cannot be loaded
    """
    load_configuration()
    employees = load_employees()
    batches = list_batches()
    logger.info(
        "Data files validated",
        extra={"extra_fields": {"employees": len(employees), "payrolls": len(batches)}},
    )


def load_or_create_batch(
    period_id: str,
    pay_type: PayType = PayType.WEEKLY,
    period_start: datetime.date | None = None,
    period_end: datetime.date | None = None,
) -> PayrollBatch:
    """Stored batch of the period, or a fresh DRAFT shell (not saved yet)."""
    batch = load_batch(period_id)
    if batch is None:
        return new_batch(period_id, pay_type, period_start, period_end)
    if batch.period_start is None and period_start is not None:
        batch.period_start = period_start
    if batch.period_end is None and period_end is not None:
        batch.period_end = period_end
    return batch
