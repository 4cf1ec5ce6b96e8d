"""
Data I/O utilities.

Provides thin helpers to feed the engine from the outside world:
- Load time entries and work-item budgets from local CSV files
- Load a JSON request file
- Load the same CSVs from Azure Blob Storage

The engine itself never does I/O; these loaders only build its inputs.

Dependencies:
- Standard library only for local files.
- For Azure Blob: `azure-storage-blob` package is required.
"""

from __future__ import annotations

import csv
import json
from datetime import datetime
from io import StringIO
from pathlib import Path
from typing import Any, Dict, Iterable, List, Mapping, Optional, TextIO

from .config import Config, get_config
from .engine import RequestValidationError, parse_datetime
from .schema import TimeEntry, WorkItemBudget

try:
    from azure.storage.blob import BlobServiceClient  # type: ignore[import]
except ImportError:  # pragma: no cover - optional dependency
    BlobServiceClient = None  # type: ignore[assignment]


# --- Row parsing -------------------------------------------------------------


def _cell(row: Mapping[str, Any], key: str) -> Optional[str]:
    val = row.get(key)
    if val is None:
        return None
    val = str(val).strip()
    return val or None


def _dt(row: Mapping[str, Any], key: str) -> Optional[datetime]:
    val = _cell(row, key)
    if val is None:
        return None
    try:
        return parse_datetime(val, key)
    except RequestValidationError:
        return None


def entries_from_rows(rows: Iterable[Mapping[str, Any]]) -> List[TimeEntry]:
    """
    Build TimeEntry objects from CSV-style rows.

    Expected columns:
    - Required: id
    - Optional: work_item_id, start_time (ISO-8601), duration_seconds, end_time

    Rows without an id are skipped. Unreadable durations or timestamps are
    left unset so the calculators treat the entry as malformed.
    """
    entries: List[TimeEntry] = []
    for row in rows:
        if not row or _cell(row, "id") is None:
            continue

        duration = _cell(row, "duration_seconds")
        try:
            duration_seconds = int(float(duration)) if duration is not None else None
        except ValueError:
            duration_seconds = None

        entries.append(
            TimeEntry(
                id=_cell(row, "id"),
                work_item_id=_cell(row, "work_item_id"),
                start_time=_dt(row, "start_time"),
                end_time=_dt(row, "end_time"),
                duration_seconds=duration_seconds,
            )
        )
    return entries


def items_from_rows(rows: Iterable[Mapping[str, Any]]) -> List[WorkItemBudget]:
    """
    Build WorkItemBudget objects from CSV-style rows.

    Expected columns: id, label, estimated_work_days (blank means 0).
    """
    items: List[WorkItemBudget] = []
    for row in rows:
        if not row or _cell(row, "id") is None:
            continue
        estimate = _cell(row, "estimated_work_days")
        try:
            days = float(estimate) if estimate is not None else 0.0
        except ValueError:
            days = 0.0
        items.append(
            WorkItemBudget(
                id=_cell(row, "id"),
                label=_cell(row, "label") or "",
                estimated_work_days=days,
            )
        )
    return items


# --- Local files -------------------------------------------------------------


def _read_rows(f: TextIO) -> List[Dict[str, Any]]:
    return list(csv.DictReader(f))


def load_entries_from_csv(path: str) -> List[TimeEntry]:
    with open(path, mode="r", newline="", encoding="utf-8") as f:
        return entries_from_rows(_read_rows(f))


def load_items_from_csv(path: str) -> List[WorkItemBudget]:
    with open(path, mode="r", newline="", encoding="utf-8") as f:
        return items_from_rows(_read_rows(f))


def load_request_json(path: str | Path) -> Dict[str, Any]:
    """Read a JSON request payload (camelCase contract) from disk."""
    return json.loads(Path(path).read_text(encoding="utf-8"))


# --- Azure Blob helpers ----------------------------------------------------


def _get_blob_service(config: Optional[Config] = None):
    if BlobServiceClient is None:
        raise ImportError(
            "azure-storage-blob is required for Azure Blob operations. "
            "Install via `pip install azure-storage-blob`."
        )
    cfg = config or get_config()
    if not cfg.azure_blob_connection_string:
        raise ValueError(
            "Azure blob connection string is not configured. "
            "Set BP_AZURE_BLOB_CONNECTION_STRING or pass Config explicitly."
        )
    return BlobServiceClient.from_connection_string(
        cfg.azure_blob_connection_string
    ), cfg


def _download_csv_rows(
    blob_name: str,
    container_name: Optional[str],
    config: Optional[Config],
) -> List[Dict[str, Any]]:
    service_client, cfg = _get_blob_service(config)
    container = container_name or cfg.azure_blob_container_name
    if not container:
        raise ValueError(
            "Azure blob container name is not configured. "
            "Set BP_AZURE_BLOB_CONTAINER_NAME or pass container_name."
        )

    blob_client = service_client.get_blob_client(container=container, blob=blob_name)
    download_stream = blob_client.download_blob()
    csv_text = download_stream.readall().decode("utf-8")
    return _read_rows(StringIO(csv_text))


def load_entries_from_azure_blob(
    blob_name: str,
    *,
    container_name: Optional[str] = None,
    config: Optional[Config] = None,
) -> List[TimeEntry]:
    """
    Load the time ledger from a CSV stored in Azure Blob Storage.

    - blob_name: name of the blob (e.g., 'ledger/project-42.csv')
    - container_name: overrides Config.azure_blob_container_name if provided
    """
    return entries_from_rows(_download_csv_rows(blob_name, container_name, config))


def load_items_from_azure_blob(
    blob_name: str,
    *,
    container_name: Optional[str] = None,
    config: Optional[Config] = None,
) -> List[WorkItemBudget]:
    """Load work-item budgets from a CSV stored in Azure Blob Storage."""
    return items_from_rows(_download_csv_rows(blob_name, container_name, config))
