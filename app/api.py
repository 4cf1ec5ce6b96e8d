"""
FastAPI app for the budget-pace engine.

Endpoints:
- POST /analyze
- GET  /health

The engine is stateless: each request carries the full snapshot (ledger,
budgets, ``now``) and gets back consumption, pace, projections, trajectory
and recommendations.
"""

from __future__ import annotations

import sys
from dataclasses import asdict
from datetime import date, datetime
from pathlib import Path
from typing import List, Optional

# --- Make src/ importable ----------------------------------------------------

REPO_ROOT = Path(__file__).resolve().parents[1]
SRC_PATH = REPO_ROOT / "src"
if str(SRC_PATH) not in sys.path:
    sys.path.insert(0, str(SRC_PATH))

from fastapi import FastAPI, HTTPException
from pydantic import BaseModel

from budget_pace.config import get_config, get_logger
from budget_pace.engine import RequestValidationError, analyze_payload

logger = get_logger()

app = FastAPI(title="Budget Pace API")


# --- Request / Response schemas ----------------------------------------------


class TimeEntryPayload(BaseModel):
    """
    A logged session.

    Leave durationSeconds unset for a running session; it will be ignored
    unless endTime is given.
    """

    id: str
    workItemId: Optional[str] = None
    startTime: Optional[datetime] = None
    durationSeconds: Optional[int] = None
    endTime: Optional[datetime] = None


class WorkItemPayload(BaseModel):
    id: str
    label: str = ""
    estimatedWorkDays: float = 0.0


class AnalyzeRequest(BaseModel):
    projectId: Optional[str] = None
    now: datetime
    estimatedWorkDays: float = 0.0
    timeEntries: List[TimeEntryPayload] = []
    workItems: List[WorkItemPayload] = []
    deadline: Optional[date] = None


class AnalyzeResponse(BaseModel):
    projectId: Optional[str]
    now: str
    consumption: dict
    pace: dict
    projection: dict
    perItem: List[dict]
    projectedOverage: float
    trajectory: str
    recommendations: List[dict]
    health: dict


class HealthResponse(BaseModel):
    status: str
    config: dict


# --- Endpoints ---------------------------------------------------------------


@app.post("/analyze", response_model=AnalyzeResponse)
def analyze(payload: AnalyzeRequest) -> AnalyzeResponse:
    """
    Analyze a project's time budget.

    Body example:
    {
      "projectId": "p-42",
      "now": "2024-03-10T12:00:00",
      "estimatedWorkDays": 10,
      "timeEntries": [
        {"id": "e1", "workItemId": "w1", "startTime": "2024-03-04T09:00:00", "durationSeconds": 28800}
      ],
      "workItems": [{"id": "w1", "label": "Design", "estimatedWorkDays": 4}],
      "deadline": "2024-04-01"
    }
    """
    try:
        result = analyze_payload(payload.model_dump())
    except RequestValidationError as e:
        logger.info("rejected analyze request for %s: %s", payload.projectId, e)
        raise HTTPException(status_code=422, detail=str(e))

    return AnalyzeResponse(**result)


@app.get("/health", response_model=HealthResponse)
def health() -> HealthResponse:
    """Liveness probe; echoes the active thresholds (secrets excluded)."""
    config = asdict(get_config())
    config.pop("azure_blob_connection_string", None)
    return HealthResponse(status="ok", config=config)


# Convenience for local dev:
# uvicorn app.api:app --reload
if __name__ == "__main__":
    import uvicorn

    uvicorn.run("app.api:app", host="0.0.0.0", port=8000, reload=True)
