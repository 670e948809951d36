# server.py
import logging
from datetime import date
from typing import Optional

from fastapi import FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware

from .checks import DEFAULT_CALENDAR_USER, DEFAULT_END_DATE, DEFAULT_START_DATE, SUITES, run_suite
from .config import ConfigError
from .db_supabase import SupabaseStore, get_store

logger = logging.getLogger(__name__)

app = FastAPI(title="msgcheck", description="Smoke checks for the messaging and calendar backend")

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


def _store() -> SupabaseStore:
    try:
        return get_store()
    except ConfigError as e:
        raise HTTPException(status_code=503, detail=str(e))


@app.get("/")
async def root():
    return {"suites": list(SUITES)}


@app.get("/health")
async def health():
    """Which backend the checks would run against (never the key)."""
    store = _store()
    return {"ok": True, **store.metadata}


@app.get("/checks/{suite_name}")
def run_checks(
    suite_name: str,
    user_id: Optional[str] = None,
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
):
    if suite_name not in SUITES:
        raise HTTPException(status_code=404, detail=f"Unknown suite {suite_name}")

    params = {}
    if suite_name == "calendar":
        start = start_date.isoformat() if start_date else DEFAULT_START_DATE
        end = end_date.isoformat() if end_date else DEFAULT_END_DATE
        if start > end:
            raise HTTPException(status_code=400, detail="start_date must not be after end_date")
        params = {"user_id": user_id or DEFAULT_CALENDAR_USER, "start_date": start, "end_date": end}

    logger.info("Running suite %s over HTTP", suite_name)
    report = run_suite(suite_name, _store(), echo=None, **params)
    return report.to_dict()
