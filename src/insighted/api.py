"""FastAPI routes for the save-school endpoint."""

from __future__ import annotations

import sqlite3
from typing import Any

from fastapi import APIRouter, Body, Depends, FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from .common import SAVE_SCHOOL_PATH, Settings, console, env
from .errors import ValidationError
from .profiles import ProfileRepository

router = APIRouter(tags=["school-profiles"])


def get_repository(request: Request) -> ProfileRepository:
    return request.app.state.repository


@router.post(SAVE_SCHOOL_PATH)
def save_school(
    payload: dict[str, Any] | None = Body(default=None),
    repository: ProfileRepository = Depends(get_repository),
):
    console.log("Received save request...")
    try:
        repository.upsert(payload or {})
    except ValidationError as exc:
        console.log(f"[red]Error:[/red] {exc}")
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST, content={"message": str(exc)}
        )
    except sqlite3.Error as exc:
        console.log(f"[red]SQL ERROR:[/red] {exc}")
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"message": "Database error", "error": str(exc)},
        )
    return {"message": "Data successfully saved!"}


def create_app(repository: ProfileRepository | None = None) -> FastAPI:
    """Build the sink app; opens `PROFILES_DB_FILE` when no repository is given."""
    app = FastAPI(title="InsightEd")
    app.state.repository = repository or ProfileRepository.open(
        Settings.from_env().profiles_db_file
    )
    app.add_middleware(
        CORSMiddleware,
        allow_origins=env.list("CORS_ORIGINS", ["http://localhost:5173"]),
        allow_methods=["POST"],
        allow_headers=["Content-Type"],
    )
    app.include_router(router)
    return app
