"""
FastAPI application serving run history and statistics.

The API is unauthenticated and meant for local use only, so it binds to a
loopback address.
"""
import threading
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

import uvicorn
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field

from .. import __version__
from ..core.data_manager import DataManager, data_manager
from ..core.errors import CharacterNotFoundError, RunsPathError
from ..models.run import CharacterStats, ExportData, RunMetrics, RunsPathInfo
from ..utils.logger import get_logger

log = get_logger()


class ApiError(BaseModel):
    """API error response."""
    error: str
    code: str
    details: Optional[str] = None


class HealthResponse(BaseModel):
    status: str = "healthy"
    timestamp: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    version: Optional[str] = __version__


class RunsPathRequest(BaseModel):
    path: str = Field(..., min_length=1, description="Directory containing the character run folders")


class CharacterInfo(BaseModel):
    id: str
    name: str


def _error_response(status_code: int, error: ApiError) -> JSONResponse:
    return JSONResponse(status_code=status_code, content=error.model_dump(exclude_none=True))


def create_app(manager: Optional[DataManager] = None, enable_cors: bool = True) -> FastAPI:
    """Build the API around a data manager."""
    manager = manager or data_manager

    app = FastAPI(
        title="STS Stat Viewer API",
        description="API for Slay the Spire run statistics and analysis",
        version=__version__,
    )

    if enable_cors:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=["*"],
            allow_methods=["*"],
            allow_headers=["*"],
        )

    @app.exception_handler(CharacterNotFoundError)
    async def character_not_found(request: Request, exc: CharacterNotFoundError):
        return _error_response(404, ApiError(error="Character not found", code="NOT_FOUND",
                                             details=exc.details))

    @app.exception_handler(RunsPathError)
    async def invalid_runs_path(request: Request, exc: RunsPathError):
        return _error_response(400, ApiError(error=str(exc), code="INVALID_PATH", details=exc.path))

    not_found = {404: {"model": ApiError, "description": "Character not found"}}

    @app.get("/api/health", response_model=HealthResponse, tags=["health"])
    def health_check():
        return HealthResponse()

    @app.get("/api/runs", response_model=List[RunMetrics], tags=["sts"])
    def get_runs(character: Optional[str] = None,
                 victories_only: bool = False,
                 min_ascension: Optional[int] = None):
        """All runs with optional filtering."""
        return manager.get_runs(character=character,
                                victories_only=victories_only,
                                min_ascension=min_ascension)

    @app.get("/api/runs/{character}", response_model=List[RunMetrics],
             responses=not_found, tags=["sts"])
    def get_character_runs(character: str):
        """Runs for one character (IRONCLAD, THE_SILENT, DEFECT, WATCHER)."""
        return manager.get_character_runs(character)

    @app.get("/api/stats", response_model=List[CharacterStats], tags=["sts"])
    def get_stats():
        return manager.get_stats()

    @app.get("/api/stats/{character}", response_model=CharacterStats,
             responses=not_found, tags=["sts"])
    def get_character_stats(character: str):
        return manager.get_character_stats(character)

    @app.get("/api/export", response_model=ExportData, tags=["sts"])
    def get_export():
        """All runs plus stats in one snapshot."""
        return manager.get_export()

    @app.get("/api/characters", response_model=List[CharacterInfo], tags=["sts"])
    def get_characters() -> List[Dict[str, Any]]:
        return manager.get_characters()

    @app.get("/api/runs-path", response_model=RunsPathInfo, tags=["config"])
    def get_runs_path():
        return manager.get_runs_path_info()

    @app.put("/api/runs-path", response_model=RunsPathInfo,
             responses={400: {"model": ApiError, "description": "Invalid path"}},
             tags=["config"])
    def set_runs_path(request: RunsPathRequest):
        return manager.set_runs_path(request.path)

    @app.delete("/api/runs-path", response_model=RunsPathInfo, tags=["config"])
    def clear_runs_path():
        return manager.clear_runs_path()

    return app


def start_server(manager: Optional[DataManager] = None,
                 host: str = "127.0.0.1", port: int = 3030,
                 enable_cors: bool = True) -> None:
    """Serve the API until interrupted."""
    app = create_app(manager, enable_cors=enable_cors)
    log.info(f"API server running at http://{host}:{port}")
    log.info(f"OpenAPI docs at http://{host}:{port}/docs")
    uvicorn.run(app, host=host, port=port, log_level="warning")


def start_server_in_thread(manager: Optional[DataManager] = None,
                           host: str = "127.0.0.1", port: int = 3030,
                           enable_cors: bool = True) -> threading.Thread:
    """Serve the API from a daemon thread next to the TUI."""
    config = uvicorn.Config(create_app(manager, enable_cors=enable_cors),
                            host=host, port=port, log_level="warning")
    server = uvicorn.Server(config)
    thread = threading.Thread(target=server.run, name="sts-stats-api", daemon=True)
    thread.start()
    log.info(f"API server running at http://{host}:{port}")
    return thread
