# file: backend/main.py
"""
FastAPI Backend — Collaboration Graph Explorer API v1.

Stateless analysis: every request rebuilds the graph from the event
repository held on app.state. The only state replaced at runtime is
the immutable AdminConfig value (PATCH /admin/config).

Endpoints:
  POST  /webhook/cliq            — normalize + store a chat event
  GET   /graph/latest            — nodes, edges, stats
  GET   /graph/stats             — stats only
  GET   /insights/latest         — stats + rule-based insights
  GET   /digest/weekly           — weekly digest
  GET   /admin/config            — current admin config
  PATCH /admin/config            — partial config update
  POST  /admin/clear-messages    — drop all stored events
  POST  /admin/apply-retention   — rewrite store to retention window
  POST  /admin/import            — replace stored events
  GET   /demo/scenarios          — available demo scenarios
  POST  /demo/seed               — seed a demo scenario
  POST  /cliq/command            — /socialgraph, /insights
"""
from __future__ import annotations

import logging
import os
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from dotenv import load_dotenv

env_path = os.path.join(os.path.dirname(__file__), ".env")
if os.path.exists(env_path):
    load_dotenv(env_path)

from fastapi import Body, FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import PlainTextResponse
from pydantic import BaseModel

from collab_kernel.random_source import RandomSource
from collab_runtime import (
    AdminConfig,
    AnalysisSession,
    ConfigValidationError,
    InMemoryEventRepository,
    SqliteEventRepository,
    apply_config_patch,
    configure_logging,
    normalize_cliq_event,
    reconstruct_event,
)
from collab_runtime.normalize import SUPPORTED_EVENT_TYPES
from demo_generator import UnknownScenarioError, list_available_scenarios, seed_scenario

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Config
# ---------------------------------------------------------------------------

DEFAULT_WORKSPACE_ID = "default"
DEFAULT_PORT = 3000

COMMAND_ERROR_TEXT = (
    "Sorry, I couldn't process that command right now. Please try again later."
)


def get_app_base_url() -> str:
    """APP_BASE_URL without trailing slash, else http://localhost:$PORT."""
    env_url = os.environ.get("APP_BASE_URL", "").strip()
    if env_url:
        return env_url.rstrip("/")
    port = os.environ.get("PORT") or DEFAULT_PORT
    return f"http://localhost:{port}"


def _env_int(name: str) -> Optional[int]:
    raw = os.environ.get(name, "").strip()
    if not raw:
        return None
    try:
        return int(raw)
    except ValueError:
        logger.warning("Ignoring non-integer %s=%r", name, raw)
        return None


def _default_repository():
    db_path = os.environ.get("EVENT_DB_PATH", "").strip()
    if db_path:
        logger.info("Using sqlite event repository at %s", db_path)
        return SqliteEventRepository(db_path)
    return InMemoryEventRepository()


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


# ---------------------------------------------------------------------------
# Request models
# ---------------------------------------------------------------------------


class SeedRequest(BaseModel):
    scenario: Optional[str] = None
    clear_existing: bool = False
    seed: Optional[int] = None


class ImportRequest(BaseModel):
    events: List[Dict[str, Any]]


class CommandRequest(BaseModel):
    command: str = ""
    args: str = ""
    channel_id: str = ""
    user_id: str = ""


# ---------------------------------------------------------------------------
# App factory
# ---------------------------------------------------------------------------


def create_app(
    repository=None,
    config: Optional[AdminConfig] = None,
    cluster_seed: Optional[int] = None,
) -> FastAPI:
    """
    Build the API around an event repository and an admin config.

    Defaults come from the environment: EVENT_DB_PATH (sqlite, else
    in-memory), IGNORED_CHANNELS / ANONYMIZE_USERS / RETENTION_DAYS,
    WORKSPACE_ID and CLUSTER_SEED.
    """
    configure_logging(os.environ.get("LOG_LEVEL"))

    app = FastAPI(
        title="Collaboration Graph Explorer API",
        version="1.0.0",
        description="Workplace collaboration graph, health score and insights",
    )

    frontend_url = os.environ.get("FRONTEND_URL", "http://localhost:3000")
    app.add_middleware(
        CORSMiddleware,
        allow_origins=[
            frontend_url,
            "http://localhost:3000",
            "http://localhost:3001",
        ],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.state.repository = repository if repository is not None else _default_repository()
    app.state.config = config if config is not None else AdminConfig.from_env()
    app.state.workspace_id = os.environ.get("WORKSPACE_ID") or DEFAULT_WORKSPACE_ID
    app.state.cluster_seed = cluster_seed if cluster_seed is not None else _env_int("CLUSTER_SEED")

    def _session() -> AnalysisSession:
        seed = app.state.cluster_seed
        return AnalysisSession(
            app.state.repository,
            app.state.workspace_id,
            app.state.config,
            rng_factory=lambda: RandomSource(seed),
        )

    # -----------------------------------------------------------------------
    # Service
    # -----------------------------------------------------------------------

    @app.get("/", response_class=PlainTextResponse)
    def root():
        return "Collaboration Graph Explorer API is running."

    @app.get("/health")
    def health():
        return {"status": "ok"}

    @app.get("/metrics")
    def metrics():
        return {"status": "ok", "metrics": _session().get_metrics().to_dict()}

    # -----------------------------------------------------------------------
    # Webhook
    # -----------------------------------------------------------------------

    @app.get("/webhook/test")
    def webhook_test():
        return {"status": "webhook alive"}

    @app.post("/webhook/cliq")
    def webhook_cliq(payload: Any = Body(None)):
        payload = payload if isinstance(payload, dict) else {}
        event_type = payload.get("event_type")
        logger.info("Received /webhook/cliq request: event_type=%r", event_type)

        if event_type not in SUPPORTED_EVENT_TYPES:
            logger.info("Ignoring unsupported event_type %r", event_type)
            return {"status": "ignored"}

        event = normalize_cliq_event(payload)
        if event is None:
            logger.warning("Invalid webhook payload, missing required fields")
            raise HTTPException(status_code=400, detail="invalid_payload")

        _session().record_event(event)
        return {"status": "ok", "event": "processed"}

    # -----------------------------------------------------------------------
    # Graph / insights / digest
    # -----------------------------------------------------------------------

    @app.get("/graph/latest")
    def graph_latest():
        return _session().graph_payload()

    @app.get("/graph/stats")
    def graph_stats():
        return _session().stats_payload()

    @app.get("/insights/latest")
    def insights_latest():
        try:
            payload = _session().insights_payload()
        except Exception:
            logger.exception("Insights generation error")
            raise HTTPException(
                status_code=500,
                detail="Unexpected server error while generating insights",
            )
        return {"status": "ok", "generated_at": _now_iso(), **payload}

    @app.get("/digest/weekly")
    def digest_weekly():
        try:
            digest = _session().digest_payload()
        except Exception:
            logger.exception("Error building weekly digest")
            raise HTTPException(status_code=500, detail="Unable to build weekly digest")
        return {"status": "ok", "generated_at": _now_iso(), "digest": digest}

    # -----------------------------------------------------------------------
    # Admin
    # -----------------------------------------------------------------------

    @app.get("/admin/config")
    def get_config():
        return {"status": "ok", "config": app.state.config.to_dict()}

    @app.patch("/admin/config")
    def patch_config(patch: Any = Body(None)):
        try:
            updated = apply_config_patch(app.state.config, {} if patch is None else patch)
        except ConfigValidationError as e:
            logger.warning("Rejected admin config patch: %s", e)
            raise HTTPException(status_code=400, detail=str(e))
        app.state.config = updated
        logger.info("Admin config updated: %s", updated.to_dict())
        return {"status": "ok", "config": updated.to_dict()}

    @app.post("/admin/clear-messages")
    def clear_messages():
        cleared = _session().clear()
        return {"status": "ok", "cleared": cleared}

    @app.post("/admin/apply-retention")
    def apply_retention():
        session = _session()
        if app.state.config.retention_days is None:
            return {
                "status": "ok",
                "message": "No retention policy configured",
                "removed": 0,
                "remaining": app.state.repository.count_events(app.state.workspace_id),
            }
        result = session.apply_retention()
        return {"status": "ok", **result.to_dict()}

    @app.post("/admin/import")
    def import_events(req: ImportRequest):
        events = []
        for i, evt_dict in enumerate(req.events):
            try:
                events.append(reconstruct_event(evt_dict))
            except (ValueError, KeyError) as exc:
                raise HTTPException(status_code=400, detail=f"Invalid event at index {i}: {exc}")

        app.state.repository.replace_events(app.state.workspace_id, events)
        logger.info("Imported %d event(s) for workspace %r", len(events), app.state.workspace_id)
        return {"status": "ok", "imported": len(events)}

    # -----------------------------------------------------------------------
    # Demo
    # -----------------------------------------------------------------------

    @app.get("/demo/scenarios")
    def demo_scenarios():
        return {"status": "ok", "scenarios": list_available_scenarios()}

    @app.post("/demo/seed")
    def demo_seed(req: SeedRequest):
        available = list_available_scenarios()
        if not req.scenario:
            raise HTTPException(
                status_code=400,
                detail={"reason": "Unknown or missing scenario", "available_scenarios": available},
            )
        try:
            seeded = seed_scenario(req.scenario, RandomSource(req.seed))
        except UnknownScenarioError as e:
            raise HTTPException(
                status_code=400,
                detail={"reason": str(e), "available_scenarios": available},
            )

        session = _session()
        if req.clear_existing:
            cleared = session.clear()
            logger.info("Demo: cleared %d existing event(s) before seeding", cleared)
        session.record_events(seeded.events)
        return {"status": "ok", "seeded": seeded.to_dict()}

    # -----------------------------------------------------------------------
    # Chat commands
    # -----------------------------------------------------------------------

    @app.post("/cliq/command")
    def cliq_command(req: CommandRequest):
        cmd = req.command.strip()
        logger.info(
            "POST /cliq/command: command=%r channel=%r user=%r args=%r",
            cmd, req.channel_id, req.user_id, req.args,
        )
        try:
            reply = _session().command_reply(cmd, get_app_base_url())
        except Exception:
            logger.exception("Error handling /cliq/command")
            raise HTTPException(status_code=500, detail=COMMAND_ERROR_TEXT)
        return {"status": "ok", "message": reply.to_dict()}

    return app


app = create_app()
