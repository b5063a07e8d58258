"""Mindful Reframe API — FastAPI application entry point.

Invariants:
    - Routes registered explicitly (no auto-discovery)
    - Global error handlers map ReframeError → structured JSON responses
    - CORS configured from settings (not hardcoded)
    - Database, model client, controller and analyzer built once in the lifespan

Design Decisions:
    - Lifespan over @app.on_event: FastAPI recommended pattern, cleaner cleanup
    - ReframeRules built from settings once and injected into the controller and the
      analyzer (ADR: no ambient configuration inside core)
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from mindful_reframe.api.error_handlers import register_error_handlers
from mindful_reframe.api.routes import health, intake, journal, reframing
from mindful_reframe.config import get_settings
from mindful_reframe.core.reframe_rules import build_rules
from mindful_reframe.infrastructure.anthropic_client import ResilientAnthropicClient
from mindful_reframe.infrastructure.database import init_db
from mindful_reframe.infrastructure.model_adapter import AnthropicModelAdapter
from mindful_reframe.infrastructure.observability import setup_logging
from mindful_reframe.services.journal_analyzer import JournalAnalyzer
from mindful_reframe.services.reframe_controller import ReframeController

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup/shutdown lifecycle."""
    settings = get_settings()
    setup_logging(settings.log_level, settings.log_format)
    manager = init_db(
        settings.database_url,
        pool_size=settings.database_pool_size,
        max_overflow=settings.database_max_overflow,
    )
    rules = build_rules(
        max_turns=settings.reframe_max_turns,
        pacing_interval_turns=settings.reframe_pacing_interval_turns,
        max_input_length=settings.max_input_length,
        max_saved_entries_per_user=settings.max_saved_entries_per_user,
    )
    client = ResilientAnthropicClient(
        api_key=settings.anthropic_api_key,
        max_retries=settings.anthropic_max_retries,
        base_delay_ms=settings.anthropic_base_delay_ms,
        max_delay_ms=settings.anthropic_max_delay_ms,
        timeout_seconds=settings.anthropic_timeout_seconds,
    )
    app.state.reframe_controller = ReframeController(
        AnthropicModelAdapter(client, settings.reframe_model),
        rules,
        model_timeout_seconds=settings.model_timeout_seconds,
        max_tokens=settings.reframe_max_tokens,
    )
    app.state.journal_analyzer = JournalAnalyzer(
        client, settings.analysis_model, rules,
        max_tokens=settings.analysis_max_tokens,
    )
    logger.info("Mindful Reframe API started")
    yield
    logger.info("Mindful Reframe API shutting down")
    await manager.dispose()


app = FastAPI(
    title="Mindful Reframe API", version="1.0.0", lifespan=lifespan,
)

settings = get_settings()
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(health.router)
app.include_router(intake.router)
app.include_router(journal.router)
app.include_router(reframing.router)

register_error_handlers(app)
