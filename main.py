""" main.py: FastAPI application entry point and runtime configuration.

This module builds the ASGI app, mounts the API routers, configures CORS (Cross-Origin Resource Sharing) and
exposes a Prometheus metrics endpoint. `create_app()` wires the command pipeline: collaborators can be injected
(real integrations, or fakes in tests) and fall back to the deterministic mock agent platform, so the service
runs end to end without credentials. When executed directly, it starts a Uvicorn server using host/port values
from configuration.
"""

from contextlib import asynccontextmanager
import logging
from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from prometheus_client import make_asgi_app

from config import CONFIG
from agent_api.base import (
    AgentDirectory,
    ExecutionDispatcher,
    VoiceCapability,
    WidgetCapability,
    widget_session,
)
from agent_api.mock_client import (
    MockAgentDirectory,
    MockExecutionDispatcher,
    MockVoiceCapability,
    MockWidgetCapability,
)
from core.orchestrator import CommandOrchestrator
from core.reply_chain import ReplySourceChain
from core.voice import VoiceCapture
from services.conversation_store import ConversationStore
from version import __version__

# --- Router Imports ---
from api import chat as chat_router
from api import command as command_router
from api import health as health_router

# Get a logger instance for this module
logger = logging.getLogger(__name__)


def create_app(
    dispatcher: Optional[ExecutionDispatcher] = None,
    directory: Optional[AgentDirectory] = None,
    widget: Optional[WidgetCapability] = None,
    voice_capability: Optional[VoiceCapability] = None,
    reply_chain: Optional[ReplySourceChain] = None,
) -> FastAPI:
    """
    Create and configure the command center application.

    Args:
        dispatcher: Execution subsystem; defaults to `MockExecutionDispatcher`.
        directory: Agent roster/metrics source; defaults to a `MockAgentDirectory` over the mock dispatcher.
        widget: Embedded widget capability. When omitted, a `MockWidgetCapability` is used only if
            `features.widget_fallback_enabled` is true; otherwise the widget tier is skipped.
        voice_capability: Voice device; defaults to `MockVoiceCapability`.
        reply_chain: Reply tiers; defaults to remote → widget → static.

    Returns:
        FastAPI: The configured application. The widget is attached for the lifetime of the app
        (startup to shutdown).
    """
    if dispatcher is None:
        dispatcher = MockExecutionDispatcher()
    if directory is None:
        directory = MockAgentDirectory(dispatcher if isinstance(dispatcher, MockExecutionDispatcher) else None)
    if widget is None and CONFIG.get('features', {}).get('widget_fallback_enabled', False):
        widget = MockWidgetCapability()
    if reply_chain is None:
        reply_chain = ReplySourceChain.default(widget=widget)

    orchestrator = CommandOrchestrator(
        dispatcher=dispatcher,
        reply_chain=reply_chain,
        store=ConversationStore(),
        directory=directory,
        context_window=int(CONFIG['reply_chain'].get('context_window', 10)),
    )

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        with widget_session(app.state.widget):
            logger.info("[lifespan] Command center started (widget %s)", "attached" if app.state.widget else "disabled")
            yield
        app.state.voice.stop()
        logger.info("[lifespan] Command center stopped")

    app = FastAPI(title="Agent Command Center", version=__version__, lifespan=lifespan)
    app.state.orchestrator = orchestrator
    app.state.directory = directory
    app.state.widget = widget
    app.state.voice = VoiceCapture(voice_capability or MockVoiceCapability())

    # Include routers
    app.include_router(chat_router.router, prefix="/api", tags=["Completion"])
    app.include_router(command_router.router, prefix="/api", tags=["Command"])
    app.include_router(health_router.router, tags=["Health"])

    # Add Prometheus metrics endpoint
    metrics_app = make_asgi_app()
    app.mount("/metrics", metrics_app)

    # Configure CORS
    allow_origins = CONFIG.get('cors', {}).get('allow_origins', ["*"])
    app.add_middleware(
        CORSMiddleware,
        allow_origins=allow_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    return app


app = create_app()

# The uvicorn server is used to run the FastAPI application.
if __name__ == '__main__':
    import uvicorn
    logger.info("[__main__] Starting Uvicorn server for main.py\n")
    uvicorn.run(
        app,
        host=CONFIG.get('server', {}).get('host', '0.0.0.0'),
        port=CONFIG.get('server', {}).get('port', 8080)
    )
