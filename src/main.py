from __future__ import annotations

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from datetime import datetime

import uvicorn
from fastapi import FastAPI
from fastapi.responses import HTMLResponse

from src.api.webhook import router as webhook_router
from src.api.webhook import serve_file
from src.env_loader import load_env_file
from src.logging_setup import configure_logging
from src.turnin.notifier import SmtpNotifier
from src.turnin.pipeline import Notifier, WebhookHandler
from src.turnin.renderer import DocumentRenderer, PlaywrightRenderer
from src.turnin.retention import RetentionSweeper
from src.turnin.settings import Settings, load_settings
from src.turnin.storage import ArtifactStore

logger = logging.getLogger(__name__)

STATUS_PAGE = """
<html>
  <head>
    <title>PDF Generator Service</title>
    <style>
      body {{ font-family: Arial, sans-serif; max-width: 800px; margin: 0 auto; padding: 20px; }}
      h1 {{ color: #062841; }}
      .status {{ background: #e6f7e6; border-left: 4px solid #28a745; padding: 10px; }}
    </style>
  </head>
  <body>
    <h1>PDF Generator Service</h1>
    <div class="status">
      <p>&#9989; Service is running</p>
      <p>Ready to accept webhook data from JotForm</p>
    </div>
    <p>Last started: {started}</p>
  </body>
</html>
"""


def create_app(
    settings: Settings | None = None,
    *,
    renderer: DocumentRenderer | None = None,
    notifier: Notifier | None = None,
    sweeper: RetentionSweeper | None = None,
) -> FastAPI:
    settings = settings or load_settings()
    store = ArtifactStore(settings.content_dir)
    if renderer is None:
        renderer = PlaywrightRenderer(timeout_seconds=settings.render_timeout_seconds)
    if notifier is None and settings.enable_email:
        notifier = SmtpNotifier(settings.smtp)
    if sweeper is None:
        sweeper = RetentionSweeper(
            settings.content_dir,
            max_age_seconds=settings.retention_seconds,
            interval_seconds=settings.sweep_interval_seconds,
        )

    @asynccontextmanager
    async def lifespan(_: FastAPI) -> AsyncIterator[None]:
        configure_logging(settings.log_level)
        sweeper.start()
        logger.info("PDF Generator service running on port %s", settings.port)
        try:
            yield
        finally:
            await sweeper.stop()

    app = FastAPI(title="Turn-In PDF Service", lifespan=lifespan)
    app.state.settings = settings
    app.state.store = store
    app.state.sweeper = sweeper
    app.state.handler = WebhookHandler(
        settings, store=store, renderer=renderer, notifier=notifier
    )
    app.state.started = datetime.now()
    app.include_router(webhook_router)
    app.add_api_route(
        f"/{settings.content_path}/{{filename}}",
        serve_file,
        methods=["GET"],
        tags=["turnin"],
    )

    @app.get("/", response_class=HTMLResponse, tags=["ui"])
    async def index() -> HTMLResponse:
        started = app.state.started.strftime("%m/%d/%Y, %I:%M:%S %p")
        return HTMLResponse(content=STATUS_PAGE.format(started=started))

    @app.get("/health", tags=["meta"])
    async def health() -> dict[str, str]:
        return {"status": "ok"}

    return app


load_env_file()

app = create_app()


def run() -> None:
    settings = load_settings()
    uvicorn.run(app, host=settings.host, port=settings.port, log_level="warning")


if __name__ == "__main__":
    run()
