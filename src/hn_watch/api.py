from __future__ import annotations

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.responses import PlainTextResponse

from hn_watch.notifiers import NotificationDispatcher
from hn_watch.service import PollService

logger = logging.getLogger(__name__)


def create_app(
    service: PollService,
    dispatcher: NotificationDispatcher | None = None,
) -> FastAPI:
    @asynccontextmanager
    async def lifespan(app: FastAPI):
        yield
        if dispatcher is not None:
            dispatcher.shutdown(wait=True)

    app = FastAPI(lifespan=lifespan)

    # Plain def: FastAPI runs it in a worker thread, so the blocking fetch and
    # SQLite claim stay off the event loop.
    @app.get("/poll", response_class=PlainTextResponse)
    def poll() -> PlainTextResponse:
        stats = service.run_once()
        if not stats.ok:
            description = stats.failure or "Poll failed"
            logger.error("%s: %s", description, "; ".join(stats.errors))
            return PlainTextResponse(description, status_code=500)

        logger.info(
            "Poll complete | entries=%d matched=%d claimed=%d already_seen=%d",
            stats.entries,
            stats.matched,
            stats.claimed,
            stats.already_seen,
        )
        return PlainTextResponse("OK")

    @app.get("/health")
    def health():
        return {"status": "ok"}

    return app
