import asyncio
import logging
from contextlib import asynccontextmanager, suppress

import uvicorn
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from embedflow.configs import settings
from embedflow.extractors.browser import BrowserSessionManager
from embedflow.routes import extractor_router

logging.basicConfig(level=settings.log_level, format="%(asctime)s - %(levelname)s - %(name)s - %(message)s")
logger = logging.getLogger(__name__)


async def _release_idle_browser(session: BrowserSessionManager, idle_timeout: float, interval: float = None):
    interval = max(idle_timeout / 4, 1) if interval is None else interval
    while True:
        await asyncio.sleep(interval)
        try:
            await session.release_if_idle(idle_timeout)
        except Exception as e:
            logger.warning(f"Idle browser check failed: {e}")


@asynccontextmanager
async def lifespan(app: FastAPI):
    session = BrowserSessionManager()
    app.state.browser_session = session

    watchdog = None
    if settings.browser_idle_timeout > 0:
        watchdog = asyncio.create_task(_release_idle_browser(session, settings.browser_idle_timeout))

    try:
        yield
    finally:
        if watchdog is not None:
            watchdog.cancel()
            with suppress(asyncio.CancelledError):
                await watchdog
        await session.release()


app = FastAPI(title="EmbedFlow", description="Resolves playable video URLs from embed pages", lifespan=lifespan)
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_allow_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)
app.include_router(extractor_router, tags=["extractor"])


@app.get("/health")
async def health_check():
    return {"status": "ok"}


def run():
    uvicorn.run(app, host=settings.host, port=settings.port, log_level=settings.log_level.lower())


if __name__ == "__main__":
    run()
