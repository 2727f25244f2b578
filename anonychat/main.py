# anonychat/main.py
from __future__ import annotations

import logging
import random

from fastapi import FastAPI
from redis.asyncio import Redis

from anonychat.domain.broadcast.broadcaster import Broadcaster
from anonychat.domain.moderation.wordlist import load_bad_words
from anonychat.domain.session.registry import SessionRegistry
from anonychat.services.textgen import TextGenClient
from anonychat.settings import get_settings
from anonychat.store.redis_repo import RedisRepo
from anonychat.transport.admin import router as admin_router
from anonychat.transport.gateway import GatewayClient
from anonychat.transport.outbox import Outbox
from anonychat.transport.webhook import router as webhook_router

logger = logging.getLogger(__name__)


def create_app() -> FastAPI:
    settings = get_settings()
    logging.basicConfig(
        level=settings.LOG_LEVEL.upper(),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )
    app = FastAPI(title=settings.APP_NAME)
    app.state.ready = False

    @app.on_event("startup")
    async def _startup() -> None:
        r = Redis.from_url(settings.REDIS_URL, decode_responses=False)
        app.state.redis = r
        app.state.repo = RedisRepo(r, prefix=settings.REDIS_PREFIX, admin_ids=settings.admin_ids())
        # No profile store, no events: a failed ping aborts startup
        await r.ping()

        rng = random.Random()
        app.state.settings = settings
        app.state.rng = rng
        app.state.bad_words = load_bad_words(settings.BAD_WORDS_FILE)
        app.state.sessions = SessionRegistry()
        app.state.gateway = GatewayClient(
            settings.GATEWAY_URL,
            token=settings.GATEWAY_TOKEN,
            timeout=settings.GATEWAY_TIMEOUT_SEC,
        )
        app.state.outbox = Outbox(app.state.gateway)
        app.state.textgen = TextGenClient(
            settings.TEXTGEN_URL,
            model=settings.TEXTGEN_MODEL,
            api_key=settings.TEXTGEN_API_KEY,
            timeout=settings.TEXTGEN_TIMEOUT_SEC,
        )
        app.state.broadcaster = Broadcaster(
            repo=app.state.repo,
            gateway=app.state.gateway,
            min_delay_sec=settings.BROADCAST_MIN_DELAY_SEC,
            max_delay_sec=settings.BROADCAST_MAX_DELAY_SEC,
            rng=rng,
        )
        app.state.ready = True
        logger.info("%s ready", settings.APP_NAME)

    @app.on_event("shutdown")
    async def _shutdown() -> None:
        app.state.ready = False
        await app.state.sessions.timers.shutdown()
        await app.state.outbox.close()
        await app.state.gateway.aclose()
        await app.state.textgen.aclose()
        r: Redis = app.state.redis
        await r.close()

    @app.get("/health")
    async def health():
        r: Redis = app.state.redis
        pong = await r.ping()
        return {"ok": True, "redis": str(pong), "ready": app.state.ready}

    app.include_router(webhook_router)
    app.include_router(admin_router)
    return app


app = create_app()
