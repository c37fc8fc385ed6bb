import asyncio
from contextlib import asynccontextmanager, suppress

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware

import models  # noqa: F401  registers tables on Base.metadata
from database import Base, engine, get_db
from services.keepalive_service import keepalive_loop, keepalive_url, server_status
from utils.logger_factory import new_logger


@asynccontextmanager
async def lifespan(app: FastAPI):
    log = new_logger("lifespan")
    Base.metadata.create_all(bind=engine)

    ping_task = None
    url = keepalive_url()
    if url:
        ping_task = asyncio.create_task(keepalive_loop(url, server_status))
    else:
        log.info("BASE_URL not set; keep-alive ping disabled")

    yield

    if ping_task:
        ping_task.cancel()
        with suppress(asyncio.CancelledError):
            await ping_task


app = FastAPI(title="Portfolio API", lifespan=lifespan)


@app.middleware("http")
async def log_request_body(request: Request, call_next):
    log = new_logger("log_request_body")
    log.info(f"INCOMING REQUEST: {request.method} {request.url}")
    if request.method != "OPTIONS":  # Skip CORS preflight
        body = await request.body()

        content_type = request.headers.get("content-type", "")
        if "multipart/form-data" in content_type:
            log.info(f"Request body ({request.method} {request.url.path}): multipart/form-data (binary content excluded from logs)")
        elif len(body) > 0:
            log.info(f"Request body ({request.method} {request.url.path}): {body[:1000]!r}")
    return await call_next(request)


app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "DELETE"],
    allow_headers=["*"],
)


@app.get("/")
def root():
    return {"message": "Portfolio API deployed."}


from api.visits import router as visits_router
from api.conversessions import router as conversessions_router
from api.questions import router as questions_router
from api.applications import router as applications_router
from api.healthcheck import router as health_router

app.include_router(visits_router, prefix="/api")
app.include_router(conversessions_router, prefix="/api")
app.include_router(questions_router, prefix="/api")
app.include_router(applications_router, prefix="/api")
app.include_router(health_router, prefix="/api")

__all__ = ["app", "get_db"]
