import logging
from contextlib import asynccontextmanager
from functools import partial

import httpx
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, PlainTextResponse

from config import HTTP_TIMEOUT_SECONDS, LOG_LEVEL, SETUP_FILE, USER_AGENT
from ledger import HorizonLedger
from render import render_error, render_summary, result_to_dict
from scheduler import RefreshScheduler
from setup_loader import load_setup_outcome
from valuation import ValuationJob

logger = logging.getLogger(__name__)


def build_engine(setup_path: str = SETUP_FILE) -> RefreshScheduler:
    """
    Wire the engine: setup outcome, HTTP clients and ledger are created once
    and closed by engine.shutdown().
    """
    setup = load_setup_outcome(setup_path)
    http_client = httpx.Client(timeout=HTTP_TIMEOUT_SECONDS, headers={"User-Agent": USER_AGENT})
    ledger = HorizonLedger()
    return RefreshScheduler(
        partial(ValuationJob, setup, http_client, ledger),
        resources=(http_client, ledger),
    )


@asynccontextmanager
async def lifespan(app: FastAPI):
    logging.basicConfig(
        level=LOG_LEVEL,
        format="%(asctime)s [%(levelname)s] %(name)s - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )
    engine = build_engine()
    engine.start()
    app.state.engine = engine
    try:
        yield
    finally:
        engine.shutdown()


app = FastAPI(title="Crypto Net Worth", lifespan=lifespan)
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_methods=["GET", "POST"],
    allow_headers=["*"],
)


def _engine(request: Request) -> RefreshScheduler:
    return request.app.state.engine


@app.get("/api/health")
def health(request: Request):
    return {"status": "ok", "state": _engine(request).state.value}


# Sync handlers run in the threadpool; current_outcome() blocks until the job settles
@app.get("/api/valuation")
def valuation(request: Request):
    outcome = _engine(request).current_outcome()
    if not outcome.ok:
        return JSONResponse(
            status_code=503,
            content={"error": type(outcome.error).__name__, "detail": str(outcome.error)},
        )
    return result_to_dict(outcome.value)


@app.get("/api/valuation/summary", response_class=PlainTextResponse)
def valuation_summary(request: Request):
    outcome = _engine(request).current_outcome()
    if not outcome.ok:
        return PlainTextResponse(render_error(outcome.error), status_code=503)
    return PlainTextResponse(render_summary(outcome.value))


@app.post("/api/refresh", status_code=202)
def refresh(request: Request):
    _engine(request).refresh()
    return {"status": "submitted"}


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host="127.0.0.1", port=8000)
