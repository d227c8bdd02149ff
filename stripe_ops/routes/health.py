from collections.abc import Callable

from fastapi import APIRouter, Depends
from fastapi.concurrency import run_in_threadpool
from fastapi.responses import JSONResponse

from stripe_ops.billing.customers import stripe_ping
from stripe_ops.config import settings
from stripe_ops.dedup import SeenSet, get_seen_set
from stripe_ops.metrics import Metrics, get_metrics
from stripe_ops.notify.telegram import telegram_ping
from stripe_ops.redis_client import redis_ping
from stripe_ops.sheets.writer import get_sheet_writer

router = APIRouter(tags=["health"])

def _error(e: Exception) -> str:
    msg = str(e).strip()
    return f"{e.__class__.__name__}{(': ' + msg) if msg else ''}"

def _sheets_ping() -> bool:
    writer = get_sheet_writer()
    return bool(writer and writer.token.get())

def run_checks(probes: dict[str, Callable[[], bool]]) -> tuple[dict[str, bool], dict[str, str]]:
    checks: dict[str, bool] = {}
    errors: dict[str, str] = {}
    for name, fn in probes.items():
        try:
            checks[name] = bool(fn())
        except Exception as e:
            checks[name] = False
            errors[name] = _error(e)
    return checks, errors

def configured_probes() -> dict[str, Callable[[], bool]]:
    probes: dict[str, Callable[[], bool]] = {}
    if settings.STRIPE_SECRET_KEY:
        probes["stripe"] = stripe_ping
    if settings.telegram_configured:
        probes["telegram"] = telegram_ping
    if settings.sheets_configured:
        probes["sheets"] = _sheets_ping
    return probes

@router.get("/health")
def health() -> dict:
    return {"status": "ok"}

# readiness probe
@router.get("/ready")
def ready():
    checks, errors = run_checks({"redis": redis_ping})
    ok = all(checks.values())

    body: dict = {"status": "ok" if ok else "unready", "checks": checks}
    if errors:
        body["errors"] = errors

    # returns 200 only when redis is reachable
    return JSONResponse(status_code=200 if ok else 503, content=body)

# external integrations, for uptime monitors
@router.get("/status")
async def status():
    checks, errors = await run_in_threadpool(run_checks, configured_probes())
    ok = all(checks.values())

    body: dict = {"status": "ok" if ok else "degraded", "checks": checks}
    if errors:
        body["errors"] = errors
    return JSONResponse(status_code=200 if ok else 503, content=body)

# in-process counters; sessions_handled is the size of the dedup set
@router.get("/metrics")
def read_metrics(
    seen: SeenSet = Depends(get_seen_set),
    counters: Metrics = Depends(get_metrics),
) -> dict:
    return {"sessions_handled": len(seen), **counters.snapshot()}
