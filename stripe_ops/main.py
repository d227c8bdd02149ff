import uvicorn
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from stripe_ops.config import settings
from stripe_ops.logging_config import get_logger
from stripe_ops.routes.checkout import router as checkout_router
from stripe_ops.routes.health import router as health_router
from stripe_ops.routes.pages import router as pages_router
from stripe_ops.routes.webhooks import router as webhooks_router

logger = get_logger(__name__)

async def unhandled_exception(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("unhandled error", method=request.method, path=request.url.path)
    return JSONResponse(status_code=500, content={"error": "internal_server_error"})

def create_app() -> FastAPI:
    app = FastAPI(title="stripe-ops", version="0.1.0")
    app.include_router(health_router)
    app.include_router(webhooks_router)
    app.include_router(checkout_router)
    app.include_router(pages_router)
    app.add_exception_handler(Exception, unhandled_exception)
    return app

app = create_app()

def serve() -> None:
    # x-forwarded-for is only rewritten into request.client for trusted proxies
    uvicorn.run(
        "stripe_ops.main:app",
        host=settings.app_host,
        port=settings.app_port,
        log_level=settings.log_level,
        proxy_headers=settings.trust_proxy_headers,
        forwarded_allow_ips=settings.forwarded_allow_ips,
    )
