from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse

from config.settings import get_settings
from shared.database import executor
from shared.database.errors import NotInitializedError, StoreError
from shared.database.pool import close_pool, create_pool
from shared.observability.access_log_middleware import AccessLogMiddleware
from shared.observability.logger import get_logger
from shared.observability.middleware import ContextMiddleware
from pawpal.api.dogs import router as dogs_router
from pawpal.api.errors import register_error_handlers
from pawpal.api.users import router as users_router

logger = get_logger("pawpal")


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Manage application lifespan (startup/shutdown).

    A failed connectivity probe raises here, so the process never serves
    traffic without a database.
    """
    # Startup
    settings = get_settings()
    app.state.db_pool = await create_pool(settings)
    logger.info("PawPal started", data={
        "environment": settings.environment,
        "service": settings.service_name
    })

    yield

    # Shutdown
    await close_pool(app.state.db_pool)
    app.state.db_pool = None


app = FastAPI(title="PawPal", lifespan=lifespan)
# Last added runs first: ContextMiddleware must wrap the access log
app.add_middleware(AccessLogMiddleware)
app.add_middleware(ContextMiddleware, service_name="pawpal")
register_error_handlers(app)

app.include_router(users_router, prefix="/api/users", tags=["users"])
app.include_router(dogs_router, prefix="/api/dogs", tags=["dogs"])


@app.get("/health")
async def health(request: Request):
    pool = getattr(request.app.state, "db_pool", None)
    try:
        if pool is None:
            raise NotInitializedError("Database pool not initialized", operation="health")
        await executor.fetchval(pool, "SELECT 1")
        stats = pool.stats()
    except StoreError as e:
        logger.error("Health check failed", data={"error": str(e)})
        return JSONResponse(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            content={"status": "unavailable", "database": e.code}
        )
    return {"status": "ok", "database": stats}
