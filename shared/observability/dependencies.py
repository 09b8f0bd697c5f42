from fastapi import Request

from .context import RequestContext, get_current_context, new_context


def get_request_context(request: Request) -> RequestContext:
    """
    FastAPI dependency that returns the RequestContext for this request.

    ContextMiddleware stores it on request.state. When the middleware is not
    installed (e.g. a bare test app) the task-local context is used, and
    failing that a fresh one is built from the request line.

    Usage:
        @router.get("/api/users/{user_id}")
        async def get_user(user_id: int, ctx: RequestContext = Depends(get_request_context)):
            logger.info("Fetching user", ctx, user_id=user_id)
    """
    ctx = getattr(request.state, "context", None) or get_current_context()
    if ctx is None:
        ctx = new_context(f"{request.method}{request.url.path}")
    return ctx
