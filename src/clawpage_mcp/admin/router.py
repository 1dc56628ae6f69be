"""Admin API routes for health and stats."""

from starlette.requests import Request
from starlette.responses import JSONResponse

from clawpage_mcp.core.config import get_current_config
from clawpage_mcp.metrics import get_metrics


async def health_check(request: Request) -> JSONResponse:
    """Health check endpoint for container orchestration.

    Returns:
        JSONResponse with status and number of active sessions
    """
    registry = getattr(request.app.state, "sessions", None)
    return JSONResponse(
        {
            "status": "healthy",
            "sessions": len(registry) if registry is not None else 0,
        }
    )


async def api_stats(request: Request) -> JSONResponse:
    """Get tool call metrics and effective configuration as JSON.

    Returns:
        JSONResponse with call counts, recent calls and errors
    """
    stats = get_metrics().to_dict()
    stats["config"] = get_current_config()
    return JSONResponse(stats)
