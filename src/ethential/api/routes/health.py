"""Health check endpoints."""

from fastapi import APIRouter, Request

from ethential import __version__

router = APIRouter()


@router.get("/health")
async def health_check():
    """Basic health check endpoint."""
    return {"status": "healthy", "service": "ethential"}


@router.get("/health/detailed")
async def detailed_health(request: Request):
    """Detailed health check with configuration info."""
    settings = request.app.state.settings
    orchestrator = request.app.state.orchestrator
    return {
        "status": "healthy",
        "service": "ethential",
        "version": __version__,
        "backends": {
            "auth": orchestrator.verifier.name if orchestrator else None,
            "construction": orchestrator.construction.name if orchestrator else None,
        },
        "config": settings.get_safe_dict(),
    }
