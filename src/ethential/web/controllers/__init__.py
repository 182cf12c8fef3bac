"""HTTP controllers for the token gateway."""

from ethential.web.controllers.tokens import router as tokens_router

__all__ = [
    "tokens_router",
]
