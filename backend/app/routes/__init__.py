"""API routes."""

from .ai import router as ai_router
from .jobs import router as jobs_router
from .messages import router as messages_router
from .profiles import router as profiles_router
from .quotes import router as quotes_router
from .reviews import router as reviews_router
from .trades import router as trades_router

__all__ = [
    "ai_router",
    "jobs_router",
    "messages_router",
    "profiles_router",
    "quotes_router",
    "reviews_router",
    "trades_router",
]
