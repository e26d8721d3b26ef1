"""Explorer API routes.

Combines the sub-routers; the app mounts them under the configured prefix
(``/insight-api`` by default).
"""

from fastapi import APIRouter

from insight_api.api.routes.inv import router as inv_router
from insight_api.api.routes.transactions import router as transactions_router

explorer_router = APIRouter()

explorer_router.include_router(transactions_router)
explorer_router.include_router(inv_router)

__all__ = ["explorer_router"]
