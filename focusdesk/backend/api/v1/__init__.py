"""
API Version 1 Router.

Aggregates all v1 endpoint routers.
"""

from fastapi import APIRouter

from focusdesk.backend.api.v1.endpoints import assistant, focuses, invites, me, tasks

router = APIRouter()

router.include_router(me.router, prefix="/me", tags=["me"])

router.include_router(focuses.router, prefix="/focuses", tags=["focuses"])

router.include_router(tasks.router, tags=["tasks"])

router.include_router(
    assistant.router,
    prefix="/focuses/{focus_id}/assistant",
    tags=["assistant"],
)

router.include_router(invites.router, tags=["invites"])
