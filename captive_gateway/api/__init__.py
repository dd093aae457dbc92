from fastapi import APIRouter

from captive_gateway.api import portal, ui

api_router = APIRouter()

api_router.include_router(ui.router, tags=["ui"])
api_router.include_router(portal.router, tags=["portal"])
