from fastapi import APIRouter
from fastfinder.api.endpoints import auth, items

api_router = APIRouter()

api_router.include_router(auth.router, prefix="/auth", tags=["Authentication"])
api_router.include_router(items.router, prefix="/items", tags=["Items"])
