"""Main API router."""

from fastapi import APIRouter

from captioner.api.v1 import captions

api_router = APIRouter()

api_router.include_router(captions.router)
