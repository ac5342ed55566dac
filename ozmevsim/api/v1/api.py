"""
API router aggregator: wires all endpoint modules together.
"""

from fastapi import APIRouter

from ozmevsim.api.v1.endpoints import auth, health, users

api_router = APIRouter()

# Login, current user, refresh, logout
api_router.include_router(auth.router)

# User administration, session revocation
api_router.include_router(users.router)

# Health
api_router.include_router(health.router)
