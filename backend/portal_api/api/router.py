# portal_api/api/router.py
from __future__ import annotations

from fastapi import APIRouter

from portal_api.api.routes import mutations, profile_data

router = APIRouter()
router.include_router(profile_data.router)
router.include_router(mutations.router)
