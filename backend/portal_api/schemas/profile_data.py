# portal_api/schemas/profile_data.py
from __future__ import annotations

from typing import List, Optional

from pydantic import Field

from portal_api.schemas.common import SchemaBase
from portal_api.schemas.genetic_profile import GeneticProfile


class ProfileMatrixResponse(SchemaBase):
    """
    JSON rendition of a profile-data export.
    `profile` is only filled when exactly one genetic profile was requested.
    """
    raw_content: str
    matrix: List[List[str]]
    warnings: List[str] = Field(default_factory=list)
    profile: Optional[GeneticProfile] = None
