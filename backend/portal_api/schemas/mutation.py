# portal_api/schemas/mutation.py
from __future__ import annotations

from typing import List, Optional

from pydantic import Field, field_validator, model_validator

from portal_api.schemas.common import SchemaBase


class PositionRange(SchemaBase):
    """Inclusive protein position window [start, end]."""
    start: int = Field(..., ge=0)
    end: int = Field(..., ge=0)

    @model_validator(mode="after")
    def _check_bounds(self):
        if self.end < self.start:
            raise ValueError("end must be >= start")
        return self


class MutationCountQuery(SchemaBase):
    gene: str = Field(..., min_length=1)
    position: Optional[PositionRange] = None
    # None: every study. []: no study at all.
    study_ids: Optional[List[str]] = None

    @field_validator("gene", mode="before")
    @classmethod
    def _norm_gene(cls, v):
        if v is None:
            return v
        return str(v).strip().upper()

    @field_validator("study_ids", mode="before")
    @classmethod
    def _norm_study_ids(cls, v):
        if v is None:
            return v
        out: List[str] = []
        for s in v:
            s = str(s).strip()
            if s and s not in out:
                out.append(s)
        return out

    @classmethod
    def from_bounds(
        cls,
        gene: str,
        start: Optional[int] = None,
        end: Optional[int] = None,
        study_ids: Optional[List[str]] = None,
    ) -> "MutationCountQuery":
        if (start is None) != (end is None):
            raise ValueError("start and end must be given together")
        position = PositionRange(start=start, end=end) if start is not None else None
        return cls(gene=gene, position=position, study_ids=study_ids)


class AltCount(SchemaBase):
    study_id: Optional[str] = Field(default=None, description="Cancer study identifier; None on the aggregate record")
    count: int = Field(..., ge=0)
