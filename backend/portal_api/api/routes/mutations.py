# portal_api/api/routes/mutations.py
from __future__ import annotations

from typing import List, Optional

from fastapi import APIRouter, Query

from portal_api.schemas.mutation import AltCount
from portal_api.services.mutation_service import MutationService
from portal_api.utils.matrix import merge_id_lists

router = APIRouter(prefix="/mutations", tags=["mutations"])


def _study_filter(study_id: Optional[List[str]]) -> Optional[List[str]]:
    # no study_id param at all means "every study"
    if study_id is None:
        return None
    return merge_id_lists(study_id)


@router.get("/counts", response_model=AltCount)
def get_mutation_count(
    gene: str = Query(..., min_length=1, description="HUGO gene symbol"),
    start: Optional[int] = Query(None, ge=0, description="Protein position start (inclusive)"),
    end: Optional[int] = Query(None, ge=0, description="Protein position end (inclusive)"),
    study_id: Optional[List[str]] = Query(None, description="Restrict to these cancer studies"),
) -> AltCount:
    return MutationService.count(gene=gene, start=start, end=end, study_ids=_study_filter(study_id))


@router.get("/counts/per-study", response_model=List[AltCount])
def get_mutation_counts_per_study(
    gene: str = Query(..., min_length=1),
    start: Optional[int] = Query(None, ge=0),
    end: Optional[int] = Query(None, ge=0),
    study_id: Optional[List[str]] = Query(None),
) -> List[AltCount]:
    return MutationService.count_per_study(gene=gene, start=start, end=end, study_ids=_study_filter(study_id))
