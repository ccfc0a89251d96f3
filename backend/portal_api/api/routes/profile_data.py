# portal_api/api/routes/profile_data.py
from __future__ import annotations

from typing import List, Optional

from fastapi import APIRouter, Query
from fastapi.responses import PlainTextResponse

from portal_api.schemas.profile_data import ProfileMatrixResponse
from portal_api.services.profile_data_service import ProfileDataResult, ProfileDataService
from portal_api.utils.matrix import merge_id_lists

router = APIRouter(prefix="/profile-data", tags=["profile-data"])

WARNINGS_HEADER = "X-Portal-Warnings"


def _warnings_header(warnings: List[str]) -> str:
    # header values go out as latin-1; unresolved ids are echoed back verbatim
    return "; ".join(warnings).encode("latin-1", "backslashreplace").decode("latin-1")


def _run(
    genetic_profile_id: Optional[List[str]],
    gene_list: Optional[List[str]],
    case_list: Optional[List[str]],
    suppress_mondrian_header: bool,
) -> ProfileDataResult:
    profile_ids = merge_id_lists(genetic_profile_id)
    gene_ids = merge_id_lists(gene_list)
    sample_ids = merge_id_lists(case_list)

    if not profile_ids:
        raise ValueError("genetic_profile_id is required")
    if not gene_ids:
        raise ValueError("gene_list is required")
    if not sample_ids:
        raise ValueError("case_list is required")

    return ProfileDataService.get_profile_data(
        profile_ids,
        gene_ids,
        sample_ids,
        suppress_mondrian_header=suppress_mondrian_header,
    )


@router.get("", response_class=PlainTextResponse)
def get_profile_data(
    genetic_profile_id: Optional[List[str]] = Query(None, description="Profile stable ids (repeat or delimit)"),
    gene_list: Optional[List[str]] = Query(None, description="Gene symbols / Entrez ids / microRNA ids"),
    case_list: Optional[List[str]] = Query(None, description="Sample ids, whitespace/comma delimited"),
    suppress_mondrian_header: bool = Query(False),
) -> PlainTextResponse:
    """
    Tab-delimited genomic profile data.
    """
    result = _run(genetic_profile_id, gene_list, case_list, suppress_mondrian_header)
    headers = {WARNINGS_HEADER: _warnings_header(result.warnings)} if result.warnings else None
    return PlainTextResponse(result.raw_content, headers=headers)


@router.get("/matrix", response_model=ProfileMatrixResponse)
def get_profile_matrix(
    genetic_profile_id: Optional[List[str]] = Query(None),
    gene_list: Optional[List[str]] = Query(None),
    case_list: Optional[List[str]] = Query(None),
    suppress_mondrian_header: bool = Query(True),
) -> ProfileMatrixResponse:
    result = _run(genetic_profile_id, gene_list, case_list, suppress_mondrian_header)
    return ProfileMatrixResponse(
        raw_content=result.raw_content,
        matrix=result.matrix,
        warnings=result.warnings,
        profile=result.profile_data.profile if result.profile_data else None,
    )
