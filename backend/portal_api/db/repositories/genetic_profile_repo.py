# portal_api/db/repositories/genetic_profile_repo.py
from __future__ import annotations

from typing import Any, Dict, Optional

from portal_api.db.supabase_client import execute, ensure_list, get_supabase_client


class GeneticProfileRepo:
    TABLE = "genetic_profile"

    DEFAULT_SELECT = (
        "genetic_profile_id,stable_id,cancer_study_id,genetic_alteration_type,"
        "datatype,name,description,show_profile_in_analysis_tab"
    )

    @staticmethod
    def get_profile_by_stable_id(
        stable_id: str,
        *,
        select: str = DEFAULT_SELECT,
    ) -> Optional[Dict[str, Any]]:
        """
        Look a profile up by its stable id (e.g. "brca_tcga_mutations").
        None when no profile carries that id.
        """
        sb = get_supabase_client()
        q = sb.table(GeneticProfileRepo.TABLE).select(select).eq("stable_id", stable_id).limit(1)
        rows = ensure_list(execute(q).data)
        if not rows:
            return None
        return rows[0]
