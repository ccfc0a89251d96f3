# portal_api/db/repositories/mutation_repo.py
from __future__ import annotations

from typing import Any, Dict, List, Sequence, Set, Tuple

from portal_api.db.supabase_client import fetch_all, get_supabase_client
from portal_api.schemas.mutation import AltCount, MutationCountQuery


class MutationRepo:
    """
    mutation table + mutation_event_sample view access

    mutation_event_sample is a read-only view with one row per
    (mutation event, sample): hugo_gene_symbol, cancer_study_identifier,
    sample_id, protein_pos_start, protein_pos_end.
    """

    TABLE = "mutation"
    COUNT_VIEW = "mutation_event_sample"

    DEFAULT_SELECT = "genetic_profile_id,entrez_gene_id,sample_id,protein_change"
    COUNT_SELECT = "cancer_study_identifier,sample_id"

    @staticmethod
    def list_mutations(
        genetic_profile_id: int,
        entrez_gene_id: int,
        sample_ids: Sequence[str],
        *,
        select: str = DEFAULT_SELECT,
    ) -> List[Dict[str, Any]]:
        if not sample_ids:
            return []
        sb = get_supabase_client()
        samples = list(sample_ids)

        def build():
            return (
                sb.table(MutationRepo.TABLE)
                .select(select)
                .eq("genetic_profile_id", int(genetic_profile_id))
                .eq("entrez_gene_id", int(entrez_gene_id))
                .in_("sample_id", samples)
                .order("sample_id", desc=False)
                .order("protein_change", desc=False)
            )

        return fetch_all(build)

    # -----------------------
    # Mutation counts
    # -----------------------
    @staticmethod
    def _matching_samples(query: MutationCountQuery) -> Set[Tuple[str, str]]:
        """Distinct (study, sample) pairs with a mutation matching `query`."""
        if query.study_ids is not None and not query.study_ids:
            return set()

        sb = get_supabase_client()

        def build():
            q = (
                sb.table(MutationRepo.COUNT_VIEW)
                .select(MutationRepo.COUNT_SELECT)
                .eq("hugo_gene_symbol", query.gene)
            )
            if query.position is not None:
                q = q.gte("protein_pos_start", query.position.start).lte("protein_pos_end", query.position.end)
            if query.study_ids is not None:
                q = q.in_("cancer_study_identifier", query.study_ids)
            return q.order("cancer_study_identifier", desc=False).order("sample_id", desc=False)

        rows = fetch_all(build)
        return {(str(r["cancer_study_identifier"]), str(r["sample_id"])) for r in rows}

    @staticmethod
    def count_per_study(query: MutationCountQuery) -> List[AltCount]:
        """One record per study with at least one mutated sample, ordered by study id."""
        per_study: Dict[str, int] = {}
        for study_id, _sample_id in MutationRepo._matching_samples(query):
            per_study[study_id] = per_study.get(study_id, 0) + 1
        return [AltCount(study_id=s, count=per_study[s]) for s in sorted(per_study)]

    @staticmethod
    def count(query: MutationCountQuery) -> AltCount:
        """Same filters as count_per_study, summed into a single record."""
        return AltCount(study_id=None, count=len(MutationRepo._matching_samples(query)))
