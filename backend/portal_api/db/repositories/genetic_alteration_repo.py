# portal_api/db/repositories/genetic_alteration_repo.py
from __future__ import annotations

from typing import Any, Dict, List

from portal_api.db.supabase_client import execute, ensure_list, fetch_all, get_supabase_client


def _split_csv(value: Any) -> List[str]:
    """Stored vectors are comma-separated and may end with a trailing comma."""
    if value is None:
        return []
    parts = str(value).split(",")
    if parts and parts[-1] == "":
        parts = parts[:-1]
    return [p.strip() for p in parts]


class GeneticAlterationRepo:
    """
    genetic_alteration / genetic_profile_samples access

    A profile stores one ordered sample list; every alteration row holds a
    value vector in that same order.
    """

    TABLE = "genetic_alteration"
    SAMPLES_TABLE = "genetic_profile_samples"

    DEFAULT_SELECT = "genetic_profile_id,entrez_gene_id,micro_rna_id,feature_id,values"

    @staticmethod
    def get_ordered_sample_list(genetic_profile_id: int) -> List[str]:
        sb = get_supabase_client()
        q = (
            sb.table(GeneticAlterationRepo.SAMPLES_TABLE)
            .select("genetic_profile_id,ordered_sample_list")
            .eq("genetic_profile_id", int(genetic_profile_id))
            .limit(1)
        )
        rows = ensure_list(execute(q).data)
        if not rows:
            return []
        return _split_csv(rows[0].get("ordered_sample_list"))

    @staticmethod
    def list_alteration_rows(
        genetic_profile_id: int,
        key_column: str,
        key_value: Any,
        *,
        select: str = DEFAULT_SELECT,
    ) -> List[Dict[str, Any]]:
        """
        Alteration rows of one gene (entrez_gene_id) or microRNA (micro_rna_id),
        ordered by feature_id. `values` comes back already split into a list.
        """
        if key_column not in {"entrez_gene_id", "micro_rna_id"}:
            raise ValueError(f"unsupported alteration key column: {key_column}")

        sb = get_supabase_client()

        def build():
            return (
                sb.table(GeneticAlterationRepo.TABLE)
                .select(select)
                .eq("genetic_profile_id", int(genetic_profile_id))
                .eq(key_column, key_value)
                .order("feature_id", desc=False)
            )

        rows = fetch_all(build)

        out: List[Dict[str, Any]] = []
        for r in rows:
            row = dict(r)
            row["values"] = _split_csv(r.get("values"))
            out.append(row)
        return out
