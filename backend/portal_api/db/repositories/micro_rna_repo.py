# portal_api/db/repositories/micro_rna_repo.py
from __future__ import annotations

from typing import Any, Dict, List

from portal_api.db.supabase_client import execute, ensure_list, get_supabase_client


class MicroRnaRepo:
    TABLE = "micro_rna"

    DEFAULT_SELECT = "micro_rna_id,gene_symbol"

    @staticmethod
    def list_by_micro_rna_id(
        micro_rna_id: str,
        *,
        select: str = DEFAULT_SELECT,
    ) -> List[Dict[str, Any]]:
        """Case-insensitive match on the mature microRNA id (e.g. hsa-miR-200a)."""
        sb = get_supabase_client()
        q = (
            sb.table(MicroRnaRepo.TABLE)
            .select(select)
            .ilike("micro_rna_id", micro_rna_id.strip())
            .order("micro_rna_id", desc=False)
        )
        return ensure_list(execute(q).data)

    @staticmethod
    def list_by_gene_symbol(
        gene_symbol: str,
        *,
        select: str = DEFAULT_SELECT,
    ) -> List[Dict[str, Any]]:
        """
        Every microRNA of a family symbol.
        e.g. MIR-200 -> hsa-miR-200a, hsa-miR-200b, hsa-miR-200c
        """
        sb = get_supabase_client()
        q = (
            sb.table(MicroRnaRepo.TABLE)
            .select(select)
            .eq("gene_symbol", gene_symbol.strip().upper())
            .order("micro_rna_id", desc=False)
        )
        return ensure_list(execute(q).data)
