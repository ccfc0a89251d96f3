# portal_api/db/repositories/gene_repo.py
from __future__ import annotations

from typing import Any, Dict, List, Optional

from portal_api.db.supabase_client import execute, ensure_list, get_supabase_client


class GeneRepo:
    TABLE = "gene"
    ALIAS_TABLE = "gene_alias"

    DEFAULT_SELECT = "entrez_gene_id,hugo_gene_symbol,type"

    @staticmethod
    def get_gene_by_entrez_id(
        entrez_gene_id: int,
        *,
        select: str = DEFAULT_SELECT,
    ) -> Optional[Dict[str, Any]]:
        sb = get_supabase_client()
        q = sb.table(GeneRepo.TABLE).select(select).eq("entrez_gene_id", int(entrez_gene_id)).limit(1)
        rows = ensure_list(execute(q).data)
        return rows[0] if rows else None

    @staticmethod
    def get_gene_by_symbol(
        hugo_gene_symbol: str,
        *,
        select: str = DEFAULT_SELECT,
    ) -> Optional[Dict[str, Any]]:
        """Exact match on the upper-cased HUGO symbol."""
        sb = get_supabase_client()
        q = (
            sb.table(GeneRepo.TABLE)
            .select(select)
            .eq("hugo_gene_symbol", hugo_gene_symbol.strip().upper())
            .limit(1)
        )
        rows = ensure_list(execute(q).data)
        return rows[0] if rows else None

    @staticmethod
    def list_genes_by_alias(
        alias: str,
        *,
        select: str = DEFAULT_SELECT,
    ) -> List[Dict[str, Any]]:
        """
        All genes carrying `alias` as a previous/alternative symbol.
        More than one row means the alias is ambiguous.
        """
        sb = get_supabase_client()
        q = (
            sb.table(GeneRepo.ALIAS_TABLE)
            .select("entrez_gene_id")
            .eq("gene_alias", alias.strip().upper())
        )
        alias_rows = ensure_list(execute(q).data)
        entrez_ids = sorted({int(r["entrez_gene_id"]) for r in alias_rows})
        if not entrez_ids:
            return []

        q = (
            sb.table(GeneRepo.TABLE)
            .select(select)
            .in_("entrez_gene_id", entrez_ids)
            .order("entrez_gene_id", desc=False)
        )
        return ensure_list(execute(q).data)
