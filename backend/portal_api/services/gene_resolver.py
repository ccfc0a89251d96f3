# portal_api/services/gene_resolver.py
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Iterable, List, Optional, Set, Union

from portal_api.db.repositories.gene_repo import GeneRepo
from portal_api.db.repositories.micro_rna_repo import MicroRnaRepo
from portal_api.db.supabase_client import parse_row
from portal_api.schemas.gene import CanonicalGene, Gene, MicroRna
from portal_api.schemas.genetic_profile import GeneticAlterationType

logger = logging.getLogger(__name__)

WARNING_UNKNOWN_GENE = "Unknown gene"
WARNING_AMBIGUOUS_GENE = "Gene is ambiguous"
WARNING_UNKNOWN_MICRO_RNA = "Unknown microRNA"


@dataclass
class GeneResolution:
    genes: List[Gene] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)


def _warning(kind: str, gene_id: str) -> str:
    return f"{kind}:  {gene_id}"


class GeneResolver:
    @staticmethod
    def resolve_canonical(gene_id: str) -> Union[CanonicalGene, str]:
        """
        Returns the gene, or a warning string when it cannot be resolved.
        Order: Entrez id (digits) -> HUGO symbol -> alias.
        """
        s = gene_id.strip()
        if s.isdigit():
            row = GeneRepo.get_gene_by_entrez_id(int(s))
            return parse_row(CanonicalGene, row, table="gene") if row else _warning(WARNING_UNKNOWN_GENE, s)

        row = GeneRepo.get_gene_by_symbol(s)
        if row:
            return parse_row(CanonicalGene, row, table="gene")

        alias_rows = GeneRepo.list_genes_by_alias(s)
        if len(alias_rows) == 1:
            return parse_row(CanonicalGene, alias_rows[0], table="gene")
        if len(alias_rows) > 1:
            return _warning(WARNING_AMBIGUOUS_GENE, s)
        return _warning(WARNING_UNKNOWN_GENE, s)

    @staticmethod
    def resolve_micro_rnas(gene_id: str) -> Union[List[MicroRna], str]:
        s = gene_id.strip()
        rows = MicroRnaRepo.list_by_micro_rna_id(s)
        if not rows:
            rows = MicroRnaRepo.list_by_gene_symbol(s)
        if not rows:
            return _warning(WARNING_UNKNOWN_MICRO_RNA, s)
        return [parse_row(MicroRna, r, table="micro_rna") for r in rows]

    @staticmethod
    def get_gene_list(
        gene_ids: Iterable[str],
        alteration_type: Optional[GeneticAlterationType],
    ) -> GeneResolution:
        """
        Resolve requested gene ids against a profile's alteration type.
        Unresolvable ids become warnings; resolution carries on with the rest.
        """
        result = GeneResolution()
        seen: Set[str] = set()
        micro_rna_profile = alteration_type is GeneticAlterationType.MICRO_RNA_EXPRESSION

        for gene_id in gene_ids:
            if gene_id is None or not str(gene_id).strip():
                continue
            gene_id = str(gene_id).strip()

            if micro_rna_profile:
                resolved = GeneResolver.resolve_micro_rnas(gene_id)
                candidates = resolved if isinstance(resolved, list) else None
            else:
                resolved = GeneResolver.resolve_canonical(gene_id)
                candidates = [resolved] if not isinstance(resolved, str) else None

            if candidates is None:
                logger.info("gene resolution miss (%s): %s", alteration_type, resolved)
                result.warnings.append(resolved)
                continue

            for gene in candidates:
                key = "|".join(gene.identifier_columns())
                if key in seen:
                    continue
                seen.add(key)
                result.genes.append(gene)

        return result
