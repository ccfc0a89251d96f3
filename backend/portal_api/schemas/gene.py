# portal_api/schemas/gene.py
from __future__ import annotations

from typing import Annotated, Literal, Optional, Tuple, Union

from pydantic import ConfigDict, Field

from portal_api.schemas.common import SchemaBase

# Placed in the GENE_ID column for microRNAs, which have no Entrez id.
MICRO_RNA_GENE_ID = "-999999"


class CanonicalGene(SchemaBase):
    model_config = ConfigDict(populate_by_name=True, extra="ignore", frozen=True)

    kind: Literal["canonical"] = "canonical"
    # negative ids mark pseudo-genes such as phosphoprotein entries
    entrez_gene_id: int
    hugo_gene_symbol: str = Field(..., min_length=1)
    type: Optional[str] = None

    @property
    def symbol_all_caps(self) -> str:
        return self.hugo_gene_symbol.upper()

    def identifier_columns(self) -> Tuple[str, str]:
        return str(self.entrez_gene_id), self.symbol_all_caps

    def alteration_key(self) -> Tuple[str, object]:
        """(column, value) locating this gene's rows in genetic_alteration."""
        return "entrez_gene_id", self.entrez_gene_id


class MicroRna(SchemaBase):
    model_config = ConfigDict(populate_by_name=True, extra="ignore", frozen=True)

    kind: Literal["micro_rna"] = "micro_rna"
    micro_rna_id: str = Field(..., min_length=1)
    gene_symbol: str = ""

    def identifier_columns(self) -> Tuple[str, str]:
        return MICRO_RNA_GENE_ID, self.micro_rna_id

    def alteration_key(self) -> Tuple[str, object]:
        return "micro_rna_id", self.micro_rna_id


Gene = Annotated[Union[CanonicalGene, MicroRna], Field(discriminator="kind")]
