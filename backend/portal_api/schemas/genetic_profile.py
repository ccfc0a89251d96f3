# portal_api/schemas/genetic_profile.py
from __future__ import annotations

from enum import Enum
from typing import Optional

from pydantic import Field

from portal_api.schemas.common import SchemaBase


class GeneticAlterationType(str, Enum):
    MUTATION_EXTENDED = "MUTATION_EXTENDED"
    FUSION = "FUSION"
    STRUCTURAL_VARIANT = "STRUCTURAL_VARIANT"
    COPY_NUMBER_ALTERATION = "COPY_NUMBER_ALTERATION"
    MICRO_RNA_EXPRESSION = "MICRO_RNA_EXPRESSION"
    MRNA_EXPRESSION = "MRNA_EXPRESSION"
    MRNA_EXPRESSION_NORMALS = "MRNA_EXPRESSION_NORMALS"
    RNA_EXPRESSION = "RNA_EXPRESSION"
    METHYLATION = "METHYLATION"
    METHYLATION_BINARY = "METHYLATION_BINARY"
    PHOSPHORYLATION = "PHOSPHORYLATION"
    PROTEIN_LEVEL = "PROTEIN_LEVEL"
    PROTEIN_ARRAY_PROTEIN_LEVEL = "PROTEIN_ARRAY_PROTEIN_LEVEL"
    PROTEIN_ARRAY_PHOSPHORYLATION = "PROTEIN_ARRAY_PHOSPHORYLATION"

    def __str__(self) -> str:
        return self.value


class GeneticProfile(SchemaBase):
    genetic_profile_id: int
    stable_id: str = Field(..., min_length=1)
    cancer_study_id: Optional[int] = None
    genetic_alteration_type: GeneticAlterationType
    datatype: Optional[str] = None
    profile_name: str = Field(..., alias="name")
    description: Optional[str] = None
    show_profile_in_analysis_tab: bool = True

    @property
    def is_protein_array_protein_level(self) -> bool:
        return self.genetic_alteration_type is GeneticAlterationType.PROTEIN_ARRAY_PROTEIN_LEVEL
