# portal_api/services/profile_data_service.py
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

from portal_api.db.repositories.genetic_profile_repo import GeneticProfileRepo
from portal_api.db.supabase_client import parse_row
from portal_api.schemas.gene import CanonicalGene, Gene
from portal_api.schemas.genetic_profile import GeneticProfile
from portal_api.services.alteration_service import (
    NAN,
    AlterationService,
    BestCorrelatedSelector,
    PearsonFeatureSelector,
)
from portal_api.services.gene_resolver import GeneResolver
from portal_api.utils.matrix import TAB, parse_matrix, split_id_list, tab_row

logger = logging.getLogger(__name__)

# label used by the web API for the profile parameter
GENETIC_PROFILE_ID = "genetic_profile_id"

SINGLE_PROFILE_HEADER = ("GENE_ID", "COMMON")
MULTI_PROFILE_HEADER = ("GENETIC_PROFILE_ID", "ALTERATION_TYPE", "GENE_ID", "COMMON")


def missing_profile_message(stable_id: str) -> str:
    return f"No genetic profile available for {GENETIC_PROFILE_ID}:  {stable_id}."


@dataclass
class WarningLog:
    """Warnings collected while one export is assembled."""
    messages: List[str] = field(default_factory=list)

    def extend(self, warnings: Iterable[str]) -> None:
        for w in warnings:
            if w not in self.messages:
                self.messages.append(w)


class ProfileData:
    """
    A single-profile matrix indexed by (gene symbol, sample id).

    The matrix is the parsed export: row 0 is the GENE_ID/COMMON/sample
    header, each further row is one gene.
    """

    def __init__(self, profile: GeneticProfile, matrix: List[List[str]]):
        self.profile = profile
        self.matrix = matrix
        self._values: Dict[Tuple[str, str], str] = {}
        self.sample_ids: List[str] = []
        self.gene_symbols: List[str] = []

        if not matrix or tuple(matrix[0][:2]) != SINGLE_PROFILE_HEADER:
            return

        self.sample_ids = list(matrix[0][2:])
        for row in matrix[1:]:
            if len(row) < 2:
                continue
            symbol = row[1]
            self.gene_symbols.append(symbol)
            for sample_id, value in zip(self.sample_ids, row[2:]):
                self._values[(symbol.upper(), sample_id)] = value

    def value(self, gene_symbol: str, sample_id: str) -> Optional[str]:
        return self._values.get((gene_symbol.upper(), sample_id))


@dataclass(frozen=True)
class ProfileDataResult:
    raw_content: str
    matrix: List[List[str]]
    warnings: List[str]
    profile_data: Optional[ProfileData] = None


def _gene_row(prefix: Sequence[str], gene: Gene, data_row: Sequence[str]) -> str:
    return tab_row([*prefix, *gene.identifier_columns(), *data_row])


class ProfileDataService:
    selector: BestCorrelatedSelector = PearsonFeatureSelector()

    # -----------------------
    # Entry points
    # -----------------------
    @staticmethod
    def get_profile_data(
        profile_ids: Sequence[str],
        gene_ids: Sequence[str],
        sample_ids: Sequence[str],
        *,
        suppress_mondrian_header: bool = False,
        selector: Optional[BestCorrelatedSelector] = None,
    ) -> ProfileDataResult:
        """
        Build the tab-delimited profile-data export.

        One profile: one row per resolved gene. Several profiles: one row per
        profile (first resolved gene). An unknown profile stable id
        short-circuits into a single informational line.
        """
        if not profile_ids:
            raise ValueError("at least one genetic profile id is required")

        warnings = WarningLog()
        content, profiles = ProfileDataService._build_content(
            list(profile_ids),
            list(gene_ids),
            list(sample_ids),
            suppress_mondrian_header=suppress_mondrian_header,
            selector=selector or ProfileDataService.selector,
            warnings=warnings,
        )
        matrix = parse_matrix(content)

        profile_data = None
        if len(profile_ids) == 1 and profiles:
            profile_data = ProfileData(profiles[0], matrix)

        return ProfileDataResult(
            raw_content=content,
            matrix=matrix,
            warnings=list(warnings.messages),
            profile_data=profile_data,
        )

    @staticmethod
    def for_profile(profile: GeneticProfile, gene_ids: Sequence[str], sample_ids: str) -> ProfileDataResult:
        """Single already-loaded profile, whitespace-delimited samples, no Mondrian header."""
        return ProfileDataService.get_profile_data(
            [profile.stable_id],
            gene_ids,
            split_id_list(sample_ids),
            suppress_mondrian_header=True,
        )

    # -----------------------
    # Assembly
    # -----------------------
    @staticmethod
    def _resolve_profiles(profile_ids: Sequence[str]) -> Tuple[List[GeneticProfile], Optional[str]]:
        """Stops at the first unknown stable id and returns it."""
        profiles: List[GeneticProfile] = []
        for stable_id in profile_ids:
            row = GeneticProfileRepo.get_profile_by_stable_id(stable_id)
            if row is None:
                return profiles, stable_id
            profiles.append(parse_row(GeneticProfile, row, table="genetic_profile"))
        return profiles, None

    @staticmethod
    def _first_gene(
        profile: GeneticProfile,
        gene_ids: Sequence[str],
        warnings: WarningLog,
    ) -> Optional[Gene]:
        resolution = GeneResolver.get_gene_list(gene_ids, profile.genetic_alteration_type)
        warnings.extend(resolution.warnings)
        return resolution.genes[0] if resolution.genes else None

    @staticmethod
    def _build_content(
        profile_ids: List[str],
        gene_ids: List[str],
        sample_ids: List[str],
        *,
        suppress_mondrian_header: bool,
        selector: BestCorrelatedSelector,
        warnings: WarningLog,
    ) -> Tuple[str, List[GeneticProfile]]:
        profiles, missing = ProfileDataService._resolve_profiles(profile_ids)
        if missing is not None:
            logger.info("profile-data request stopped: unknown genetic profile %r", missing)
            return missing_profile_message(missing) + "\n", []

        if len(profiles) == 1:
            content = ProfileDataService._single_profile(
                profiles[0], gene_ids, sample_ids, suppress_mondrian_header, warnings
            )
        else:
            content = ProfileDataService._multi_profile(profiles, gene_ids, sample_ids, selector, warnings)
        return content, profiles

    @staticmethod
    def _single_profile(
        profile: GeneticProfile,
        gene_ids: List[str],
        sample_ids: List[str],
        suppress_mondrian_header: bool,
        warnings: WarningLog,
    ) -> str:
        resolution = GeneResolver.get_gene_list(gene_ids, profile.genetic_alteration_type)
        warnings.extend(resolution.warnings)

        parts: List[str] = []
        # DATA_TYPE / COLOR_GRADIENT_SETTINGS are read by the Mondrian Cytoscape plugin
        if not suppress_mondrian_header:
            parts.append(f"# DATA_TYPE{TAB}{profile.profile_name}\n")
            parts.append(f"# COLOR_GRADIENT_SETTINGS{TAB}{profile.genetic_alteration_type.value}\n")

        parts.append(tab_row([*SINGLE_PROFILE_HEADER, *sample_ids]))
        ordered = AlterationService.sample_order(profile) if resolution.genes else None
        for gene in resolution.genes:
            data_row = AlterationService.get_data_row(gene, sample_ids, profile, ordered_samples=ordered)
            parts.append(_gene_row((), gene, data_row))
        return "".join(parts)

    @staticmethod
    def _multi_profile(
        profiles: List[GeneticProfile],
        gene_ids: List[str],
        sample_ids: List[str],
        selector: BestCorrelatedSelector,
        warnings: WarningLog,
    ) -> str:
        parts: List[str] = [tab_row([*MULTI_PROFILE_HEADER, *sample_ids])]

        protein_array = [p for p in profiles if p.is_protein_array_protein_level]
        if len(profiles) == 2 and len(protein_array) == 1:
            rppa = protein_array[0]
            primary = profiles[0] if profiles[1] is rppa else profiles[1]
            parts.extend(
                ProfileDataService._protein_array_pair(primary, rppa, gene_ids, sample_ids, selector, warnings)
            )
            return "".join(parts)

        for profile in profiles:
            gene = ProfileDataService._first_gene(profile, gene_ids, warnings)
            if gene is None:
                continue
            data_row = AlterationService.get_data_row(gene, sample_ids, profile)
            parts.append(_gene_row(_profile_prefix(profile), gene, data_row))
        return "".join(parts)

    @staticmethod
    def _protein_array_pair(
        primary: GeneticProfile,
        rppa: GeneticProfile,
        gene_ids: List[str],
        sample_ids: List[str],
        selector: BestCorrelatedSelector,
        warnings: WarningLog,
    ) -> List[str]:
        """
        Primary profile row first, then the protein-array row whose feature
        correlates best with it.
        """
        rows: List[str] = []
        target_row: List[str] = [NAN] * len(sample_ids)

        gene = ProfileDataService._first_gene(primary, gene_ids, warnings)
        if gene is not None:
            target_row = AlterationService.get_data_row(gene, sample_ids, primary)
            rows.append(_gene_row(_profile_prefix(primary), gene, target_row))

        gene = ProfileDataService._first_gene(rppa, gene_ids, warnings)
        if gene is not None:
            if isinstance(gene, CanonicalGene):
                data_row = selector.select(target_row, rppa, gene, sample_ids)
            else:
                data_row = AlterationService.get_data_row(gene, sample_ids, rppa)
            rows.append(_gene_row(_profile_prefix(rppa), gene, data_row))
        return rows


def _profile_prefix(profile: GeneticProfile) -> Tuple[str, str]:
    return profile.stable_id, profile.genetic_alteration_type.value
