# portal_api/services/alteration_service.py
from __future__ import annotations

import logging
import math
from typing import Dict, List, Optional, Protocol, Sequence

import numpy as np

from portal_api.db.repositories.genetic_alteration_repo import GeneticAlterationRepo
from portal_api.db.repositories.mutation_repo import MutationRepo
from portal_api.schemas.gene import CanonicalGene, Gene
from portal_api.schemas.genetic_profile import GeneticAlterationType, GeneticProfile

logger = logging.getLogger(__name__)

NAN = "NaN"


def _to_float(value: Optional[str]) -> Optional[float]:
    if value is None:
        return None
    try:
        f = float(value)
    except (TypeError, ValueError):
        return None
    return f if math.isfinite(f) else None


def pearson(xs: Sequence[Optional[str]], ys: Sequence[Optional[str]], *, min_pairs: int = 3) -> Optional[float]:
    """
    Pearson r over positions where both values are numeric.
    None when fewer than `min_pairs` pairs remain or either side is constant.
    """
    pairs = [(a, b) for a, b in ((_to_float(x), _to_float(y)) for x, y in zip(xs, ys)) if a is not None and b is not None]
    if len(pairs) < min_pairs:
        return None
    arr = np.asarray(pairs, dtype=float)
    x, y = arr[:, 0], arr[:, 1]
    if np.std(x) == 0 or np.std(y) == 0:
        return None
    return float(np.corrcoef(x, y)[0, 1])


class AlterationService:
    @staticmethod
    def _align(sample_ids: Sequence[str], ordered_samples: Sequence[str], values: Sequence[str]) -> List[str]:
        index: Dict[str, int] = {s: i for i, s in enumerate(ordered_samples)}
        row: List[str] = []
        for sample_id in sample_ids:
            i = index.get(sample_id)
            if i is None or i >= len(values) or values[i] == "":
                row.append(NAN)
            else:
                row.append(values[i])
        return row

    @staticmethod
    def sample_order(profile: GeneticProfile) -> Optional[List[str]]:
        """Stored column order of `profile`. None for mutation profiles, which keep no vectors."""
        if profile.genetic_alteration_type is GeneticAlterationType.MUTATION_EXTENDED:
            return None
        return GeneticAlterationRepo.get_ordered_sample_list(profile.genetic_profile_id)

    @staticmethod
    def list_feature_rows(
        gene: Gene,
        sample_ids: Sequence[str],
        profile: GeneticProfile,
        *,
        ordered_samples: Optional[Sequence[str]] = None,
    ) -> List[Dict[str, object]]:
        """
        Every stored feature row of `gene` in `profile`, aligned to `sample_ids`.
        Items: {"feature_id": ..., "values": [...]}
        `ordered_samples` is read from the profile when not given.
        """
        ordered = ordered_samples
        if ordered is None:
            ordered = GeneticAlterationRepo.get_ordered_sample_list(profile.genetic_profile_id)
        column, key = gene.alteration_key()
        rows = GeneticAlterationRepo.list_alteration_rows(profile.genetic_profile_id, column, key)
        return [
            {"feature_id": r.get("feature_id"), "values": AlterationService._align(sample_ids, ordered, r["values"])}
            for r in rows
        ]

    @staticmethod
    def _mutation_row(gene: CanonicalGene, sample_ids: Sequence[str], profile: GeneticProfile) -> List[str]:
        rows = MutationRepo.list_mutations(profile.genetic_profile_id, gene.entrez_gene_id, sample_ids)
        changes: Dict[str, List[str]] = {}
        for r in rows:
            pc = r.get("protein_change")
            if not pc:
                continue
            bucket = changes.setdefault(str(r["sample_id"]), [])
            if pc not in bucket:
                bucket.append(str(pc))
        return [",".join(changes[s]) if s in changes else NAN for s in sample_ids]

    @staticmethod
    def get_data_row(
        gene: Gene,
        sample_ids: Sequence[str],
        profile: GeneticProfile,
        *,
        ordered_samples: Optional[Sequence[str]] = None,
    ) -> List[str]:
        """One value per requested sample, in request order."""
        if (
            profile.genetic_alteration_type is GeneticAlterationType.MUTATION_EXTENDED
            and isinstance(gene, CanonicalGene)
        ):
            return AlterationService._mutation_row(gene, sample_ids, profile)

        features = AlterationService.list_feature_rows(gene, sample_ids, profile, ordered_samples=ordered_samples)
        if not features:
            return [NAN] * len(sample_ids)
        return list(features[0]["values"])


class BestCorrelatedSelector(Protocol):
    def select(
        self,
        target_row: Sequence[str],
        candidate_profile: GeneticProfile,
        gene: CanonicalGene,
        sample_ids: Sequence[str],
    ) -> List[str]:
        """Row of `candidate_profile` for `gene` that best tracks `target_row`."""
        ...


class PearsonFeatureSelector:
    """
    Picks the protein-array feature (antibody) of a gene whose values
    correlate best with the target row.
    """

    def __init__(self, min_pairs: int = 3):
        self.min_pairs = min_pairs

    def select(
        self,
        target_row: Sequence[str],
        candidate_profile: GeneticProfile,
        gene: CanonicalGene,
        sample_ids: Sequence[str],
    ) -> List[str]:
        features = AlterationService.list_feature_rows(gene, sample_ids, candidate_profile)
        if not features:
            return [NAN] * len(sample_ids)

        best = None
        best_r = -math.inf
        for f in features:
            r = pearson(target_row, f["values"], min_pairs=self.min_pairs)
            if r is not None and r > best_r:
                best, best_r = f, r

        if best is None:
            best = features[0]
        else:
            logger.debug(
                "best correlated feature for %s in %s: %s (r=%.3f)",
                gene.symbol_all_caps,
                candidate_profile.stable_id,
                best["feature_id"],
                best_r,
            )
        return list(best["values"])
