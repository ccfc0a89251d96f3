# portal_api/services/mutation_service.py
from __future__ import annotations

import logging
from typing import List, Optional

from portal_api.db.repositories.mutation_repo import MutationRepo
from portal_api.schemas.mutation import AltCount, MutationCountQuery

logger = logging.getLogger(__name__)


class MutationService:
    @staticmethod
    def count_per_study(
        *,
        gene: str,
        start: Optional[int] = None,
        end: Optional[int] = None,
        study_ids: Optional[List[str]] = None,
    ) -> List[AltCount]:
        query = MutationCountQuery.from_bounds(gene, start, end, study_ids)
        counts = MutationRepo.count_per_study(query)
        logger.debug("mutation counts per study for %s: %d studies", query.gene, len(counts))
        return counts

    @staticmethod
    def count(
        *,
        gene: str,
        start: Optional[int] = None,
        end: Optional[int] = None,
        study_ids: Optional[List[str]] = None,
    ) -> AltCount:
        query = MutationCountQuery.from_bounds(gene, start, end, study_ids)
        return MutationRepo.count(query)
