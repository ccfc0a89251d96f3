from __future__ import annotations

import copy
import os
import re
from types import SimpleNamespace
from typing import Any, Callable, Dict, List, Optional

import pytest

os.environ.setdefault("SUPABASE_URL", "http://localhost:54321")
os.environ.setdefault("SUPABASE_SERVICE_KEY", "test-service-key")
os.environ.setdefault("ENV", "test")
os.environ.setdefault("DEBUG", "true")
# small pages so counting queries really page
os.environ.setdefault("DB_PAGE_SIZE", "2")

from portal_api.core.config import get_settings  # noqa: E402

get_settings.cache_clear()

REPO_MODULES = (
    "portal_api.db.supabase_client",
    "portal_api.db.repositories.genetic_profile_repo",
    "portal_api.db.repositories.gene_repo",
    "portal_api.db.repositories.micro_rna_repo",
    "portal_api.db.repositories.genetic_alteration_repo",
    "portal_api.db.repositories.mutation_repo",
    "portal_api.main",
)


def _like(pattern: str) -> "re.Pattern[str]":
    rx = "".join(".*" if c == "%" else "." if c == "_" else re.escape(c) for c in pattern)
    return re.compile(f"^{rx}$", re.IGNORECASE)


class FakeQuery:
    """Just enough of the postgrest select builder for the repositories."""

    def __init__(self, db: "FakeSupabase", table: str):
        self.db = db
        self.table_name = table
        self.columns: Optional[List[str]] = None
        self.filters: List[Callable[[Dict[str, Any]], bool]] = []
        self.orders: List[tuple] = []
        self._limit: Optional[int] = None
        self._range: Optional[tuple] = None

    def select(self, columns: str = "*", count: Optional[str] = None):
        cols = [c.strip() for c in columns.split(",") if c.strip()]
        self.columns = None if cols == ["*"] else cols
        return self

    def eq(self, col, value):
        self.filters.append(lambda r: r.get(col) == value)
        return self

    def in_(self, col, values):
        vals = list(values)
        self.filters.append(lambda r: r.get(col) in vals)
        return self

    def gte(self, col, value):
        self.filters.append(lambda r: r.get(col) is not None and r.get(col) >= value)
        return self

    def lte(self, col, value):
        self.filters.append(lambda r: r.get(col) is not None and r.get(col) <= value)
        return self

    def ilike(self, col, pattern):
        rx = _like(pattern)
        self.filters.append(lambda r: r.get(col) is not None and bool(rx.match(str(r.get(col)))))
        return self

    def order(self, col, desc=False):
        self.orders.append((col, desc))
        return self

    def limit(self, n):
        self._limit = n
        return self

    def range(self, start, end):
        self._range = (start, end)
        return self

    def execute(self):
        self.db.calls.append(self.table_name)
        if self.table_name in self.db.failing_tables:
            raise RuntimeError(f"connection reset while reading {self.table_name}")

        rows = [r for r in self.db.tables.get(self.table_name, []) if all(f(r) for f in self.filters)]
        for col, desc in reversed(self.orders):
            rows.sort(key=lambda r: (r.get(col) is None, r.get(col)), reverse=desc)
        if self._range is not None:
            rows = rows[self._range[0]: self._range[1] + 1]
        if self._limit is not None:
            rows = rows[: self._limit]
        if self.columns is not None:
            rows = [{c: r.get(c) for c in self.columns} for r in rows]
        return SimpleNamespace(data=copy.deepcopy(rows), count=None)


class FakeSupabase:
    def __init__(self, tables: Dict[str, List[Dict[str, Any]]]):
        self.tables = tables
        self.calls: List[str] = []
        self.failing_tables: set = set()

    def table(self, name: str) -> FakeQuery:
        return FakeQuery(self, name)

    def count_calls(self, table: str) -> int:
        return sum(1 for c in self.calls if c == table)


def seed_tables() -> Dict[str, List[Dict[str, Any]]]:
    return {
        "genetic_profile": [
            {
                "genetic_profile_id": 1,
                "stable_id": "brca_tcga_mrna",
                "cancer_study_id": 10,
                "genetic_alteration_type": "MRNA_EXPRESSION",
                "datatype": "CONTINUOUS",
                "name": "mRNA expression (microarray)",
                "description": "Expression levels",
                "show_profile_in_analysis_tab": False,
            },
            {
                "genetic_profile_id": 2,
                "stable_id": "brca_tcga_rppa",
                "cancer_study_id": 10,
                "genetic_alteration_type": "PROTEIN_ARRAY_PROTEIN_LEVEL",
                "datatype": "LOG2-VALUE",
                "name": "Protein levels (RPPA)",
                "description": None,
                "show_profile_in_analysis_tab": False,
            },
            {
                "genetic_profile_id": 3,
                "stable_id": "brca_tcga_mutations",
                "cancer_study_id": 10,
                "genetic_alteration_type": "MUTATION_EXTENDED",
                "datatype": "MAF",
                "name": "Mutations",
                "description": None,
                "show_profile_in_analysis_tab": True,
            },
            {
                "genetic_profile_id": 4,
                "stable_id": "brca_tcga_mirna",
                "cancer_study_id": 10,
                "genetic_alteration_type": "MICRO_RNA_EXPRESSION",
                "datatype": "CONTINUOUS",
                "name": "microRNA expression",
                "description": None,
                "show_profile_in_analysis_tab": False,
            },
            {
                "genetic_profile_id": 5,
                "stable_id": "brca_tcga_gistic",
                "cancer_study_id": 10,
                "genetic_alteration_type": "COPY_NUMBER_ALTERATION",
                "datatype": "DISCRETE",
                "name": "Putative copy-number alterations from GISTIC",
                "description": None,
                "show_profile_in_analysis_tab": True,
            },
            {
                "genetic_profile_id": 6,
                "stable_id": "brca_tcga_rppa_zscores",
                "cancer_study_id": 10,
                "genetic_alteration_type": "PROTEIN_ARRAY_PROTEIN_LEVEL",
                "datatype": "Z-SCORE",
                "name": "Protein levels (RPPA z-scores)",
                "description": None,
                "show_profile_in_analysis_tab": False,
            },
        ],
        "gene": [
            {"entrez_gene_id": 7157, "hugo_gene_symbol": "TP53", "type": "protein-coding"},
            {"entrez_gene_id": 672, "hugo_gene_symbol": "BRCA1", "type": "protein-coding"},
            {"entrez_gene_id": 675, "hugo_gene_symbol": "BRCA2", "type": "protein-coding"},
            {"entrez_gene_id": 1956, "hugo_gene_symbol": "EGFR", "type": "protein-coding"},
        ],
        "gene_alias": [
            {"entrez_gene_id": 7157, "gene_alias": "P53"},
            {"entrez_gene_id": 675, "gene_alias": "FANCD1"},
            {"entrez_gene_id": 672, "gene_alias": "BRCAX"},
            {"entrez_gene_id": 675, "gene_alias": "BRCAX"},
        ],
        "micro_rna": [
            {"micro_rna_id": "hsa-miR-200a", "gene_symbol": "MIR-200"},
            {"micro_rna_id": "hsa-miR-200b", "gene_symbol": "MIR-200"},
            {"micro_rna_id": "hsa-miR-21", "gene_symbol": "MIR-21"},
        ],
        "genetic_profile_samples": [
            {"genetic_profile_id": 1, "ordered_sample_list": "S1,S2,S3,S4,"},
            {"genetic_profile_id": 2, "ordered_sample_list": "S1,S2,S3,S4,"},
            {"genetic_profile_id": 4, "ordered_sample_list": "S1,S2,S3,"},
            {"genetic_profile_id": 5, "ordered_sample_list": "S1,S2,S3,S4,"},
            {"genetic_profile_id": 6, "ordered_sample_list": "S1,S2,S3,S4,"},
        ],
        "genetic_alteration": [
            {"genetic_profile_id": 1, "entrez_gene_id": 7157, "micro_rna_id": None, "feature_id": None,
             "values": "1.0,2.0,3.0,4.0,"},
            {"genetic_profile_id": 1, "entrez_gene_id": 672, "micro_rna_id": None, "feature_id": None,
             "values": "0.5,NaN,1.5,2.5,"},
            {"genetic_profile_id": 2, "entrez_gene_id": 7157, "micro_rna_id": None, "feature_id": "TP53_ab1",
             "values": "4.0,3.0,2.0,1.0,"},
            {"genetic_profile_id": 2, "entrez_gene_id": 7157, "micro_rna_id": None, "feature_id": "TP53_ab2",
             "values": "1.1,2.2,2.9,4.2,"},
            {"genetic_profile_id": 4, "entrez_gene_id": None, "micro_rna_id": "hsa-miR-200a", "feature_id": None,
             "values": "0.1,0.2,0.3,"},
            {"genetic_profile_id": 4, "entrez_gene_id": None, "micro_rna_id": "hsa-miR-21", "feature_id": None,
             "values": "5,6,7,"},
            {"genetic_profile_id": 5, "entrez_gene_id": 7157, "micro_rna_id": None, "feature_id": None,
             "values": "-2,0,1,2,"},
            {"genetic_profile_id": 5, "entrez_gene_id": 672, "micro_rna_id": None, "feature_id": None,
             "values": "0,0,1,0,"},
            {"genetic_profile_id": 6, "entrez_gene_id": 7157, "micro_rna_id": None, "feature_id": "TP53_ab1",
             "values": "0.4,0.3,0.2,0.1,"},
            {"genetic_profile_id": 6, "entrez_gene_id": 7157, "micro_rna_id": None, "feature_id": "TP53_ab2",
             "values": "-0.5,0.1,0.6,1.2,"},
        ],
        "mutation": [
            {"genetic_profile_id": 3, "entrez_gene_id": 7157, "sample_id": "S1", "protein_change": "R273H"},
            {"genetic_profile_id": 3, "entrez_gene_id": 7157, "sample_id": "S1", "protein_change": "R175H"},
            {"genetic_profile_id": 3, "entrez_gene_id": 7157, "sample_id": "S3", "protein_change": "R248Q"},
            {"genetic_profile_id": 3, "entrez_gene_id": 672, "sample_id": "S2", "protein_change": "E1682*"},
        ],
        "mutation_event_sample": [
            {"hugo_gene_symbol": "TP53", "cancer_study_identifier": "brca_tcga", "sample_id": "S1",
             "protein_pos_start": 273, "protein_pos_end": 273},
            {"hugo_gene_symbol": "TP53", "cancer_study_identifier": "brca_tcga", "sample_id": "S1",
             "protein_pos_start": 175, "protein_pos_end": 175},
            {"hugo_gene_symbol": "TP53", "cancer_study_identifier": "brca_tcga", "sample_id": "S3",
             "protein_pos_start": 248, "protein_pos_end": 248},
            {"hugo_gene_symbol": "TP53", "cancer_study_identifier": "luad_tcga", "sample_id": "L1",
             "protein_pos_start": 273, "protein_pos_end": 273},
            {"hugo_gene_symbol": "TP53", "cancer_study_identifier": "luad_tcga", "sample_id": "L2",
             "protein_pos_start": 120, "protein_pos_end": 125},
            {"hugo_gene_symbol": "BRCA1", "cancer_study_identifier": "brca_tcga", "sample_id": "S2",
             "protein_pos_start": 1682, "protein_pos_end": 1682},
        ],
    }


@pytest.fixture
def fake_db(monkeypatch) -> FakeSupabase:
    import importlib

    db = FakeSupabase(seed_tables())
    for name in REPO_MODULES:
        module = importlib.import_module(name)
        monkeypatch.setattr(module, "get_supabase_client", lambda: db)
    return db


@pytest.fixture
def client(fake_db):
    from fastapi.testclient import TestClient

    from portal_api.main import app

    return TestClient(app, raise_server_exceptions=False)
