# portal_api/utils/matrix.py
from __future__ import annotations

import re
from typing import Iterable, List, Optional

TAB = "\t"
NEW_LINE = "\n"

_ID_SPLIT = re.compile(r"[\s,+]+")


def split_id_list(value: Optional[str]) -> List[str]:
    """
    "TP53 BRCA1", "TP53,BRCA1", "TP53+BRCA1" -> ["TP53", "BRCA1"]
    Blank input gives [].
    """
    if not value:
        return []
    return [x for x in _ID_SPLIT.split(value.strip()) if x]


def merge_id_lists(values: Optional[Iterable[str]]) -> List[str]:
    """Flatten repeated query params that may each hold a delimited list."""
    out: List[str] = []
    for v in values or []:
        out.extend(split_id_list(v))
    return out


def tab_row(values: Iterable[object]) -> str:
    return TAB.join(str(v) for v in values) + NEW_LINE


def parse_matrix(content: str) -> List[List[str]]:
    """
    Tab-delimited text -> grid of strings.
    Comment ("#") and blank lines are skipped; rows are padded with "" to
    the width of the first row.
    """
    lines = [ln.rstrip("\r") for ln in content.split(NEW_LINE)]
    lines = [ln for ln in lines if ln.strip() and not ln.startswith("#")]
    if not lines:
        return []

    width = len(lines[0].split(TAB))
    matrix: List[List[str]] = []
    for ln in lines:
        cells = ln.split(TAB)
        if len(cells) < width:
            cells = cells + [""] * (width - len(cells))
        matrix.append(cells)
    return matrix
