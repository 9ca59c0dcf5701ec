"""
Pytest configuration and shared fixtures for grezzi tests.

This file provides:
- Sample units and tolerance ranges
- Sample semicolon-separated exports written to tmp_path
- Common test utilities
"""

from pathlib import Path
from typing import Dict, List

import pytest

from grezzi.spatial import Cluster, ToleranceRange, Unit


# ==============================================================================
# Sample Units
# ==============================================================================

@pytest.fixture
def scenario_units() -> List[Unit]:
    """Two close pieces and one far away."""
    return [Unit(10, 10), Unit(11, 11), Unit(50, 50)]


@pytest.fixture
def narrow_tolerance() -> ToleranceRange:
    return ToleranceRange(min=0.0, max=2.0)


@pytest.fixture
def sample_groups() -> Dict[str, List[Unit]]:
    """Identifier groups as produced by ingestion."""
    return {
        "LOT-A": [Unit(10, 10), Unit(11, 11), Unit(50, 50)],
        "LOT-B": [Unit(100, 40), Unit(100.5, 40.5), Unit(101, 41), Unit(140, 40)],
        "LOT-C": [Unit(5, 5)],
    }


# ==============================================================================
# Sample Exports
# ==============================================================================

EXPORT_HEADER = "article;length;width;description;lot"

EXPORT_ROWS = [
    "ART1;1200,5;400;raw board;L1",
    "ART1;1210;405,5;raw board;L1",
    "ART2;800;300;raw board;L2",
    "ART1;2000;900;raw board;L1",
    "ART2;805.5;302;raw board;L2",
]


def write_export(path: Path, rows: List[str], header: str = EXPORT_HEADER) -> Path:
    path.write_text("\n".join([header, *rows]) + "\n", encoding="utf-8")
    return path


@pytest.fixture
def sample_export(tmp_path) -> Path:
    """Export in the historical layout: length col 2, width col 3, lot col 5."""
    return write_export(tmp_path / "export.csv", EXPORT_ROWS)


# ==============================================================================
# Utilities
# ==============================================================================

def members(clusters: List[Cluster]) -> List[List[tuple]]:
    """Cluster members as (width, height) tuples, preserving order."""
    return [[u.as_tuple() for u in c.units] for c in clusters]
