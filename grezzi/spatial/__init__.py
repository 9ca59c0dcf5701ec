"""
grezzi/spatial: Tolerance geometry and greedy dimensional clustering.

This module turns (width, height) measurements into comparison areas and
assigns units to clusters with a deterministic single-pass rule.
"""

from .tolerance import (
    Area,
    ToleranceRange,
    Unit,
    area_of,
    intersect,
)
from .clustering import (
    Cluster,
    ClusteringDiagnostics,
    cluster_units,
    diagnose,
)

__all__ = [
    "Area",
    "ToleranceRange",
    "Unit",
    "area_of",
    "intersect",
    "Cluster",
    "ClusteringDiagnostics",
    "cluster_units",
    "diagnose",
]
