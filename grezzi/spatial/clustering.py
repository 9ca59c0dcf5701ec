"""
Greedy single-pass tolerance clustering.

This module provides:
1. The Cluster container (members + current envelope)
2. cluster_units: deterministic first-match assignment for one group
3. Per-group diagnostics for logging and summaries

Assignment rules:
- Units are visited in input order
- Each unit joins the FIRST existing cluster (creation order) whose envelope
  intersects the unit's area, never the best-overlapping one
- Joining replaces the envelope with the intersection, so envelopes only shrink
- A unit that matches nothing opens a new cluster with its own area

The result is order dependent and intentionally not transitive: a unit may
miss a shrunk envelope even though it overlaps the original area of an
earlier member. Clusters are never merged with each other.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional, Sequence

from .tolerance import Area, ToleranceRange, Unit, area_of, intersect


@dataclass
class Cluster:
    """Units judged mutually compatible, plus their shared envelope."""

    area: Area
    """Current envelope: intersection of every member's area."""

    units: List[Unit] = field(default_factory=list)
    """Members in assignment order."""

    @classmethod
    def start(cls, unit: Unit, area: Area) -> "Cluster":
        return cls(area=area, units=[unit])

    def add(self, unit: Unit, envelope: Area) -> None:
        """Append ``unit`` and shrink the envelope to ``envelope``."""
        self.units.append(unit)
        self.area = envelope

    @property
    def size(self) -> int:
        return len(self.units)

    def bounds(self) -> Dict[str, float]:
        """Renderable bounding rectangle of the envelope."""
        return self.area.to_dict()

    def to_dict(self) -> Dict[str, object]:
        return {
            "size": self.size,
            "area": self.area.to_dict(),
            "units": [{"width": u.width, "height": u.height} for u in self.units],
        }


@dataclass
class ClusteringDiagnostics:
    """Summary of one group's clustering outcome."""

    num_units: int
    """Total units in the group."""

    num_clusters: int
    """Clusters formed."""

    cluster_sizes: List[int] = field(default_factory=list)
    """Size of each cluster in creation order."""

    num_singletons: int = 0
    """Clusters holding a single unit."""

    largest_cluster: int = 0
    """Size of the biggest cluster (0 for an empty group)."""

    def to_dict(self) -> Dict[str, object]:
        return {
            "num_units": self.num_units,
            "num_clusters": self.num_clusters,
            "cluster_sizes": list(self.cluster_sizes),
            "num_singletons": self.num_singletons,
            "largest_cluster": self.largest_cluster,
        }


def _first_match(clusters: Iterable[Cluster], area: Area) -> Optional[tuple]:
    for cluster in clusters:
        envelope = intersect(cluster.area, area)
        if envelope is not None:
            return cluster, envelope
    return None


def cluster_units(units: Sequence[Unit], tolerance: ToleranceRange) -> List[Cluster]:
    """
    Partition ``units`` into clusters with the greedy first-match rule.

    Args:
        units: One group's units in input order (may be empty)
        tolerance: Validated tolerance range (min <= max)

    Returns:
        Clusters in creation order, members in assignment order. Every input
        unit appears in exactly one cluster.
    """
    clusters: List[Cluster] = []

    for unit in units:
        area = area_of(unit, tolerance)
        match = _first_match(clusters, area)
        if match is None:
            clusters.append(Cluster.start(unit, area))
        else:
            cluster, envelope = match
            cluster.add(unit, envelope)

    return clusters


def diagnose(clusters: Sequence[Cluster]) -> ClusteringDiagnostics:
    """Build diagnostics for one group's clusters."""
    sizes = [c.size for c in clusters]
    return ClusteringDiagnostics(
        num_units=sum(sizes),
        num_clusters=len(clusters),
        cluster_sizes=sizes,
        num_singletons=sum(1 for s in sizes if s == 1),
        largest_cluster=max(sizes) if sizes else 0,
    )
