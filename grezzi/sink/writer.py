"""
Output sink for clustering results.

Formats:
- text: readable block per identifier (default, stdout-friendly)
- json: {identifier: [cluster, ...]} with envelopes and members
- csv:  one row per unit, ";" separated

Identifiers are written in sorted order so repeated runs produce identical
files; the in-memory mapping has no order of its own.
"""

from __future__ import annotations

import io
import json
import logging
import sys
from pathlib import Path
from typing import Dict, List, Mapping, Sequence, TextIO, Union

import pandas as pd

from ..errors import SinkError
from ..spatial.clustering import Cluster, diagnose

logger = logging.getLogger(__name__)

OUTPUT_FORMATS = ("text", "json", "csv")

CSV_COLUMNS = [
    "identifier",
    "cluster",
    "member",
    "width",
    "height",
    "min_width",
    "min_height",
    "max_width",
    "max_height",
]


def _fmt(value: float) -> str:
    return f"{value:g}"


def format_text(clusters_by_id: Mapping[str, Sequence[Cluster]]) -> str:
    """Readable dump: one block per identifier, one line per member."""
    lines: List[str] = []
    for identifier in sorted(clusters_by_id):
        clusters = clusters_by_id[identifier]
        lines.append(f"{identifier}: {len(clusters)} cluster(s)")
        for index, cluster in enumerate(clusters):
            area = cluster.area
            lines.append(
                f"  [{index}] size={cluster.size} "
                f"width={_fmt(area.min_width)}..{_fmt(area.max_width)} "
                f"height={_fmt(area.min_height)}..{_fmt(area.max_height)}"
            )
            for unit in cluster.units:
                lines.append(f"      {_fmt(unit.width)} x {_fmt(unit.height)}")
    return "\n".join(lines) + ("\n" if lines else "")


def to_json_payload(clusters_by_id: Mapping[str, Sequence[Cluster]]) -> Dict[str, list]:
    return {
        identifier: [cluster.to_dict() for cluster in clusters_by_id[identifier]]
        for identifier in sorted(clusters_by_id)
    }


def to_dataframe(clusters_by_id: Mapping[str, Sequence[Cluster]]) -> pd.DataFrame:
    """Flatten the result into one row per unit."""
    rows = []
    for identifier in sorted(clusters_by_id):
        for index, cluster in enumerate(clusters_by_id[identifier]):
            bounds = cluster.bounds()
            for member, unit in enumerate(cluster.units):
                rows.append(dict(
                    identifier=identifier,
                    cluster=index,
                    member=member,
                    width=unit.width,
                    height=unit.height,
                    **bounds,
                ))
    return pd.DataFrame(rows, columns=CSV_COLUMNS)


def _render(clusters_by_id: Mapping[str, Sequence[Cluster]], fmt: str) -> str:
    if fmt == "text":
        return format_text(clusters_by_id)
    if fmt == "json":
        return json.dumps(to_json_payload(clusters_by_id), indent=2) + "\n"
    if fmt == "csv":
        buffer = io.StringIO()
        to_dataframe(clusters_by_id).to_csv(buffer, sep=";", index=False)
        return buffer.getvalue()
    raise ValueError(f"Unknown output format {fmt!r}; expected one of {', '.join(OUTPUT_FORMATS)}")


def write_clusters(
    clusters_by_id: Mapping[str, Sequence[Cluster]],
    destination: Union[str, Path, TextIO, None] = None,
    *,
    fmt: str = "text",
) -> None:
    """
    Write the result mapping.

    Args:
        clusters_by_id: Identifier -> clusters
        destination: File path, open text stream, or None for stdout
        fmt: One of OUTPUT_FORMATS

    Raises:
        SinkError: If the destination cannot be written
    """
    payload = _render(clusters_by_id, fmt)

    try:
        if destination is None:
            sys.stdout.write(payload)
        elif isinstance(destination, (str, Path)):
            path = Path(destination)
            with path.open("w", encoding="utf-8", newline="") as handle:
                handle.write(payload)
            logger.info("Wrote %s output to %s", fmt, path)
        else:
            destination.write(payload)
    except OSError as e:
        raise SinkError(f"Cannot write output to {destination}: {e}") from e


def build_summary(clusters_by_id: Mapping[str, Sequence[Cluster]]) -> Dict[str, object]:
    """Aggregate per-group diagnostics into one summary."""
    groups = {identifier: diagnose(clusters) for identifier, clusters in clusters_by_id.items()}
    sizes = [size for diag in groups.values() for size in diag.cluster_sizes]
    return {
        "num_groups": len(groups),
        "num_units": sum(diag.num_units for diag in groups.values()),
        "num_clusters": len(sizes),
        "num_singletons": sum(diag.num_singletons for diag in groups.values()),
        "largest_cluster": max(sizes) if sizes else 0,
        "avg_cluster_size": round(sum(sizes) / len(sizes), 3) if sizes else 0.0,
        "groups": {identifier: groups[identifier].to_dict() for identifier in sorted(groups)},
    }
