"""
Group orchestration and the end-to-end batch run.

This module provides:
- cluster_all: per-identifier fan-out of the clustering engine
- run: tolerance check -> ingestion -> clustering -> output -> optional plot

Each group is clustered by exactly one worker that owns its units and
clusters; the tolerance is the only shared value and is never mutated, so
groups run concurrently without locks. Inside a group the computation stays
sequential because first-match assignment depends on cluster creation order.
"""

from __future__ import annotations

import logging
from concurrent.futures import FIRST_EXCEPTION, ThreadPoolExecutor, wait
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Mapping, Optional, Sequence

from ..ingest.csv_reader import read_groups
from ..sink.plot import render_clusters, save_plot
from ..sink.writer import build_summary, write_clusters
from ..spatial.clustering import Cluster, cluster_units, diagnose
from ..spatial.tolerance import ToleranceRange, Unit
from ..tools.config_loader import RunConfig

logger = logging.getLogger(__name__)


@dataclass
class RunResult:
    """Outcome of one batch run."""

    clusters: Dict[str, List[Cluster]]
    """Identifier -> clusters in creation order."""

    summary: Dict[str, object] = field(default_factory=dict)
    """Aggregated diagnostics (see build_summary)."""

    output_path: Optional[Path] = None
    """Where the dump was written (None for stdout)."""

    plot_path: Optional[Path] = None
    """Rendered image, if plotting was requested."""


def _cluster_group(identifier: str, units: Sequence[Unit], tolerance: ToleranceRange) -> List[Cluster]:
    clusters = cluster_units(units, tolerance)
    if logger.isEnabledFor(logging.DEBUG):
        logger.debug("Group %r: %s", identifier, diagnose(clusters).to_dict())
    return clusters


def cluster_all(
    groups: Mapping[str, Sequence[Unit]],
    tolerance: ToleranceRange,
    *,
    max_workers: Optional[int] = None,
) -> Dict[str, List[Cluster]]:
    """
    Cluster every identifier group independently.

    Args:
        groups: Identifier -> units in input order
        tolerance: Tolerance range shared read-only by all groups
        max_workers: Thread pool size; 1 runs groups in the calling thread,
            None lets the executor pick

    Returns:
        Identifier -> clusters. The mapping carries no ordering guarantee.

    Raises:
        InvalidTolerance: Before any group is touched, if min > max
        ValueError: If max_workers is below 1
    """
    tolerance.validate()
    if max_workers is not None and max_workers < 1:
        raise ValueError(f"max_workers must be at least 1, got {max_workers}")

    if max_workers == 1 or len(groups) <= 1:
        return {
            identifier: _cluster_group(identifier, units, tolerance)
            for identifier, units in groups.items()
        }

    results: Dict[str, List[Cluster]] = {}
    with ThreadPoolExecutor(max_workers=max_workers) as ex:
        futs = {
            ex.submit(_cluster_group, identifier, units, tolerance): identifier
            for identifier, units in groups.items()
        }
        done, pending = wait(futs, return_when=FIRST_EXCEPTION)
        for fut in pending:
            fut.cancel()
        for fut in done:
            # Re-raises the worker's exception; nothing partial is returned
            results[futs[fut]] = fut.result()

    logger.info("Clustered %d groups", len(results))
    return results


def run(config: RunConfig) -> RunResult:
    """
    Execute one complete batch run.

    The tolerance is checked before the input is opened. Any error aborts
    the run; there is no partial output.

    Raises:
        InvalidTolerance, IngestionError, SinkError
    """
    tolerance = config.tolerance.validate()
    if config.input_path is None:
        raise ValueError("RunConfig.input_path is required")

    groups = read_groups(
        config.input_path,
        identifier_columns=config.identifier_columns,
        width_column=config.width_column,
        height_column=config.height_column,
        delimiter=config.delimiter,
    )

    clusters = cluster_all(groups, tolerance, max_workers=config.max_workers)
    summary = build_summary(clusters)
    logger.info(
        "%d units in %d groups -> %d clusters",
        summary["num_units"], summary["num_groups"], summary["num_clusters"],
    )

    write_clusters(clusters, config.output_path, fmt=config.output_format)

    plot_path = None
    if config.plot:
        image = render_clusters(clusters, size=config.plot_size)
        save_plot(image, config.plot_path)
        plot_path = config.plot_path

    return RunResult(
        clusters=clusters,
        summary=summary,
        output_path=config.output_path,
        plot_path=plot_path,
    )
