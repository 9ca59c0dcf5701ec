"""
Raster rendering of clusters for visual inspection.

Width runs along x, height along y (pointing up). Every cluster gets its own
colour; its envelope is outlined and each member is drawn as a dot. The data
extent is scaled uniformly into a fixed-size canvas.
"""

from __future__ import annotations

import colorsys
from pathlib import Path
from typing import List, Mapping, Sequence, Tuple, Union

import numpy as np
from PIL import Image, ImageDraw

from ..errors import SinkError
from ..spatial.clustering import Cluster

BACKGROUND = (255, 255, 255)
FRAME = (200, 200, 200)

# Golden-ratio hue step keeps neighbouring clusters visually distinct.
_HUE_STEP = 0.618033988749895


def cluster_color(index: int) -> Tuple[int, int, int]:
    """Deterministic RGB colour for the ``index``-th cluster."""
    hue = (index * _HUE_STEP) % 1.0
    r, g, b = colorsys.hsv_to_rgb(hue, 0.65, 0.85)
    return (int(r * 255), int(g * 255), int(b * 255))


def _ordered_clusters(clusters_by_id: Mapping[str, Sequence[Cluster]]) -> List[Cluster]:
    return [c for identifier in sorted(clusters_by_id) for c in clusters_by_id[identifier]]


def _extent(clusters: Sequence[Cluster]) -> Tuple[np.ndarray, np.ndarray]:
    points = []
    for cluster in clusters:
        points.append(cluster.area.lower)
        points.append(cluster.area.upper)
        points.extend(unit.as_tuple() for unit in cluster.units)
    coords = np.asarray(points, dtype=float)
    return coords.min(axis=0), coords.max(axis=0)


def render_clusters(
    clusters_by_id: Mapping[str, Sequence[Cluster]],
    *,
    size: Tuple[int, int] = (1024, 1024),
    margin: int = 32,
    marker_radius: int = 3,
) -> Image.Image:
    """
    Draw all clusters of all groups onto one canvas.

    Args:
        clusters_by_id: Identifier -> clusters
        size: Canvas (width, height) in pixels
        margin: Blank border in pixels
        marker_radius: Radius of member dots in pixels

    Returns:
        RGB image; blank when there is nothing to draw
    """
    canvas_w, canvas_h = size
    image = Image.new("RGB", (canvas_w, canvas_h), BACKGROUND)
    draw = ImageDraw.Draw(image)
    draw.rectangle([0, 0, canvas_w - 1, canvas_h - 1], outline=FRAME)

    clusters = _ordered_clusters(clusters_by_id)
    if not clusters:
        return image

    lo, hi = _extent(clusters)
    span = hi - lo
    span[span == 0] = 1.0
    usable = np.array([canvas_w - 2 * margin, canvas_h - 2 * margin], dtype=float)
    scale = float(np.min(np.maximum(usable, 1.0) / span))

    def to_pixel(x: float, y: float) -> Tuple[float, float]:
        px = margin + (x - lo[0]) * scale
        py = canvas_h - margin - (y - lo[1]) * scale
        return px, py

    for index, cluster in enumerate(clusters):
        color = cluster_color(index)

        x0, y0 = to_pixel(*cluster.area.lower)
        x1, y1 = to_pixel(*cluster.area.upper)
        draw.rectangle(
            [min(x0, x1), min(y0, y1), max(x0, x1), max(y0, y1)],
            outline=color,
        )

        for unit in cluster.units:
            cx, cy = to_pixel(unit.width, unit.height)
            draw.ellipse(
                [cx - marker_radius, cy - marker_radius, cx + marker_radius, cy + marker_radius],
                fill=color,
            )

    return image


def save_plot(image: Image.Image, path: Union[str, Path]) -> Path:
    """Save ``image`` as PNG; raises SinkError on failure."""
    path = Path(path)
    try:
        image.save(path, format="PNG")
    except (OSError, ValueError) as e:
        raise SinkError(f"Cannot save plot to {path}: {e}") from e
    return path
