"""
grezzi/sink: Writing and rendering clustering results.
"""

from .writer import (
    OUTPUT_FORMATS,
    build_summary,
    format_text,
    to_dataframe,
    to_json_payload,
    write_clusters,
)
from .plot import cluster_color, render_clusters, save_plot

__all__ = [
    "OUTPUT_FORMATS",
    "build_summary",
    "format_text",
    "to_dataframe",
    "to_json_payload",
    "write_clusters",
    "cluster_color",
    "render_clusters",
    "save_plot",
]
