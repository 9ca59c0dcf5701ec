"""
Unit Tests for Output Sinks (grezzi/sink)

Tests text/json/csv dumps, summaries, and PNG rendering.
"""

import json

import pandas as pd
import pytest
from PIL import Image

from grezzi.errors import SinkError
from grezzi.sink import (
    build_summary,
    cluster_color,
    format_text,
    render_clusters,
    save_plot,
    to_dataframe,
    write_clusters,
)
from grezzi.sink.plot import BACKGROUND
from grezzi.sink.writer import CSV_COLUMNS
from grezzi.spatial import ToleranceRange, Unit, cluster_units


@pytest.fixture
def scenario_clusters(scenario_units, narrow_tolerance):
    return {"LOT-A": cluster_units(scenario_units, narrow_tolerance)}


# ==============================================================================
# Writer Tests
# ==============================================================================

class TestWriteClusters:
    """Test the text, json and csv dumps."""

    def test_text_format(self, scenario_clusters):
        assert format_text(scenario_clusters).splitlines() == [
            "LOT-A: 2 cluster(s)",
            "  [0] size=2 width=11..12 height=11..12",
            "      10 x 10",
            "      11 x 11",
            "  [1] size=1 width=50..52 height=50..52",
            "      50 x 50",
        ]

    def test_text_to_stdout_by_default(self, scenario_clusters, capsys):
        write_clusters(scenario_clusters)

        assert capsys.readouterr().out.startswith("LOT-A: 2 cluster(s)\n")

    def test_json_file(self, scenario_clusters, tmp_path):
        path = tmp_path / "out.json"
        write_clusters(scenario_clusters, path, fmt="json")

        payload = json.loads(path.read_text(encoding="utf-8"))
        first = payload["LOT-A"][0]
        assert first["size"] == 2
        assert first["area"] == {"min_width": 11, "min_height": 11, "max_width": 12, "max_height": 12}
        assert first["units"] == [{"width": 10, "height": 10}, {"width": 11, "height": 11}]

    def test_csv_file(self, scenario_clusters, tmp_path):
        path = tmp_path / "out.csv"
        write_clusters(scenario_clusters, path, fmt="csv")

        frame = pd.read_csv(path, sep=";")
        assert list(frame.columns) == CSV_COLUMNS
        assert frame["cluster"].tolist() == [0, 0, 1]
        assert frame["member"].tolist() == [0, 1, 0]
        assert frame["min_width"].tolist() == [11, 11, 50]

    def test_identifiers_are_sorted(self, scenario_units, narrow_tolerance):
        clusters = {key: cluster_units(scenario_units, narrow_tolerance) for key in ("b", "a", "c")}

        assert to_dataframe(clusters)["identifier"].unique().tolist() == ["a", "b", "c"]

    def test_unknown_format(self, scenario_clusters):
        with pytest.raises(ValueError, match="Unknown output format"):
            write_clusters(scenario_clusters, fmt="xml")

    def test_unwritable_destination(self, scenario_clusters, tmp_path):
        with pytest.raises(SinkError):
            write_clusters(scenario_clusters, tmp_path)

    def test_empty_result(self, tmp_path):
        path = tmp_path / "empty.txt"
        write_clusters({}, path)

        assert path.read_text(encoding="utf-8") == ""


class TestSummary:
    """Test aggregated diagnostics."""

    def test_summary_over_groups(self, sample_groups, narrow_tolerance):
        clusters = {k: cluster_units(v, narrow_tolerance) for k, v in sample_groups.items()}
        summary = build_summary(clusters)

        assert summary["num_groups"] == 3
        assert summary["num_units"] == 8
        assert summary["num_clusters"] == 5
        assert summary["num_singletons"] == 3
        assert summary["largest_cluster"] == 3
        assert summary["avg_cluster_size"] == 1.6
        assert list(summary["groups"]) == ["LOT-A", "LOT-B", "LOT-C"]

    def test_empty_summary(self):
        summary = build_summary({})

        assert summary["num_clusters"] == 0
        assert summary["avg_cluster_size"] == 0.0


# ==============================================================================
# Rendering Tests
# ==============================================================================

class TestRenderClusters:
    """Test PNG rendering of clusters."""

    def test_default_canvas_size(self, scenario_clusters):
        image = render_clusters(scenario_clusters)

        assert image.size == (1024, 1024)
        assert image.mode == "RGB"

    def test_custom_canvas_size(self, scenario_clusters):
        assert render_clusters(scenario_clusters, size=(300, 200)).size == (300, 200)

    def test_empty_result_is_blank(self):
        image = render_clusters({}, size=(100, 100))

        assert image.getpixel((50, 50)) == BACKGROUND

    def test_members_drawn_in_cluster_color(self, scenario_clusters):
        image = render_clusters(scenario_clusters)

        # Lowest unit maps to the bottom-left corner inside the margin
        assert image.getpixel((32, 992)) == cluster_color(0)
        # (50, 50) maps near the top right
        assert image.getpixel((946, 78)) == cluster_color(1)

    def test_colors_are_distinct_and_stable(self):
        colors = [cluster_color(i) for i in range(8)]

        assert len(set(colors)) == 8
        assert cluster_color(3) == colors[3]

    def test_single_point_does_not_divide_by_zero(self):
        clusters = {"x": cluster_units([Unit(1, 1)], ToleranceRange(0, 0))}
        image = render_clusters(clusters)

        assert image.getpixel((32, 992)) == cluster_color(0)

    def test_save_plot_writes_png(self, scenario_clusters, tmp_path):
        path = save_plot(render_clusters(scenario_clusters, size=(64, 64)), tmp_path / "plot.png")

        with Image.open(path) as image:
            assert image.format == "PNG"
            assert image.size == (64, 64)

    def test_save_plot_failure(self, scenario_clusters, tmp_path):
        with pytest.raises(SinkError):
            save_plot(render_clusters(scenario_clusters, size=(8, 8)), tmp_path / "missing" / "plot.png")
