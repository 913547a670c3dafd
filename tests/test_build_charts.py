"""Tests for build_charts.py sheet-to-charts batch builder."""
import random

import pandas as pd
import pytest

from build_charts import (
    DEFAULT_PALETTE, HERE,
    build_charts, group_data_points, label_color_map, load_config, safe_slug, stable_color_cycle,
)
from colors import Color


@pytest.fixture
def sheet():
    return pd.DataFrame({
        "Group": ["Q1", "Q1", "Q1", "Q2", "Q2", "Q2", "Q3"],
        "Label": ["Rent", "Food", "Rent", "Food", "Travel", "Rent", "Food"],
        "Value": [1000, 400, 200, 500, "n/a", 0, -5],
        "Color": [None, None, None, None, None, None, None],
    })


# --- palette ---

def test_cycle_within_palette():
    assert stable_color_cycle(3) == [Color.parse(c) for c in DEFAULT_PALETTE[:3]]


def test_cycle_extends_with_shifted_colors():
    colors = stable_color_cycle(len(DEFAULT_PALETTE) + 2)
    assert len(colors) == len(DEFAULT_PALETTE) + 2
    assert colors[len(DEFAULT_PALETTE)].literal == "#3ba9c3"


def test_empty_palette():
    assert stable_color_cycle(4, []) == []
    assert label_color_map(["a", "b"], []) == {}


def test_label_colors_are_stable():
    m = label_color_map(["Rent", "Food", "Rent"])
    assert list(m) == ["Rent", "Food"]
    assert m["Rent"] == Color.parse(DEFAULT_PALETTE[0])


def test_safe_slug():
    assert safe_slug("Acme Corp / 2024") == "Acme_Corp_2024"
    assert safe_slug("  ") == "chart"


# --- grouping ---

def test_group_sums_sorts_and_drops(sheet):
    groups = group_data_points(sheet)
    assert list(groups) == ["Q1", "Q2"]
    assert [p.value for p in groups["Q1"]] == [1200, 400]
    assert [p.value for p in groups["Q2"]] == [500]


def test_same_label_same_color_across_groups(sheet):
    groups = group_data_points(sheet)
    food_q1 = groups["Q1"][1]
    food_q2 = groups["Q2"][0]
    assert food_q1.color == food_q2.color


def test_color_column_overrides_palette(sheet):
    sheet.loc[1, "Color"] = "#FF8C00"
    groups = group_data_points(sheet)
    assert groups["Q1"][1].color.literal == "#ff8c00"


def test_without_palette_colors_are_unset(sheet):
    groups = group_data_points(sheet.drop(columns=["Color"]), palette=[])
    assert all(p.color is None for p in groups["Q1"])


# --- end to end ---

def test_build_charts_from_csv(tmp_path, sheet):
    csv = tmp_path / "data.csv"
    sheet.to_csv(csv, index=False)
    cfg = {"chart": {"width": 400, "height": 400, "inner_radius": 50, "radial_width": 80}}
    out = tmp_path / "charts"
    emitted = build_charts(csv, out, cfg, rng=random.Random(5))
    assert [g for g, _ in emitted] == ["Q1", "Q2"]
    q1 = (out / "Q1.svg").read_text(encoding="utf-8")
    assert q1.count("<path ") == 2
    assert 'width="400"' in q1


def test_load_config(tmp_path):
    assert load_config(tmp_path / "missing.toml") == {}
    cfg = load_config(HERE / "Configs" / "config.toml")
    assert cfg["chart"]["inner_radius"] == 100
    assert cfg["columns"]["value"] == "Value"


# --- bad color cells ---

def test_bad_color_cell_skips_only_its_group(sheet, caplog):
    sheet.loc[0, "Color"] = "not-a-color"
    groups = group_data_points(sheet)
    assert list(groups) == ["Q2"]
    assert "Skipping Q1" in caplog.text


def test_build_charts_continues_past_bad_color(tmp_path, sheet):
    sheet.loc[3, "Color"] = "#000000"
    csv = tmp_path / "data.csv"
    sheet.to_csv(csv, index=False)
    out = tmp_path / "charts"
    emitted = build_charts(csv, out, {}, rng=random.Random(5))
    assert [g for g, _ in emitted] == ["Q1"]
    assert (out / "Q1.svg").exists()
    assert not (out / "Q2.svg").exists()
