"""Menu themes and public menu layouts."""

import dataclasses

import pytest

from restopos.services.layouts import GridLayout, MasonryLayout, TableLayout, get_layout
from restopos.services.themes import MENU_THEMES, get_theme_by_id, get_theme_css_variables

ITEMS = [
    {"id": str(i), "name": f"Item {i}", "price": 100 + i, "category": "Mains", "image": None}
    for i in range(6)
]


def test_ten_themes_with_unique_ids():
    ids = [theme.id for theme in MENU_THEMES]

    assert len(ids) == 10
    assert len(set(ids)) == 10
    assert get_theme_by_id("unknown") is None
    assert get_theme_by_id(None) is None


@pytest.mark.parametrize("theme", MENU_THEMES, ids=lambda t: t.id)
def test_every_theme_has_fifteen_css_variables(theme):
    variables = get_theme_css_variables(theme)

    assert len(variables) == 15
    assert all(name.startswith("--menu-") for name in variables)
    assert variables["--menu-primary"] == theme.colors["primary"]


def test_custom_colours_override_palette():
    theme = get_theme_by_id("modern")

    variables = get_theme_css_variables(theme, {"accent": "#ff6600", "textSecondary": "#333333", "border": ""})

    assert variables["--menu-accent"] == "#ff6600"
    assert variables["--menu-text-secondary"] == "#333333"
    assert variables["--menu-border"] == theme.colors["border"]


@pytest.mark.parametrize(
    "theme_id, layout_class",
    [("modern", GridLayout), ("tech", TableLayout), ("colorful", MasonryLayout)],
)
def test_layout_follows_theme(theme_id, layout_class):
    assert isinstance(get_layout(get_theme_by_id(theme_id)), layout_class)


def test_unknown_layout_falls_back_to_grid():
    theme = dataclasses.replace(get_theme_by_id("modern"), layout="carousel")

    assert isinstance(get_layout(theme), GridLayout)


def test_grid_columns_follow_density():
    natural = get_layout(get_theme_by_id("natural")).options()
    modern = get_layout(get_theme_by_id("modern")).options()

    assert natural["columns"] == (1, 2, 3)
    assert natural["hero_image"] is True
    assert modern["hero_image"] is False
    assert modern["side_image"] is True


def test_masonry_staggers_detailed_cards():
    detailed = get_layout(get_theme_by_id("colorful")).plan(ITEMS)
    simple = get_layout(get_theme_by_id("fun")).plan(ITEMS)

    heights = [item["view"]["height"] for item in detailed["items"]]
    assert heights == ["8rem", "10rem", "9rem", "11rem", "9.5rem", "8rem"]
    assert {item["view"]["height"] for item in simple["items"]} == {"auto"}


def test_table_optional_columns():
    tech = get_layout(get_theme_by_id("tech")).options()
    professional = get_layout(get_theme_by_id("professional"), show_gst_badge=True).options()

    assert tech["category_column"] is False
    assert tech["tax_column"] is False
    assert professional["category_column"] is True
    assert professional["tax_column"] is True


def test_minimal_theme_hides_images():
    options = get_layout(get_theme_by_id("minimal")).options()

    assert options["show_images"] is False


def test_plan_carries_template_and_badge():
    plan = get_layout(get_theme_by_id("classic"), show_gst_badge=True).plan(ITEMS[:2])

    assert plan["layout"] == "list"
    assert plan["template"] == "layouts/list.html"
    assert plan["show_gst_badge"] is True
    assert [item["name"] for item in plan["items"]] == ["Item 0", "Item 1"]
