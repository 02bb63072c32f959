"""
Public menu layout strategies.

Each layout turns a theme's density, icon size, image style and item
style into the presentational options its template needs. The public
menu picks the strategy from ``theme.layout``; unknown layouts fall back
to the grid.
"""

from abc import ABC, abstractmethod
from typing import Any, Sequence

from restopos.services.themes import MenuTheme

IMAGE_SHAPES = {
    "circle": "50%",
    "square": "0",
    "rounded": "var(--menu-border-radius)",
}

# Thumbnail edge in pixels for cards and list rows
CARD_IMAGE_SIZES = {"small": 48, "medium": 64, "large": 80, "xl": 96}


def image_radius(theme: MenuTheme) -> str:
    return IMAGE_SHAPES.get(theme.image_style, IMAGE_SHAPES["rounded"])


def shows_images(theme: MenuTheme) -> bool:
    return theme.image_style != "none"


class MenuLayout(ABC):
    """Base class for public menu layouts."""

    name: str = ""
    template: str = ""

    def __init__(self, theme: MenuTheme, show_gst_badge: bool = False):
        self.theme = theme
        self.show_gst_badge = show_gst_badge

    @property
    def detailed(self) -> bool:
        return self.theme.item_style == "detailed"

    @abstractmethod
    def options(self) -> dict[str, Any]:
        """Layout-wide presentational options."""

    def item_options(self, index: int, item: dict[str, Any]) -> dict[str, Any]:
        """Per-item options; most layouts need none."""
        return {}

    def plan(self, items: Sequence[dict[str, Any]]) -> dict[str, Any]:
        """Everything the layout template needs to render ``items``."""
        return {
            "layout": self.name,
            "template": self.template,
            "show_gst_badge": self.show_gst_badge,
            "options": self.options(),
            "items": [
                {**item, "view": self.item_options(i, item)} for i, item in enumerate(items)
            ],
        }


class GridLayout(MenuLayout):
    """Cards in a responsive grid."""

    name = "grid"
    template = "layouts/grid.html"

    COLUMNS = {
        "compact": (2, 3, 4),
        "spacious": (1, 2, 3),
        "comfortable": (1, 2, 3),
    }

    def options(self) -> dict[str, Any]:
        return {
            "columns": self.COLUMNS.get(self.theme.density, self.COLUMNS["comfortable"]),
            "image_size": CARD_IMAGE_SIZES.get(self.theme.icon_size, CARD_IMAGE_SIZES["medium"]),
            "image_radius": image_radius(self.theme),
            # detailed cards put a full-width image on top, simple ones a side thumbnail
            "hero_image": self.detailed,
            "side_image": not self.detailed and shows_images(self.theme),
        }


class ListLayout(MenuLayout):
    """One row per item with an optional thumbnail."""

    name = "list"
    template = "layouts/list.html"

    PADDING = {"compact": "0.75rem", "spacious": "1.5rem", "comfortable": "1rem"}

    def options(self) -> dict[str, Any]:
        return {
            "padding": self.PADDING.get(self.theme.density, self.PADDING["comfortable"]),
            "image_size": CARD_IMAGE_SIZES.get(self.theme.icon_size, CARD_IMAGE_SIZES["medium"]),
            "image_radius": image_radius(self.theme),
            "show_images": shows_images(self.theme),
            "show_category": self.detailed,
        }


class TableLayout(MenuLayout):
    """A single table; image, category and tax columns are optional."""

    name = "table"
    template = "layouts/table.html"

    IMAGE_SIZES = {"small": 32, "medium": 40, "large": 48, "xl": 64}
    FONT_SIZES = {"compact": "0.875rem", "spacious": "1.125rem", "comfortable": "1rem"}

    def options(self) -> dict[str, Any]:
        return {
            "font_size": self.FONT_SIZES.get(self.theme.density, self.FONT_SIZES["comfortable"]),
            "image_size": self.IMAGE_SIZES.get(self.theme.icon_size, self.IMAGE_SIZES["medium"]),
            "image_radius": image_radius(self.theme),
            "image_column": shows_images(self.theme),
            "category_column": self.detailed,
            "tax_column": self.show_gst_badge,
        }


class MasonryLayout(MenuLayout):
    """CSS columns with staggered card heights for detailed themes."""

    name = "masonry"
    template = "layouts/masonry.html"

    COLUMNS = {
        "compact": (2, 3, 4),
        "spacious": (1, 2, 3),
        "comfortable": (2, 3, 4),
    }
    CARD_HEIGHTS = ("8rem", "10rem", "9rem", "11rem", "9.5rem")

    def options(self) -> dict[str, Any]:
        return {
            "columns": self.COLUMNS.get(self.theme.density, self.COLUMNS["comfortable"]),
            "image_radius": image_radius(self.theme),
            "show_images": shows_images(self.theme),
            "show_category": self.detailed,
        }

    def item_options(self, index: int, item: dict[str, Any]) -> dict[str, Any]:
        height = self.CARD_HEIGHTS[index % len(self.CARD_HEIGHTS)] if self.detailed else "auto"
        return {"height": height}


LAYOUTS = {
    "grid": GridLayout,
    "list": ListLayout,
    "table": TableLayout,
    "masonry": MasonryLayout,
}


def get_layout(theme: MenuTheme, show_gst_badge: bool = False) -> MenuLayout:
    layout_class = LAYOUTS.get(theme.layout, GridLayout)
    return layout_class(theme, show_gst_badge=show_gst_badge)
