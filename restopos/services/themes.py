"""
Digital menu themes.

Each theme carries its palette, fonts, spacing, corner radius and shadows
plus the layout attributes the public menu renderer dispatches on:

    layout       grid | list | table | masonry
    density      compact | comfortable | spacious
    icon_size    small | medium | large | xl
    image_style  rounded | circle | square | none
    item_style   simple | detailed
"""

from dataclasses import dataclass
from typing import Mapping, Optional

COLOR_KEYS = (
    "primary",
    "secondary",
    "background",
    "surface",
    "text",
    "text_secondary",
    "border",
    "accent",
)

DEFAULT_THEME = "modern"


@dataclass(frozen=True)
class MenuTheme:
    id: str
    display_name: str
    colors: Mapping[str, str]
    heading_font: str
    body_font: str
    card_spacing: str
    section_spacing: str
    border_radius: str
    card_shadow: str
    button_shadow: str
    layout: str = "grid"
    density: str = "comfortable"
    icon_size: str = "medium"
    image_style: str = "rounded"
    item_style: str = "simple"

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.id,
            "display_name": self.display_name,
            "colors": dict(self.colors),
            "fonts": {"heading": self.heading_font, "body": self.body_font},
            "spacing": {"card": self.card_spacing, "section": self.section_spacing},
            "border_radius": self.border_radius,
            "shadows": {"card": self.card_shadow, "button": self.button_shadow},
            "layout": self.layout,
            "density": self.density,
            "icon_size": self.icon_size,
            "image_style": self.image_style,
            "item_style": self.item_style,
        }


def _palette(primary, secondary, background, surface, text, text_secondary, border, accent):
    return dict(zip(COLOR_KEYS, (primary, secondary, background, surface, text, text_secondary, border, accent)))


MENU_THEMES = (
    MenuTheme(
        id="modern",
        display_name="Modern",
        colors=_palette(
            "hsl(220, 70%, 50%)", "hsl(220, 60%, 96%)", "hsl(0, 0%, 100%)", "hsl(220, 14%, 96%)",
            "hsl(220, 13%, 13%)", "hsl(220, 9%, 46%)", "hsl(220, 13%, 91%)", "hsl(220, 70%, 60%)",
        ),
        heading_font="Inter, sans-serif",
        body_font="Inter, sans-serif",
        card_spacing="1.5rem",
        section_spacing="2rem",
        border_radius="0.75rem",
        card_shadow="0 4px 6px -1px rgba(0, 0, 0, 0.1)",
        button_shadow="0 2px 4px -1px rgba(0, 0, 0, 0.1)",
        layout="grid",
        density="comfortable",
        icon_size="medium",
        image_style="rounded",
        item_style="simple",
    ),
    MenuTheme(
        id="classic",
        display_name="Classic",
        colors=_palette(
            "hsl(45, 100%, 35%)", "hsl(45, 100%, 95%)", "hsl(50, 44%, 96%)", "hsl(0, 0%, 100%)",
            "hsl(30, 25%, 8%)", "hsl(30, 10%, 40%)", "hsl(45, 20%, 85%)", "hsl(45, 100%, 45%)",
        ),
        heading_font="Georgia, serif",
        body_font="Georgia, serif",
        card_spacing="1.25rem",
        section_spacing="1.75rem",
        border_radius="0.5rem",
        card_shadow="0 2px 8px rgba(0, 0, 0, 0.1)",
        button_shadow="0 1px 3px rgba(0, 0, 0, 0.2)",
        layout="list",
        density="comfortable",
        icon_size="medium",
        image_style="rounded",
        item_style="detailed",
    ),
    MenuTheme(
        id="colorful",
        display_name="Colorful",
        colors=_palette(
            "hsl(280, 100%, 60%)", "hsl(280, 100%, 95%)", "hsl(320, 100%, 98%)", "hsl(0, 0%, 100%)",
            "hsl(260, 15%, 15%)", "hsl(260, 10%, 45%)", "hsl(280, 30%, 90%)", "hsl(180, 100%, 50%)",
        ),
        heading_font="Poppins, sans-serif",
        body_font="Poppins, sans-serif",
        card_spacing="1.5rem",
        section_spacing="2rem",
        border_radius="1rem",
        card_shadow="0 8px 25px rgba(128, 0, 128, 0.15)",
        button_shadow="0 4px 15px rgba(128, 0, 128, 0.2)",
        layout="masonry",
        density="comfortable",
        icon_size="large",
        image_style="rounded",
        item_style="detailed",
    ),
    MenuTheme(
        id="minimal",
        display_name="Minimal",
        colors=_palette(
            "hsl(0, 0%, 9%)", "hsl(0, 0%, 96%)", "hsl(0, 0%, 100%)", "hsl(0, 0%, 99%)",
            "hsl(0, 0%, 9%)", "hsl(0, 0%, 45%)", "hsl(0, 0%, 90%)", "hsl(0, 0%, 20%)",
        ),
        heading_font="Helvetica, Arial, sans-serif",
        body_font="Helvetica, Arial, sans-serif",
        card_spacing="1rem",
        section_spacing="1.5rem",
        border_radius="0.25rem",
        card_shadow="0 1px 3px rgba(0, 0, 0, 0.05)",
        button_shadow="0 1px 2px rgba(0, 0, 0, 0.1)",
        layout="list",
        density="compact",
        icon_size="small",
        image_style="none",
        item_style="simple",
    ),
    MenuTheme(
        id="elegant",
        display_name="Elegant",
        colors=_palette(
            "hsl(210, 40%, 20%)", "hsl(210, 40%, 95%)", "hsl(210, 30%, 98%)", "hsl(0, 0%, 100%)",
            "hsl(210, 30%, 15%)", "hsl(210, 15%, 50%)", "hsl(210, 20%, 85%)", "hsl(35, 80%, 60%)",
        ),
        heading_font="Playfair Display, serif",
        body_font="Source Sans Pro, sans-serif",
        card_spacing="2rem",
        section_spacing="2.5rem",
        border_radius="0.5rem",
        card_shadow="0 4px 20px rgba(0, 0, 0, 0.08)",
        button_shadow="0 2px 10px rgba(0, 0, 0, 0.1)",
        layout="list",
        density="spacious",
        icon_size="large",
        image_style="circle",
        item_style="detailed",
    ),
    MenuTheme(
        id="fun",
        display_name="Fun",
        colors=_palette(
            "hsl(340, 100%, 50%)", "hsl(340, 100%, 95%)", "hsl(50, 100%, 98%)", "hsl(0, 0%, 100%)",
            "hsl(260, 15%, 15%)", "hsl(260, 10%, 45%)", "hsl(340, 30%, 90%)", "hsl(60, 100%, 50%)",
        ),
        heading_font="Comic Neue, cursive",
        body_font="Nunito, sans-serif",
        card_spacing="1.5rem",
        section_spacing="2rem",
        border_radius="1.5rem",
        card_shadow="0 8px 25px rgba(255, 20, 147, 0.15)",
        button_shadow="0 4px 15px rgba(255, 20, 147, 0.2)",
        layout="masonry",
        density="comfortable",
        icon_size="large",
        image_style="circle",
        item_style="simple",
    ),
    MenuTheme(
        id="natural",
        display_name="Natural",
        colors=_palette(
            "hsl(120, 40%, 35%)", "hsl(120, 40%, 95%)", "hsl(60, 30%, 96%)", "hsl(0, 0%, 100%)",
            "hsl(30, 25%, 15%)", "hsl(30, 15%, 45%)", "hsl(120, 20%, 85%)", "hsl(25, 80%, 55%)",
        ),
        heading_font="Merriweather, serif",
        body_font="Open Sans, sans-serif",
        card_spacing="1.5rem",
        section_spacing="2rem",
        border_radius="0.75rem",
        card_shadow="0 4px 15px rgba(34, 139, 34, 0.1)",
        button_shadow="0 2px 8px rgba(34, 139, 34, 0.15)",
        layout="grid",
        density="spacious",
        icon_size="large",
        image_style="rounded",
        item_style="detailed",
    ),
    MenuTheme(
        id="tech",
        display_name="Tech",
        colors=_palette(
            "hsl(200, 100%, 50%)", "hsl(220, 30%, 15%)", "hsl(220, 30%, 8%)", "hsl(220, 25%, 12%)",
            "hsl(0, 0%, 95%)", "hsl(0, 0%, 70%)", "hsl(220, 20%, 20%)", "hsl(180, 100%, 50%)",
        ),
        heading_font="Orbitron, sans-serif",
        body_font="Roboto, sans-serif",
        card_spacing="1.5rem",
        section_spacing="2rem",
        border_radius="0.5rem",
        card_shadow="0 4px 20px rgba(0, 191, 255, 0.2)",
        button_shadow="0 2px 10px rgba(0, 191, 255, 0.3)",
        layout="table",
        density="compact",
        icon_size="small",
        image_style="square",
        item_style="simple",
    ),
    MenuTheme(
        id="vintage",
        display_name="Vintage",
        colors=_palette(
            "hsl(25, 60%, 45%)", "hsl(25, 60%, 90%)", "hsl(40, 40%, 94%)", "hsl(40, 30%, 98%)",
            "hsl(25, 30%, 20%)", "hsl(25, 20%, 45%)", "hsl(25, 30%, 80%)", "hsl(5, 70%, 50%)",
        ),
        heading_font="Abril Fatface, cursive",
        body_font="Crimson Text, serif",
        card_spacing="1.5rem",
        section_spacing="2rem",
        border_radius="0.5rem",
        card_shadow="0 4px 15px rgba(139, 69, 19, 0.15)",
        button_shadow="0 2px 8px rgba(139, 69, 19, 0.2)",
        layout="list",
        density="comfortable",
        icon_size="medium",
        image_style="square",
        item_style="detailed",
    ),
    MenuTheme(
        id="professional",
        display_name="Professional",
        colors=_palette(
            "hsl(210, 100%, 35%)", "hsl(210, 100%, 95%)", "hsl(210, 20%, 98%)", "hsl(0, 0%, 100%)",
            "hsl(210, 20%, 15%)", "hsl(210, 15%, 45%)", "hsl(210, 15%, 88%)", "hsl(210, 100%, 45%)",
        ),
        heading_font="Roboto, sans-serif",
        body_font="Roboto, sans-serif",
        card_spacing="1.25rem",
        section_spacing="1.75rem",
        border_radius="0.375rem",
        card_shadow="0 2px 10px rgba(0, 0, 0, 0.08)",
        button_shadow="0 1px 5px rgba(0, 0, 0, 0.1)",
        layout="table",
        density="comfortable",
        icon_size="medium",
        image_style="rounded",
        item_style="detailed",
    ),
)

_THEMES_BY_ID = {theme.id: theme for theme in MENU_THEMES}


def get_theme_by_id(theme_id: Optional[str]) -> Optional[MenuTheme]:
    return _THEMES_BY_ID.get(theme_id or "")


def list_themes() -> list[dict]:
    return [theme.to_dict() for theme in MENU_THEMES]


def normalize_color_key(key: str) -> str:
    """Accept ``textSecondary`` as well as ``text_secondary``."""
    return "text_secondary" if key == "textSecondary" else key


def get_theme_css_variables(theme: MenuTheme, custom_colors: Optional[Mapping[str, str]] = None) -> dict[str, str]:
    """The fifteen ``--menu-*`` CSS custom properties; custom colours win."""
    colors = dict(theme.colors)
    for key, value in (custom_colors or {}).items():
        key = normalize_color_key(key)
        if key in colors and value:
            colors[key] = value

    return {
        "--menu-primary": colors["primary"],
        "--menu-secondary": colors["secondary"],
        "--menu-background": colors["background"],
        "--menu-surface": colors["surface"],
        "--menu-text": colors["text"],
        "--menu-text-secondary": colors["text_secondary"],
        "--menu-border": colors["border"],
        "--menu-accent": colors["accent"],
        "--menu-font-heading": theme.heading_font,
        "--menu-font-body": theme.body_font,
        "--menu-card-padding": theme.card_spacing,
        "--menu-section-padding": theme.section_spacing,
        "--menu-border-radius": theme.border_radius,
        "--menu-shadow-card": theme.card_shadow,
        "--menu-shadow-button": theme.button_shadow,
    }
