"""
Stock event themes and helpers for exposing them on invitation pages.
"""

from __future__ import annotations

import logging

logger = logging.getLogger(__name__)

DEFAULT_THEMES: list[dict] = [
    {
        "name": "elegant-corporate",
        "display_name": "Elegant Corporate",
        "description": "Sophisticated design for executive meetings",
        "primary_color": "#374151",
        "secondary_color": "#6B7280",
        "accent_color": "#9CA3AF",
        "text_color": "#FFFFFF",
        "background_gradient": "linear-gradient(135deg, #374151 0%, #1F2937 100%)",
        "font_family": "Inter",
        "font_weight": "500",
        "border_radius": 12,
        "shadow_intensity": "medium",
        "category": "business",
    },
    {
        "name": "modern-business",
        "display_name": "Modern Business",
        "description": "Clean and professional for corporate events",
        "primary_color": "#2563EB",
        "secondary_color": "#3B82F6",
        "accent_color": "#6366F1",
        "text_color": "#FFFFFF",
        "background_gradient": "linear-gradient(135deg, #2563EB 0%, #1D4ED8 100%)",
        "font_family": "Inter",
        "font_weight": "500",
        "border_radius": 8,
        "shadow_intensity": "medium",
        "category": "business",
    },
    {
        "name": "minimal-tech",
        "display_name": "Minimal Tech",
        "description": "Sleek design for technology events",
        "primary_color": "#475569",
        "secondary_color": "#64748B",
        "accent_color": "#94A3B8",
        "text_color": "#FFFFFF",
        "background_gradient": "linear-gradient(135deg, #475569 0%, #334155 100%)",
        "font_family": "Inter",
        "font_weight": "400",
        "border_radius": 6,
        "shadow_intensity": "low",
        "category": "business",
    },
    {
        "name": "neon-glow",
        "display_name": "Neon Glow",
        "description": "Electric atmosphere for night events",
        "primary_color": "#9333EA",
        "secondary_color": "#EC4899",
        "accent_color": "#8B5CF6",
        "text_color": "#FFFFFF",
        "background_gradient": "linear-gradient(135deg, #9333EA 0%, #EC4899 100%)",
        "font_family": "Inter",
        "font_weight": "600",
        "border_radius": 16,
        "shadow_intensity": "high",
        "category": "party",
    },
    {
        "name": "vibrant-party",
        "display_name": "Vibrant Party",
        "description": "Colorful and energetic for celebrations",
        "primary_color": "#F97316",
        "secondary_color": "#EF4444",
        "accent_color": "#EC4899",
        "text_color": "#FFFFFF",
        "background_gradient": "linear-gradient(135deg, #F97316 0%, #EF4444 50%, #EC4899 100%)",
        "font_family": "Inter",
        "font_weight": "700",
        "border_radius": 20,
        "shadow_intensity": "high",
        "category": "party",
    },
    {
        "name": "elegant-wedding",
        "display_name": "Elegant Wedding",
        "description": "Romantic design for special occasions",
        "primary_color": "#FB7185",
        "secondary_color": "#F9A8D4",
        "accent_color": "#FBBF24",
        "text_color": "#FFFFFF",
        "background_gradient": "linear-gradient(135deg, #FB7185 0%, #F9A8D4 100%)",
        "font_family": "Inter",
        "font_weight": "400",
        "border_radius": 24,
        "shadow_intensity": "medium",
        "category": "party",
    },
    {
        "name": "festival-fun",
        "display_name": "Festival Fun",
        "description": "Vibrant theme for festivals and carnivals",
        "primary_color": "#FBBF24",
        "secondary_color": "#FB923C",
        "accent_color": "#EF4444",
        "text_color": "#FFFFFF",
        "background_gradient": "linear-gradient(135deg, #FBBF24 0%, #FB923C 50%, #EF4444 100%)",
        "font_family": "Inter",
        "font_weight": "600",
        "border_radius": 16,
        "shadow_intensity": "high",
        "category": "party",
    },
    {
        "name": "friendly-gather",
        "display_name": "Friendly Gather",
        "description": "Warm and welcoming for social events",
        "primary_color": "#10B981",
        "secondary_color": "#059669",
        "accent_color": "#34D399",
        "text_color": "#FFFFFF",
        "background_gradient": "linear-gradient(135deg, #10B981 0%, #059669 100%)",
        "font_family": "Inter",
        "font_weight": "500",
        "border_radius": 12,
        "shadow_intensity": "medium",
        "category": "community",
    },
    {
        "name": "cozy-meetup",
        "display_name": "Cozy Meetup",
        "description": "Intimate setting for small gatherings",
        "primary_color": "#F59E0B",
        "secondary_color": "#D97706",
        "accent_color": "#FBBF24",
        "text_color": "#FFFFFF",
        "background_gradient": "linear-gradient(135deg, #F59E0B 0%, #D97706 100%)",
        "font_family": "Inter",
        "font_weight": "400",
        "border_radius": 16,
        "shadow_intensity": "low",
        "category": "community",
    },
    {
        "name": "charity-event",
        "display_name": "Charity Event",
        "description": "Professional theme for fundraising events",
        "primary_color": "#14B8A6",
        "secondary_color": "#06B6D4",
        "accent_color": "#0EA5E9",
        "text_color": "#FFFFFF",
        "background_gradient": "linear-gradient(135deg, #14B8A6 0%, #06B6D4 100%)",
        "font_family": "Inter",
        "font_weight": "500",
        "border_radius": 8,
        "shadow_intensity": "medium",
        "category": "community",
    },
]

STYLE_FIELDS = (
    "primary_color",
    "secondary_color",
    "accent_color",
    "text_color",
    "background_gradient",
    "font_family",
    "font_weight",
    "border_radius",
    "shadow_intensity",
)


def seed_default_themes(db, themes: list[dict] | None = None) -> int:
    """Insert any stock theme whose name is not present yet. Returns the number created."""
    created = 0
    for theme in themes if themes is not None else DEFAULT_THEMES:
        _, was_created = db.upsert_theme_if_missing(**theme)
        if was_created:
            created += 1
            logger.info("Created theme %s", theme["name"])
    return created


def theme_style(theme) -> dict | None:
    if theme is None:
        return None
    return {name: getattr(theme, name) for name in STYLE_FIELDS}
