"""Default sections for application schema documents."""

from __future__ import annotations

PLATFORMS = ("website", "webapp", "mobile")

REQUIRED_FIELDS = ("meta", "design", "structure")

DEFAULT_PRIMARY_COLOR = "#6366f1"

DEFAULT_COLORS = {
    "primary": DEFAULT_PRIMARY_COLOR,
    "secondary": "#8b5cf6",
    "accent": "#06b6d4",
    "background": "#ffffff",
    "foreground": "#0a0a0a",
    "muted": "#6b7280",
    "border": "#e5e7eb",
    "error": "#ef4444",
    "success": "#22c55e",
    "warning": "#f59e0b",
}

DEFAULT_TYPOGRAPHY = {
    "headingFont": "Inter",
    "bodyFont": "Inter",
    "baseFontSize": 16,
    "lineHeight": 1.5,
}

DEFAULT_BREAKPOINTS = {"sm": 640, "md": 768, "lg": 1024, "xl": 1280, "2xl": 1536}


def is_valid_platform(platform: str) -> bool:
    return platform in PLATFORMS


def default_meta(platform: str) -> dict:
    return {"name": "", "description": "", "platform": platform, "version": "1.0.0"}


def default_design() -> dict:
    return {
        "theme": "system",
        "colors": dict(DEFAULT_COLORS),
        "typography": dict(DEFAULT_TYPOGRAPHY),
        "spacing": "normal",
        "borderRadius": "md",
        "shadows": True,
    }


def default_responsive() -> dict:
    return {"strategy": "mobile-first", "breakpoints": dict(DEFAULT_BREAKPOINTS)}


def default_structure(platform: str) -> dict:
    # Mobile apps navigate with a tab bar, web targets with a header
    nav_type = "tabs" if platform == "mobile" else "header"
    return {
        "pages": [],
        "navigation": {"type": nav_type, "items": []},
        "layouts": [],
    }


def create_empty_schema(platform: str) -> dict:
    """A complete, unversioned schema document for a platform."""
    return {
        "meta": default_meta(platform),
        "design": default_design(),
        "structure": default_structure(platform),
        "features": {},
        "components": [],
        "integrations": [],
    }
