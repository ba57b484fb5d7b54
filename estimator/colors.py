"""
Named metal panel palette.

Presentation only: the store accepts any color code, these names exist so
summaries can show "Burnished Slate" instead of a hex string.
"""

ROOF_COLORS = {
    "#FFFFFF": "Polar White",
    "#8B8D8F": "Pewter Gray",
    "#4A4A48": "Charcoal",
    "#3B3B3B": "Burnished Slate",
    "#7A1F1F": "Crimson Red",
    "#2E4A2E": "Hunter Green",
    "#1F3A5F": "Gallery Blue",
    "#D7CCC8": "Light Stone",
}

WALL_COLORS = {
    **ROOF_COLORS,
    "#E8DCC8": "Sandstone",
    "#FEF3C7": "Ivory",
    "#8B5A2B": "Saddle Tan",
}

TRIM_COLORS = {
    **WALL_COLORS,
    "#000000": "Black",
}

DEFAULT_COLORS = {
    "roof": "#3B3B3B",
    "walls": "#E8DCC8",
    "trim": "#FFFFFF",
}

_PALETTES = {
    "roof": ROOF_COLORS,
    "walls": WALL_COLORS,
    "trim": TRIM_COLORS,
}


def color_name(part: str, code: str) -> str:
    """Palette name for a color code, or "Custom" when it is not a stock color."""
    palette = _PALETTES.get(part, {})
    return palette.get(str(code).upper(), "Custom")
