# sitebuilder/builder/styles.py
"""
Style records are whitelisted tokens, not raw CSS.

A resolved style (see tree.effective_style) is turned into utility classes.
Only a few size-like values and background images ever reach an inline
style attribute, and those are validated first. Unknown keys and values
are dropped silently: a bad style must never break a page.
"""
import re
from typing import Any, Dict, List, Mapping, Tuple

from .actions import sanitize_url

SPACING = {
    "none": "0",
    "xs": "1",
    "sm": "2",
    "md": "4",
    "lg": "6",
    "xl": "8",
    "2xl": "12",
    "3xl": "16",
    "4xl": "24",
}

COLORS = {
    "transparent", "background", "foreground",
    "primary", "primary-foreground", "secondary", "secondary-foreground",
    "muted", "muted-foreground", "accent", "accent-foreground",
    "destructive", "destructive-foreground",
    "border", "input", "ring", "card", "card-foreground",
    "popover", "popover-foreground", "white", "black",
}

FONT_SIZES = {"xs", "sm", "base", "lg", "xl", "2xl", "3xl", "4xl", "5xl", "6xl"}

FONT_WEIGHTS = {"thin", "light", "normal", "medium", "semibold", "bold", "extrabold"}

RADII = {"none", "sm", "md", "lg", "xl", "2xl", "full"}

SHADOWS = {"none", "sm", "md", "lg", "xl", "2xl"}

MAX_WIDTHS = {"sm", "md", "lg", "xl", "2xl", "3xl", "4xl", "5xl", "6xl", "7xl", "full", "none"}

DISPLAY = {"block": "block", "inline": "inline", "inline-block": "inline-block", "flex": "flex", "grid": "grid", "none": "hidden"}

FLEX_DIRECTION = {"row": "flex-row", "row-reverse": "flex-row-reverse", "column": "flex-col", "column-reverse": "flex-col-reverse"}

ALIGN = {"start": "items-start", "center": "items-center", "end": "items-end", "stretch": "items-stretch", "baseline": "items-baseline"}

JUSTIFY = {
    "start": "justify-start",
    "center": "justify-center",
    "end": "justify-end",
    "between": "justify-between",
    "around": "justify-around",
    "evenly": "justify-evenly",
}

TEXT_ALIGN = {"left", "center", "right", "justify"}

SPACING_PREFIXES = {
    "padding": "p",
    "paddingX": "px",
    "paddingY": "py",
    "paddingTop": "pt",
    "paddingRight": "pr",
    "paddingBottom": "pb",
    "paddingLeft": "pl",
    "margin": "m",
    "marginX": "mx",
    "marginY": "my",
    "marginTop": "mt",
    "marginRight": "mr",
    "marginBottom": "mb",
    "marginLeft": "ml",
    "gap": "gap",
    "gapX": "gap-x",
    "gapY": "gap-y",
}

COLOR_PREFIXES = {"backgroundColor": "bg", "color": "text", "borderColor": "border"}

# 100%, 320px, 12rem, 50vh, auto
_SIZE = re.compile(r"^(auto|\d{1,4}(\.\d{1,2})?(px|rem|em|%|vh|vw))$")

INLINE_SIZES = {"width": "width", "height": "height", "minHeight": "min-height", "minWidth": "min-width"}


def _grid_span(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool) and 1 <= value <= 12


def style_classes(style: Mapping[str, Any]) -> List[str]:
    classes: List[str] = []

    for key, value in style.items():
        if not isinstance(value, (str, int)) or isinstance(value, bool):
            continue

        if key in SPACING_PREFIXES and value in SPACING:
            classes.append(f"{SPACING_PREFIXES[key]}-{SPACING[value]}")
        elif key in COLOR_PREFIXES and value in COLORS:
            classes.append(f"{COLOR_PREFIXES[key]}-{value}")
        elif key == "fontSize" and value in FONT_SIZES:
            classes.append(f"text-{value}")
        elif key == "fontWeight" and value in FONT_WEIGHTS:
            classes.append(f"font-{value}")
        elif key == "textAlign" and value in TEXT_ALIGN:
            classes.append(f"text-{value}")
        elif key == "borderRadius" and value in RADII:
            classes.append("rounded-none" if value == "none" else f"rounded-{value}")
        elif key == "shadow" and value in SHADOWS:
            classes.append("shadow-none" if value == "none" else f"shadow-{value}")
        elif key == "maxWidth" and value in MAX_WIDTHS:
            classes.append(f"max-w-{value}")
        elif key == "display" and value in DISPLAY:
            classes.append(DISPLAY[value])
        elif key == "flexDirection" and value in FLEX_DIRECTION:
            classes.append(FLEX_DIRECTION[value])
        elif key == "alignItems" and value in ALIGN:
            classes.append(ALIGN[value])
        elif key == "justifyContent" and value in JUSTIFY:
            classes.append(JUSTIFY[value])
        elif key == "gridColumns" and _grid_span(value):
            classes.append(f"grid-cols-{value}")
        elif key == "gridColumnSpan" and _grid_span(value):
            classes.append(f"col-span-{value}")
        elif key == "opacity" and isinstance(value, int) and 0 <= value <= 100 and value % 5 == 0:
            classes.append(f"opacity-{value}")

    return classes


def inline_style(style: Mapping[str, Any]) -> str:
    declarations: List[Tuple[str, str]] = []

    for key, prop in INLINE_SIZES.items():
        value = style.get(key)
        if isinstance(value, str) and _SIZE.match(value.strip()):
            declarations.append((prop, value.strip()))

    background = sanitize_url(style.get("backgroundImage"))
    if background and not any(c in background for c in "()'\"\\;"):
        declarations.append(("background-image", f"url('{background}')"))

    return "; ".join(f"{prop}: {value}" for prop, value in declarations)


def resolve(style: Mapping[str, Any]) -> Dict[str, str]:
    """Class list and inline declarations for an already-layered style."""
    return {
        "class": " ".join(style_classes(style)),
        "style": inline_style(style),
    }
