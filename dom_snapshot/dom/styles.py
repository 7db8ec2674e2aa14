"""
Style access helpers for element trees.

Elements are BeautifulSoup tags. Their "computed" style is the inline
style attribute overlaid with values the browser renderer stamped onto
the tree.
"""

import re
from typing import Dict, List, Optional, Tuple

from bs4 import Tag

from ..utils.constants import (
    STAMP_BACKGROUND_ATTR,
    STAMP_HEIGHT_ATTR,
    STAMP_WIDTH_ATTR,
)


PX_PATTERN = re.compile(r'^\s*(-?\d+(?:\.\d+)?)\s*(px)?\s*$', re.IGNORECASE)


def parse_style(style: str) -> Dict[str, str]:
    """
    Parse a declaration list into an ordered property -> value dict.
    
    Semicolons inside parentheses or quotes (data URLs, url("a;b")) do not
    end a declaration.
    
    Args:
        style: Inline style text
        
    Returns:
        Dictionary of lower-cased property names to values
    """
    declarations: Dict[str, str] = {}
    for chunk in _split_top_level(style or "", ";"):
        if ":" not in chunk:
            continue
        prop, value = chunk.split(":", 1)
        prop = prop.strip().lower()
        value = value.strip()
        if prop and value:
            declarations[prop] = value
    return declarations


def serialize_style(declarations: Dict[str, str]) -> str:
    """Serialize declarations back into inline style text."""
    return ";".join(f"{prop}:{value}" for prop, value in declarations.items())


def set_style_property(tag: Tag, prop: str, value: str) -> None:
    """Set one property in a tag's inline style, keeping the others."""
    declarations = parse_style(tag.get("style", ""))
    declarations[prop.lower()] = value
    tag["style"] = serialize_style(declarations)


def get_style(tag: Tag) -> Dict[str, str]:
    """
    Get the computed style of an element.
    
    Args:
        tag: Element
        
    Returns:
        Dictionary of property names to values
    """
    style = parse_style(tag.get("style", ""))
    stamped = tag.get(STAMP_BACKGROUND_ATTR)
    if stamped is not None:
        style["background-image"] = stamped
    return style


def split_background_image(value: str) -> List[str]:
    """
    Split a background-image value into its layers.
    
    Only top-level commas separate layers; commas inside function
    parentheses or quotes are kept.
    
    Args:
        value: background-image value
        
    Returns:
        Ordered list of stripped layer strings
    """
    return [layer for layer in _split_top_level(value or "", ",") if layer]


def _split_top_level(text: str, separator: str) -> List[str]:
    parts = []
    depth = 0
    quote: Optional[str] = None
    current = []
    for char in text:
        if quote:
            if char == quote:
                quote = None
        elif char in "\"'":
            quote = char
        elif char == "(":
            depth += 1
        elif char == ")":
            depth = max(depth - 1, 0)
        elif char == separator and depth == 0:
            parts.append("".join(current).strip())
            current = []
            continue
        current.append(char)
    parts.append("".join(current).strip())
    return parts


def collect_used_tag_names(root: Tag) -> List[str]:
    """Get the sorted, de-duplicated tag names in a subtree."""
    names = {root.name}
    names.update(tag.name for tag in root.find_all(True))
    return sorted(names)


def _to_px(value) -> Optional[float]:
    if value is None:
        return None
    match = PX_PATTERN.match(str(value))
    if not match:
        return None
    return float(match.group(1))


def measure(tag: Tag) -> Tuple[float, float]:
    """
    Get the natural size of an element.
    
    Stamped renderer sizes win over inline width/height declarations,
    which win over width/height attributes. Unknown sizes are 0.
    
    Args:
        tag: Element
        
    Returns:
        (width, height) in CSS pixels
    """
    style = parse_style(tag.get("style", ""))
    sizes = []
    for stamp, prop in ((STAMP_WIDTH_ATTR, "width"), (STAMP_HEIGHT_ATTR, "height")):
        for candidate in (tag.get(stamp), style.get(prop), tag.get(prop)):
            size = _to_px(candidate)
            if size is not None:
                break
        sizes.append(size or 0.0)
    return sizes[0], sizes[1]
