"""
Base CSS generation for captured trees.

The snapshot carries default styles for the tags it contains, so the
result renders the same outside the original page. Tags with identical
defaults share one rule.
"""

from typing import Dict, Iterable, List

from ..core.cache import ResourceCache


# Default styles for common tags
DEFAULT_TAG_STYLES: Dict[str, str] = {
    "div": "display:block",
    "section": "display:block",
    "article": "display:block",
    "header": "display:block",
    "footer": "display:block",
    "nav": "display:block",
    "main": "display:block",
    "aside": "display:block",
    "figure": "display:block;margin:1em 40px",
    "p": "display:block;margin:1em 0",
    "ul": "display:block;list-style-type:disc;margin:1em 0;padding-left:40px",
    "ol": "display:block;list-style-type:decimal;margin:1em 0;padding-left:40px",
    "li": "display:list-item",
    "h1": "display:block;font-size:2em;font-weight:bold;margin:0.67em 0",
    "h2": "display:block;font-size:1.5em;font-weight:bold;margin:0.83em 0",
    "h3": "display:block;font-size:1.17em;font-weight:bold;margin:1em 0",
    "h4": "display:block;font-weight:bold;margin:1.33em 0",
    "span": "display:inline",
    "a": "display:inline",
    "strong": "font-weight:bold",
    "b": "font-weight:bold",
    "em": "font-style:italic",
    "i": "font-style:italic",
    "img": "display:inline-block",
    "button": "display:inline-block",
    "input": "display:inline-block",
    "table": "display:table;border-collapse:separate",
    "tr": "display:table-row",
    "td": "display:table-cell",
    "th": "display:table-cell;font-weight:bold",
}

COMMON_TAGS = ("div", "span", "p", "a", "img", "ul", "li", "h1", "h2", "h3", "button", "section")


def generate_deduped_base_css(tag_names: Iterable[str]) -> str:
    """
    Generate default CSS for a set of tags.
    
    Args:
        tag_names: Tag names present in the tree
        
    Returns:
        CSS text with one rule per distinct declaration block
    """
    grouped: Dict[str, List[str]] = {}
    for name in sorted(set(tag_names)):
        declarations = DEFAULT_TAG_STYLES.get(name)
        if declarations:
            grouped.setdefault(declarations, []).append(name)
    return "".join(
        f"{','.join(names)}{{{declarations}}}"
        for declarations, names in grouped.items()
    )


def precache_common_tags(cache: ResourceCache) -> None:
    """Store base CSS for each common tag under its own tag-set key."""
    for name in COMMON_TAGS:
        if not cache.base_style.has(name):
            cache.base_style.set(name, generate_deduped_base_css([name]))
