"""
Element tree collaborators.

Contains style access, clone preparation, base CSS generation and font
embedding for BeautifulSoup element trees.
"""

from .styles import (
    get_style,
    split_background_image,
    collect_used_tag_names,
    set_style_property,
    measure,
)
from .clone import PreparedClone, prepare_clone, release_clone, owner_document
from .css import generate_deduped_base_css, precache_common_tags
from .fonts import FontEmbedder

__all__ = [
    "get_style",
    "split_background_image",
    "collect_used_tag_names",
    "set_style_property",
    "measure",
    "PreparedClone",
    "prepare_clone",
    "release_clone",
    "owner_document",
    "generate_deduped_base_css",
    "precache_common_tags",
    "FontEmbedder",
]
