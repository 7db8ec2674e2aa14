"""
Clone preparation for capture.

Copies the element tree, prunes excluded nodes, moves inline styles into
generated classes and stages the clone in an off-tree container of the
owning document.
"""

import copy
from dataclasses import dataclass, field
from typing import Callable, Dict, List, Optional, Tuple

from bs4 import BeautifulSoup, Tag

from .styles import get_style, serialize_style
from ..core.context import CaptureOptions
from ..utils.constants import SANDBOX_ID, STAMP_ATTR_PREFIX
from ..utils.log import get_logger


logger = get_logger("clone")

# Properties the background stage writes inline on the clone
INLINED_PROPERTIES = ("background-image",)

CLASS_PREFIX = "ds"

SANDBOX_STYLE = (
    "position:absolute;left:-9999px;top:-9999px;"
    "width:0;height:0;overflow:hidden;pointer-events:none"
)


@dataclass
class PreparedClone:
    """Result of clone preparation."""

    clone: Tag
    class_css: str = ""
    # (original, clone) element pairs still present in the clone
    pairs: List[Tuple[Tag, Tag]] = field(default_factory=list)
    sandbox: Optional[Tag] = None


def owner_document(tag: Tag) -> Optional[BeautifulSoup]:
    """Get the BeautifulSoup document a tag belongs to, if any."""
    if isinstance(tag, BeautifulSoup):
        return tag
    for parent in tag.parents:
        if isinstance(parent, BeautifulSoup):
            return parent
    return None


def _is_excluded(
    tag: Tag,
    selectors: List[str],
    keep: Optional[Callable[[Tag], bool]]
) -> bool:
    for selector in selectors:
        if tag.css.match(selector):
            return True
    if keep is not None and not keep(tag):
        return True
    return False


def _ensure_sandbox(document: BeautifulSoup) -> Tag:
    sandbox = document.find(id=SANDBOX_ID)
    if sandbox is not None:
        return sandbox
    sandbox = document.new_tag("div", attrs={"id": SANDBOX_ID, "style": SANDBOX_STYLE})
    (document.body or document).append(sandbox)
    return sandbox


def release_clone(prepared: Optional[PreparedClone]) -> bool:
    """
    Take a prepared clone out of the staging container.
    
    Other captures of the same document may have staged their clones in
    the same container, so only this clone is detached. The container
    itself is detached once nothing is left in it.
    
    Args:
        prepared: Result of prepare_clone, or None if cloning never ran
        
    Returns:
        True if the staging container was removed
    """
    if prepared is None or prepared.sandbox is None:
        return False
    sandbox = prepared.sandbox
    if prepared.clone.parent is sandbox:
        prepared.clone.extract()
    if sandbox.parent is None or sandbox.find(True) is not None:
        return False
    sandbox.extract()
    return True


def prepare_clone(
    element: Tag,
    options: CaptureOptions,
    style_accessor: Callable[[Tag], Dict[str, str]] = get_style
) -> PreparedClone:
    """
    Clone an element and scope its styles to generated classes.
    
    Args:
        element: Element to clone
        options: Capture options (exclude, filter, compress)
        style_accessor: Computed style lookup for original elements
        
    Returns:
        PreparedClone with the clone, its class CSS and element pairs
    """
    clone = copy.copy(element)
    originals = [element] + element.find_all(True)
    copies = [clone] + clone.find_all(True)
    pairs = list(zip(originals, copies))
    
    # Prune excluded subtrees, never the root
    for original, copied in pairs[1:]:
        if copied.decomposed:
            continue
        if _is_excluded(original, options.exclude, options.filter):
            copied.decompose()
    pairs = [(original, copied) for original, copied in pairs if not copied.decomposed]
    
    rules: Dict[str, str] = {}
    css_parts: List[str] = []
    for original, copied in pairs:
        declarations = {
            prop: value
            for prop, value in style_accessor(original).items()
            if prop not in INLINED_PROPERTIES
        }
        for attr in [name for name in copied.attrs if name.startswith(STAMP_ATTR_PREFIX)]:
            del copied[attr]
        if "style" in copied.attrs:
            del copied["style"]
        if not declarations:
            continue
        
        block = serialize_style(declarations)
        class_name = rules.get(block) if options.compress else None
        if class_name is None:
            class_name = f"{CLASS_PREFIX}{len(css_parts)}"
            rules[block] = class_name
            css_parts.append(f".{class_name}{{{block}}}")
        classes = copied.get("class", [])
        if isinstance(classes, str):
            classes = classes.split()
        copied["class"] = list(classes) + [class_name]
    
    sandbox = None
    document = owner_document(element)
    if document is not None:
        sandbox = _ensure_sandbox(document)
        sandbox.append(clone)
    
    logger.debug(
        f"Prepared clone of <{element.name}>: {len(pairs)} elements, "
        f"{len(css_parts)} classes"
    )
    return PreparedClone(
        clone=clone,
        class_css="".join(css_parts),
        pairs=pairs,
        sandbox=sandbox,
    )
