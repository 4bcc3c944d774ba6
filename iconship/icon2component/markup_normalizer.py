"""
SVG markup normalization.

Rewrites the opening <svg> tag of raw icon markup so that it can be embedded
in a component: the id and fixed size are removed, the viewBox and color are
forced to canonical values and the enable-background attribute is dropped.
Everything after the opening tag is left byte-identical.
"""

import re

from iconship.core.constants import CANONICAL_VIEWBOX, CANONICAL_COLOR
from iconship.core.logging_config import get_logger

logger = get_logger(__name__)

ROOT_TAG_PATTERN = re.compile(r"<svg(?=[\s/>])[^>]*>")

_REMOVED_ATTRIBUTES = ("id", "height", "width")


def _attribute_pattern(name: str) -> "re.Pattern[str]":
    return re.compile(r'\s' + re.escape(name) + r'="[^"]*"')


def _remove_attribute(tag: str, name: str) -> str:
    return _attribute_pattern(name).sub("", tag, count=1)


def _set_attribute(tag: str, name: str, value: str) -> str:
    replacement = f' {name}="{value}"'
    pattern = _attribute_pattern(name)

    if pattern.search(tag):
        return pattern.sub(lambda _: replacement, tag, count=1)

    # Append before the closing ">" or "/>" of the root tag
    if tag.endswith("/>"):
        return tag[:-2].rstrip() + replacement + "/>"
    return tag[:-1] + replacement + ">"


def normalize_root_tag(
    tag: str,
    viewbox: str = CANONICAL_VIEWBOX,
    color: str = CANONICAL_COLOR
) -> str:
    """
    Apply the normalization rules to an opening <svg> tag.

    Args:
        tag (str): The opening tag, e.g. '<svg id="a" width="10">'
        viewbox (str): viewBox value to force
        color (str): color value to force

    Returns:
        str: The rewritten tag
    """
    for name in _REMOVED_ATTRIBUTES:
        tag = _remove_attribute(tag, name)
    tag = _set_attribute(tag, "viewBox", viewbox)
    tag = _remove_attribute(tag, "enable-background")
    tag = _set_attribute(tag, "color", color)
    return tag


def normalize(
    markup: str,
    viewbox: str = CANONICAL_VIEWBOX,
    color: str = CANONICAL_COLOR
) -> str:
    """
    Normalize raw SVG markup for embedding.

    Only the first opening <svg> tag is rewritten, in this order:

    1. remove the id attribute
    2. remove the height and width attributes
    3. set viewBox to the canonical 512x512 box (all assets share that grid)
    4. remove the enable-background attribute
    5. set color to black

    Missing attributes are not an error: removals do nothing and the forced
    viewBox and color are appended. Markup without a root <svg> tag is
    returned unchanged.

    Args:
        markup (str): Raw SVG markup
        viewbox (str): viewBox value to force
        color (str): color value to force

    Returns:
        str: The normalized markup
    """
    match = ROOT_TAG_PATTERN.search(markup)
    if match is None:
        logger.debug("No root <svg> element found, leaving markup unchanged")
        return markup

    tag = normalize_root_tag(match.group(0), viewbox=viewbox, color=color)
    return markup[:match.start()] + tag + markup[match.end():]
