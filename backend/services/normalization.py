"""
Normalization helpers shared by catalog ingestion and matching.
Colors are folded into a small canonical set so that matching is an exact comparison.
"""
import logging
from typing import Optional

logger = logging.getLogger(__name__)

DEFAULT_IMAGE_BASE_URL = "https://cdn.shopify.com"
SAFE_LINK = "#"

# Checked in order; the first group with a matching substring wins.
CANONICAL_COLORS = (
    ("pink", ("pink", "rose", "blush")),
    ("black", ("black",)),
    ("white", ("white", "off white")),
)


def normalize_color(color: Optional[str]) -> str:
    """Maps a free-form color name to its canonical value, e.g. 'Rose Pink' -> 'pink'."""
    if not color or not isinstance(color, str):
        return ""
    cleaned = color.strip().lower()
    for canonical, markers in CANONICAL_COLORS:
        if any(marker in cleaned for marker in markers):
            return canonical
    return cleaned


def is_absolute_url(url: Optional[str]) -> bool:
    if not url or not isinstance(url, str):
        return False
    lowered = url.strip().lower()
    return lowered.startswith("http://") or lowered.startswith("https://")


def normalize_image_url(url: Optional[str], base_url: str = DEFAULT_IMAGE_BASE_URL) -> Optional[str]:
    """
    Returns an absolute image URL.
    Protocol-relative URLs ('//host/img.jpg') get https, other relative paths are joined onto base_url.
    """
    if not url or not isinstance(url, str) or not url.strip():
        return None
    url = url.strip()
    if is_absolute_url(url):
        return url
    if url.startswith("//"):
        return f"https:{url}"
    return f"{base_url.rstrip('/')}/{url.lstrip('/')}"


def normalize_link(url: Optional[str]) -> str:
    """Outbound product links must be absolute, anything else becomes '#'."""
    if is_absolute_url(url):
        return url.strip()
    if url:
        logger.debug(f"Replacing non-absolute product link '{url}' with '{SAFE_LINK}'")
    return SAFE_LINK
