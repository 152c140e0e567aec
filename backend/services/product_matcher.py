"""
Product matching for /api/match.
Scores catalog products against the query context, searches the curated visible list first and
falls back to the full catalog when too few products match, then de-duplicates by image,
sanitizes and truncates the ranked list.
"""
import logging
from typing import Dict, List, Optional, Sequence, Tuple

from .catalog_store import CatalogSnapshot
from .normalization import DEFAULT_IMAGE_BASE_URL, normalize_color, normalize_image_url, normalize_link
from .schemas import MatchRequest, Product

logger = logging.getLogger(__name__)

COLOR_MATCH_SCORE = 5
CATEGORY_MATCH_SCORE = 2
KEYWORD_MATCH_SCORE = 1

# Below this many visible matches the full catalog is searched as well.
DEFAULT_MIN_VISIBLE_RESULTS = 8
MAX_RESULTS = 24

CHARACTER_QUERY_MARKER = " from "


def is_character_query(user_message: Optional[str]) -> bool:
    """'Eleven from Stranger Things' style queries name a character rather than a garment."""
    return bool(user_message) and CHARACTER_QUERY_MARKER in user_message


def score_product(
    product: Product,
    color_filter: Optional[str],
    category_filter: Optional[str],
    keywords: Sequence[str],
    character_query: bool = False,
) -> int:
    """
    Additive relevance score for one product.
    color_filter must already be canonical (see normalize_color).
    Category matches are ignored for character queries since the category word is mostly noise there.
    """
    title = (product.title or "").lower()
    score = 0

    if color_filter and product.color == color_filter:
        score += COLOR_MATCH_SCORE

    if category_filter and not character_query and category_filter.lower() in title:
        score += CATEGORY_MATCH_SCORE

    for keyword in keywords:
        keyword = keyword.strip().lower()
        if keyword and keyword in title:
            score += KEYWORD_MATCH_SCORE

    return score


def _score_all(
    products: Sequence[Product],
    color_filter: Optional[str],
    category_filter: Optional[str],
    keywords: Sequence[str],
    character_query: bool,
) -> List[Tuple[int, Product]]:
    scored = []
    for product in products:
        score = score_product(product, color_filter, category_filter, keywords, character_query)
        if score > 0:
            scored.append((score, product))
    return scored


def collect_candidates(
    catalog: CatalogSnapshot,
    request: MatchRequest,
    min_visible_results: int = DEFAULT_MIN_VISIBLE_RESULTS,
) -> List[Tuple[int, Product]]:
    """Precision pass over the visible list, plus a recall pass over the full list when it comes up short."""
    context = request.context
    color_filter = normalize_color(context.first_color) or None
    category_filter = context.first_category
    keywords = context.keywords
    character_query = is_character_query(request.user_message)

    candidates = _score_all(catalog.visible, color_filter, category_filter, keywords, character_query)
    visible_count = len(candidates)

    if visible_count < min_visible_results:
        candidates.extend(_score_all(catalog.full, color_filter, category_filter, keywords, character_query))

    logger.debug(
        f"Candidates: visible={visible_count}, total={len(candidates)}, color={color_filter}, "
        f"category={category_filter}, keywords={keywords}, character_query={character_query}"
    )
    return candidates


def rank_and_dedupe(
    candidates: List[Tuple[int, Product]],
    max_results: int = MAX_RESULTS,
    image_base_url: str = DEFAULT_IMAGE_BASE_URL,
) -> List[Dict[str, Optional[str]]]:
    # sorted() is stable, so visible matches stay ahead of full matches with the same score
    ranked = sorted(candidates, key=lambda pair: pair[0], reverse=True)

    results = []
    seen_images = set()
    for _, product in ranked:
        image = normalize_image_url(product.image, image_base_url)
        # The best-ranked product claims its image even if it is dropped below
        if image in seen_images:
            continue
        seen_images.add(image)
        if not product.title or not image:
            continue
        results.append(Product(
            title=product.title,
            color=product.color,
            image=image,
            link=normalize_link(product.link),
        ).public_dict())
        if len(results) >= max_results:
            break
    return results


def match_products(
    catalog: CatalogSnapshot,
    request: MatchRequest,
    min_visible_results: int = DEFAULT_MIN_VISIBLE_RESULTS,
    max_results: int = MAX_RESULTS,
    image_base_url: str = DEFAULT_IMAGE_BASE_URL,
) -> List[Dict[str, Optional[str]]]:
    """Full match pipeline: score, fall back to the full catalog if needed, rank, de-dupe and cap."""
    candidates = collect_candidates(catalog, request, min_visible_results)
    results = rank_and_dedupe(candidates, max_results, image_base_url)
    logger.info(f"Matched {len(results)} product(s) from {len(candidates)} candidate(s)")
    return results
