"""
In-memory product catalog.
Holds the curated "visible" list and the larger "full" list. Uploads replace both lists at once
by swapping a single immutable snapshot, so a concurrent match never sees a half-replaced catalog.
Nothing is persisted; the catalog is empty after a restart.
"""
import logging
import threading
from dataclasses import dataclass
from typing import Any, Iterable, List, Tuple

from pydantic import ValidationError

from .normalization import DEFAULT_IMAGE_BASE_URL, normalize_color, normalize_image_url
from .schemas import CatalogUpload, Product

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CatalogSnapshot:
    visible: Tuple[Product, ...] = ()
    full: Tuple[Product, ...] = ()


def ingest_products(raw_items: Iterable[Any], image_base_url: str = DEFAULT_IMAGE_BASE_URL) -> List[Product]:
    """Validates raw product dicts and normalizes color and image. Unusable entries are skipped."""
    products = []
    skipped = 0
    for item in raw_items:
        if not isinstance(item, dict):
            skipped += 1
            continue
        try:
            product = Product.model_validate(item)
        except ValidationError as e:
            logger.warning(f"Skipping invalid catalog item: {e.errors()[:1]}")
            skipped += 1
            continue
        products.append(product.model_copy(update={
            "color": normalize_color(product.color),
            "image": normalize_image_url(product.image, image_base_url),
        }))
    if skipped:
        logger.warning(f"Skipped {skipped} catalog item(s) that were not valid product objects.")
    return products


class CatalogStore:
    def __init__(self, image_base_url: str = DEFAULT_IMAGE_BASE_URL):
        self.image_base_url = image_base_url
        self._snapshot = CatalogSnapshot()
        self._write_lock = threading.Lock()

    def snapshot(self) -> CatalogSnapshot:
        return self._snapshot

    def replace(self, upload: CatalogUpload) -> CatalogSnapshot:
        """Replaces the whole catalog with the uploaded lists. Never merges."""
        visible = tuple(ingest_products(upload.visible, self.image_base_url))
        full = tuple(ingest_products(upload.full, self.image_base_url))
        new_snapshot = CatalogSnapshot(visible=visible, full=full)
        with self._write_lock:
            self._snapshot = new_snapshot
        logger.info(f"Catalog replaced: visible={len(visible)}, full={len(full)}")
        return new_snapshot

    def clear(self) -> None:
        with self._write_lock:
            self._snapshot = CatalogSnapshot()
