import unittest
import os
import sys
import logging

# Add parent directory to Python path
current_dir = os.path.dirname(os.path.abspath(__file__))
backend_dir = os.path.abspath(os.path.join(current_dir, '..', '..'))
sys.path.insert(0, backend_dir)

from services.catalog_store import CatalogStore
from services.product_matcher import (
    MAX_RESULTS,
    is_character_query,
    match_products,
    score_product,
)
from services.schemas import CatalogUpload, MatchRequest, Product

logging.disable(logging.CRITICAL)

def _product(i, title, color="", image=None, link=None):
    return {
        "title": title,
        "color": color,
        "image": image or f"https://img.example.com/{i}.jpg",
        "link": link if link is not None else f"https://shop.example.com/p/{i}",
    }

def _request(message="pink dress", colors=None, categories=None, keywords=None):
    return MatchRequest.model_validate({
        "userMessage": message,
        "context": {"colors": colors or [], "categories": categories or [], "keywords": keywords or []},
    })

class TestScoreProduct(unittest.TestCase):

    def test_color_category_and_keywords_add_up(self):
        product = Product(title="Pink Satin Slip Dress", color="pink")
        self.assertEqual(score_product(product, "pink", "dress", ["satin", "slip"]), 5 + 2 + 1 + 1)

    def test_no_match_scores_zero(self):
        product = Product(title="Black Denim Jacket", color="black")
        self.assertEqual(score_product(product, "pink", "dress", ["satin"]), 0)

    def test_keywords_are_case_insensitive_and_blank_ignored(self):
        product = Product(title="Vintage Leather Boots", color="brown")
        self.assertEqual(score_product(product, None, None, ["LEATHER", "vintage", "", "  "]), 2)

    def test_category_ignored_for_character_query(self):
        product = Product(title="Floral Summer Dress", color="yellow")
        self.assertEqual(score_product(product, None, "dress", [], character_query=True), 0)
        self.assertEqual(score_product(product, None, "dress", [], character_query=False), 2)

    def test_missing_title_only_scores_color(self):
        product = Product(title=None, color="black")
        self.assertEqual(score_product(product, "black", "dress", ["dress"]), 5)

    def test_character_query_detection(self):
        self.assertTrue(is_character_query("Eleven from Stranger Things"))
        self.assertFalse(is_character_query("a dress fromage"))
        self.assertFalse(is_character_query(""))

class TestMatchProducts(unittest.TestCase):

    def setUp(self):
        self.store = CatalogStore()

    def _load(self, visible, full=None):
        return self.store.replace(CatalogUpload(visible=visible, full=full or []))

    def test_results_are_ranked_and_stripped(self):
        catalog = self._load([
            _product(1, "Black Dress", color="black"),
            _product(2, "Pink Midi Dress", color="Blush"),
            _product(3, "Pink Top", color="pink"),
        ])
        results = match_products(catalog, _request(colors=["Rose"], categories=["dress"]), min_visible_results=1)
        self.assertEqual([r["title"] for r in results], ["Pink Midi Dress", "Pink Top", "Black Dress"])
        self.assertEqual(set(results[0].keys()), {"title", "color", "image", "link"})
        self.assertEqual(results[0]["color"], "pink")

    def test_zero_score_products_are_excluded(self):
        catalog = self._load([_product(1, "Green Hoodie", color="green"), _product(2, "Pink Scarf", color="pink")])
        results = match_products(catalog, _request(colors=["pink"]))
        self.assertEqual([r["title"] for r in results], ["Pink Scarf"])

    def test_full_catalog_not_consulted_when_visible_is_enough(self):
        visible = [_product(i, f"Pink Dress {i}", color="pink") for i in range(3)]
        full_a = [_product(100, "Pink Dress Full", color="pink")]
        full_b = [_product(200, "Another Pink Dress", color="pink"), _product(201, "Pink Gown", color="pink")]
        request = _request(colors=["pink"])

        results_a = match_products(self._load(visible, full_a), request, min_visible_results=3)
        results_b = match_products(self._load(visible, full_b), request, min_visible_results=3)
        self.assertEqual(results_a, results_b)
        self.assertEqual(len(results_a), 3)

    def test_falls_back_to_full_catalog(self):
        visible = [_product(1, "Pink Dress", color="pink")]
        full = [_product(2, "Pink Skirt", color="pink"), _product(3, "Blue Skirt", color="blue")]
        results = match_products(self._load(visible, full), _request(colors=["pink"]), min_visible_results=6)
        self.assertEqual([r["title"] for r in results], ["Pink Dress", "Pink Skirt"])

    def test_visible_wins_ties_over_full(self):
        visible = [_product(1, "Pink Cardigan", color="pink")]
        full = [_product(2, "Pink Cardigan Deluxe", color="pink")]
        results = match_products(self._load(visible, full), _request(colors=["pink"]), min_visible_results=5)
        self.assertEqual(results[0]["title"], "Pink Cardigan")

    def test_higher_scored_full_item_ranks_first(self):
        visible = [_product(1, "Pink Top", color="pink")]
        full = [_product(2, "Pink Satin Dress", color="pink")]
        results = match_products(
            self._load(visible, full), _request(colors=["pink"], categories=["dress"], keywords=["satin"])
        )
        self.assertEqual([r["title"] for r in results], ["Pink Satin Dress", "Pink Top"])

    def test_dedupes_by_image_keeping_best(self):
        shared = "https://img.example.com/shared.jpg"
        visible = [
            _product(1, "Pink Dress", color="white", image=shared),
            _product(2, "Pink Satin Dress", color="pink", image=shared),
        ]
        results = match_products(self._load(visible), _request(colors=["pink"], keywords=["dress"]))
        self.assertEqual(len(results), 1)
        self.assertEqual(results[0]["title"], "Pink Satin Dress")

    def test_untitled_best_match_still_claims_its_image(self):
        shared = "https://img.example.com/shared.jpg"
        visible = [
            {"title": "", "color": "pink", "image": shared},
            {"title": "Other", "color": "white", "image": shared},
        ]
        results = match_products(self._load(visible), _request(colors=["pink"], keywords=["other"]))
        self.assertEqual(results, [])

    def test_result_cap(self):
        visible = [_product(i, f"Pink Dress {i}", color="pink") for i in range(40)]
        full = [_product(100 + i, f"Pink Gown {i}", color="pink") for i in range(40)]
        results = match_products(self._load(visible, full), _request(colors=["pink"]), min_visible_results=50)
        self.assertEqual(len(results), MAX_RESULTS)
        self.assertEqual(len(match_products(self._load(visible), _request(colors=["pink"]), max_results=5)), 5)

    def test_character_query_suppresses_category(self):
        visible = [
            _product(1, "Floral Summer Dress", color="yellow"),
            _product(2, "Striped Polo Shirt", color="navy"),
            _product(3, "Waffle Dress", color="pink"),
        ]
        request = _request(
            message="Eleven from Stranger Things",
            colors=["pink"],
            categories=["dress"],
            keywords=["polo"],
        )
        results = match_products(self._load(visible), request)
        self.assertEqual([r["title"] for r in results], ["Waffle Dress", "Striped Polo Shirt"])

    def test_sanitizes_links_and_drops_incomplete_products(self):
        visible = [
            _product(1, "Pink Tee", color="pink", link="/products/pink-tee"),
            {"title": "Pink Bag", "color": "pink", "image": None},
            {"title": "", "color": "pink", "image": "https://img.example.com/untitled.jpg"},
            {"title": "Pink Socks", "color": "pink", "image": "https://img.example.com/socks.jpg"},
        ]
        results = match_products(self._load(visible), _request(colors=["pink"]))
        self.assertEqual([r["title"] for r in results], ["Pink Tee", "Pink Socks"])
        self.assertEqual(results[0]["link"], "#")
        self.assertEqual(results[1]["link"], "#")

    def test_empty_context_matches_nothing(self):
        catalog = self._load([_product(1, "Pink Dress", color="pink")])
        self.assertEqual(match_products(catalog, _request(message="anything")), [])

    def test_scoring_is_deterministic(self):
        catalog = self._load([_product(i, f"Pink Dress {i}", color="pink") for i in range(10)])
        request = _request(colors=["pink"], keywords=["dress"])
        self.assertEqual(match_products(catalog, request), match_products(catalog, request))

if __name__ == '__main__':
    unittest.main()
