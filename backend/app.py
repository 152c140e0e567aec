"""
Clotheme Flask Backend
API server for catalog upload, product matching and the AI stylist proxy.
"""
import sys
from typing import Any, Dict, Optional

from flask import Flask, request, jsonify
from flask_cors import CORS
from werkzeug.exceptions import RequestEntityTooLarge

from utils.config import load_settings
from utils.logger import configure_root_logging, get_logger
from services.catalog_store import CatalogStore
from services.product_matcher import match_products
from services.schemas import CatalogUpload, MatchRequest
from services.stylist_service import StylistService, StylistServiceError

# Environment (.env included) is read by load_settings
settings = load_settings()

# Service modules log through logging.getLogger(__name__)
configure_root_logging(settings.log_level)
logger = get_logger("clotheme", level=settings.log_level, log_dir=settings.log_dir)

app = Flask(__name__)
app.config['MAX_CONTENT_LENGTH'] = settings.max_content_length_mb * 1024 * 1024
CORS(app, resources={r"/api/*": {"origins": settings.cors_origins}})
logger.info('Flask app initialized with CORS', {"origins": settings.cors_origins})

# Application-scoped catalog, replaced wholesale by /api/products/upload
catalog_store = CatalogStore(image_base_url=settings.image_base_url)

stylist_service: Optional[StylistService] = None

try:
    stylist_service = StylistService(
        api_key=settings.openai_api_key,
        stylist_model=settings.stylist_model,
        match_model=settings.match_model,
        timeout=settings.openai_timeout_seconds,
    )
except EnvironmentError as e:
    logger.warning(f"StylistService unavailable, /api/stylist will fail until OPENAI_API_KEY is set: {e}")


def _json_body() -> Dict[str, Any]:
    payload = request.get_json(silent=True)
    return payload if isinstance(payload, dict) else {}


def _error(message: str, status: int):
    return jsonify({"success": False, "error": message}), status


@app.errorhandler(RequestEntityTooLarge)
def request_too_large(e):
    logger.warning("Rejected request body over the size limit", {"limit_mb": settings.max_content_length_mb})
    return _error("Request body too large", 413)


@app.route('/api/test', methods=['GET'])
def api_test():
    return jsonify({"success": True, "message": "API working"})


@app.route('/health', methods=['GET'])
def health_check():
    """Simple health check endpoint."""
    return jsonify({"ok": True})


@app.route('/api/products/upload', methods=['POST'])
def upload_products():
    """Replaces the in-memory visible and full catalogs."""
    payload = _json_body()
    try:
        products = payload.get("products")
        # {} and [] count as present (empty catalog); null, false, 0 and "" do not
        if products is None or (not products and not isinstance(products, (dict, list))):
            return _error("No products provided", 400)

        snapshot = catalog_store.replace(CatalogUpload.from_payload(products))
        received = {"visible": len(snapshot.visible), "full": len(snapshot.full)}
        logger.info("[upload] stored", received)

        return jsonify({"success": True, "received": received})

    except Exception as e:
        logger.error("[upload] error", e)
        return _error(str(e), 500)


@app.route('/api/match', methods=['POST'])
def match():
    """Ranks catalog products for a user message and optional color/category/keyword context."""
    payload = _json_body()
    try:
        if not payload.get("userMessage"):
            return _error("userMessage is required", 400)

        match_request = MatchRequest.model_validate(payload)
        snapshot = catalog_store.snapshot()

        logger.info("[match] request", {
            "userMessage": match_request.user_message,
            "context": match_request.context.model_dump(),
            "visibleCount": len(snapshot.visible),
            "fullCount": len(snapshot.full),
        })

        if settings.match_ai_ping and stylist_service:
            stylist_service.ping_match_engine(match_request.user_message)

        results = match_products(
            snapshot,
            match_request,
            min_visible_results=settings.min_visible_results,
            max_results=settings.max_results,
            image_base_url=settings.image_base_url,
        )
        logger.info("[match] results", {"count": len(results)})

        return jsonify({"success": True, "results": results})

    except Exception as e:
        logger.error("[match] error", e)
        return _error(str(e), 500)


@app.route('/api/stylist', methods=['POST'])
def stylist():
    """Asks the AI stylist for an outfit breakdown, returned as parsed JSON."""
    payload = _json_body()
    user_message = payload.get("userMessage")
    if not user_message:
        return _error("userMessage is required", 400)

    if stylist_service is None:
        logger.error("[stylist] no stylist service configured")
        return _error("Backend failure", 500)

    try:
        result = stylist_service.style(str(user_message))
    except StylistServiceError as e:
        logger.error("[stylist] upstream error", e)
        return _error("Backend failure", 500)
    except Exception as e:
        logger.critical("[stylist] unexpected error", e)
        return _error("Backend failure", 500)

    if not result.ok:
        return jsonify({"success": False, "error": result.error})
    return jsonify({"success": True, "data": result.data})


def main():
    if not settings.openai_api_key:
        logger.critical("OPENAI_API_KEY is not set. Refusing to start.")
        sys.exit(1)
    # Development server. For production use a WSGI server, e.g. gunicorn --bind 0.0.0.0:3000 app:app
    logger.info(f"Server running on port {settings.port}")
    app.run(host='0.0.0.0', port=settings.port)


if __name__ == '__main__':
    main()
