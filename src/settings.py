"""Static configuration for tripcards.

All user-editable settings (API endpoint, timeouts, map style, message source,
display names, logging) live in a single JSON file for quick edits without
touching Python. Secrets stay in the environment (.env).
"""

import json
import os

from core.config import (
    ApiConfig,
    CandidateConfig,
    GeocodeConfig,
    HttpConfig,
    ImageSearchConfig,
    ResolverConfig,
    StaticMapConfig,
    ValidatorConfig,
)

PROJECT_ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))

CONFIG_PATH = os.environ.get("TRIPCARDS_CONFIG", os.path.join(PROJECT_ROOT, "config.json"))


def _load_json_config() -> dict:
    """Load config.json with a flat, user-friendly schema."""

    if not os.path.exists(CONFIG_PATH):
        raise FileNotFoundError(f"Config file not found: {CONFIG_PATH}")

    with open(CONFIG_PATH, "r", encoding="utf-8") as handle:
        return json.load(handle)


_CONFIG = _load_json_config()

# Expose the raw config for modules that need structured access.
CONFIG = _CONFIG

_api = _CONFIG.get("api", {})
API = ApiConfig(
    base_url=_api.get("base_url", ApiConfig.base_url),
    timeout=float(_api.get("timeout", ApiConfig.timeout)),
)

_http = _CONFIG.get("http", {})
HTTP = HttpConfig(
    head_timeout=float(_http.get("head_timeout", HttpConfig.head_timeout)),
    get_timeout=float(_http.get("get_timeout", HttpConfig.get_timeout)),
    user_agent=_http.get("user_agent", HttpConfig.user_agent),
)
VALIDATOR = ValidatorConfig(max_workers=_http.get("head_workers", ValidatorConfig.max_workers))

_resolver = _CONFIG.get("resolver", {})
RESOLVER = ResolverConfig(
    max_previews=int(_resolver.get("max_previews", ResolverConfig.max_previews)),
    concurrency=int(_resolver.get("concurrency", ResolverConfig.concurrency)),
)

_static_map = _CONFIG.get("static_map", {})
STATIC_MAP = StaticMapConfig(
    base_url=_static_map.get("base_url", StaticMapConfig.base_url),
    zoom=int(_static_map.get("zoom", StaticMapConfig.zoom)),
    size=_static_map.get("size", StaticMapConfig.size),
    marker=_static_map.get("marker", StaticMapConfig.marker),
)

_geocode = _CONFIG.get("geocode", {})
GEOCODE = GeocodeConfig(
    base_url=_geocode.get("base_url", GeocodeConfig.base_url),
    country_codes=_geocode.get("country_codes", GeocodeConfig.country_codes),
    language=_geocode.get("language", GeocodeConfig.language),
    timeout=float(_geocode.get("timeout", GeocodeConfig.timeout)),
    user_agent=_geocode.get("user_agent", HTTP.user_agent),
)

IMAGE_SEARCH = ImageSearchConfig(
    timeout=float(_CONFIG.get("image_search", {}).get("timeout", ImageSearchConfig.timeout)),
)

CANDIDATES = CandidateConfig(
    max_candidates=int(_CONFIG.get("candidates", {}).get("max_candidates", CandidateConfig.max_candidates)),
)

# Message source switches adapters without changing core logic:
# "webhook" (default) or "telegram".
MESSAGE_SOURCE = _CONFIG.get("message_source", "webhook")

_telegram = _CONFIG.get("telegram", {})
TELEGRAM_CHATS = list(_telegram.get("chats", []))
TELEGRAM_MESSAGES_PER_CHAT = int(_telegram.get("messages_per_chat", 50))

# Sender id -> display name chosen by the user.
DISPLAY_NAMES = dict(_CONFIG.get("display_names", {}))

# Logging configuration (optional).
LOGGING = _CONFIG.get("logging", {})
