"""Client factories for tripcards.

Every network client is built here from settings and the environment, then
handed to the core explicitly. The shared httpx client's lifecycle is owned by
the caller (``async with``), so it is obvious when connections are opened and
closed.
"""

from __future__ import annotations

import logging
import os
from contextlib import asynccontextmanager
from typing import AsyncIterator, Optional

import httpx
from dotenv import load_dotenv
from telethon import TelegramClient

import settings
from adapters.http_fetcher import HttpxFetcher, build_http_client
from adapters.image_search_service import WebhookImageSearchService
from adapters.nominatim_geocoder import NominatimGeocoder
from adapters.telegram_login import authorize
from adapters.telegram_source import TelegramMessageSource
from adapters.webhook_sender import WebhookMessageSender
from adapters.webhook_source import WebhookMessageSource
from core.candidates import CandidateGatherer
from core.geocode import GeocodeClient
from core.image_search import ImageSearchClient
from core.pipeline import LinkPipeline
from core.ports import MessageSourcePort
from core.resolver import MetadataResolver, default_strategies
from core.validator import ContentTypeValidator

LOGGER = logging.getLogger(__name__)


def build_http() -> httpx.AsyncClient:
    return build_http_client(settings.HTTP)


def build_telegram_client() -> TelegramClient:
    """Create a Telethon client from environment variables."""

    load_dotenv()

    api_id = os.getenv("API_ID")
    api_hash = os.getenv("API_HASH")
    session_name = os.getenv("SESSION_NAME", "tripcards")

    # Fail fast on missing credentials to avoid an ambiguous login prompt.
    if not api_id or not api_hash:
        raise RuntimeError("Missing API_ID or API_HASH in environment")

    LOGGER.info("Initializing Telegram client")
    return TelegramClient(session_name, int(api_id), api_hash)


def build_message_source(
    http: httpx.AsyncClient,
    telegram_client: Optional[TelegramClient] = None,
) -> MessageSourcePort:
    if settings.MESSAGE_SOURCE == "webhook":
        return WebhookMessageSource(http, settings.API)
    if settings.MESSAGE_SOURCE == "telegram":
        if telegram_client is None:
            raise RuntimeError("message_source=telegram needs a connected Telegram client")
        return TelegramMessageSource(
            telegram_client,
            settings.TELEGRAM_CHATS,
            settings.TELEGRAM_MESSAGES_PER_CHAT,
        )
    raise RuntimeError("message_source must be 'webhook' or 'telegram'")


def build_pipeline(http: httpx.AsyncClient, source: MessageSourcePort) -> LinkPipeline:
    fetcher = HttpxFetcher(http, settings.HTTP)
    image_search = ImageSearchClient(
        WebhookImageSearchService(http, settings.API, settings.IMAGE_SEARCH)
    )
    geocoder = GeocodeClient(NominatimGeocoder(http, settings.GEOCODE))
    return LinkPipeline(
        source=source,
        validator=ContentTypeValidator(fetcher, settings.HTTP, settings.VALIDATOR),
        resolver=MetadataResolver(
            fetcher,
            default_strategies(geocoder, image_search, settings.STATIC_MAP),
            settings.RESOLVER,
            settings.HTTP,
        ),
        gatherer=CandidateGatherer(
            fetcher,
            image_search,
            settings.CANDIDATES,
            settings.HTTP,
            settings.RESOLVER,
        ),
    )


def build_sender(http: httpx.AsyncClient) -> WebhookMessageSender:
    load_dotenv()
    return WebhookMessageSender(http, os.getenv("LINE_MESSAGING_TOKEN"), settings.API)


@asynccontextmanager
async def open_pipeline(interactive: bool = True) -> AsyncIterator[LinkPipeline]:
    """Open the network clients, yield a ready pipeline, and close them again.

    With interactive=False an unauthorized Telegram session is an error
    instead of a login prompt.
    """

    async with build_http() as http:
        telegram_client = None
        if settings.MESSAGE_SOURCE == "telegram":
            telegram_client = build_telegram_client()
            await telegram_client.connect()
            if interactive:
                await authorize(telegram_client)
            elif not await telegram_client.is_user_authorized():
                await telegram_client.disconnect()
                raise RuntimeError("Telegram session is not authorized; run `tripcards login` first")
        try:
            yield build_pipeline(http, build_message_source(http, telegram_client))
        finally:
            if telegram_client is not None:
                await telegram_client.disconnect()
