"""Research result cache backed by Upstash Redis (REST protocol)

Research data doesn't change often, so results are kept for 7 days. Every
operation fails soft: the pipeline degrades to uncached operation rather than
surfacing cache errors to callers.
"""

import json
import logging
import re
from datetime import datetime, timezone
from typing import Any
from urllib.parse import urlparse

import httpx

from src.config import Settings, get_settings
from src.graph.state import ResearchResult

logger = logging.getLogger(__name__)

KEY_PREFIX = "research:"


def cache_key(url: str) -> str:
    """
    Build the cache key for a URL.

    Keys are per host, so https://example.com/ and https://www.example.com/page
    share an entry. Unparseable input falls back to a sanitized copy of the
    raw string.
    """
    try:
        hostname = urlparse(url).hostname
    except ValueError:
        hostname = None

    if hostname:
        return KEY_PREFIX + hostname.removeprefix("www.")
    return KEY_PREFIX + re.sub(r"[^a-zA-Z0-9]", "_", url)


def cache_age_days(timestamp: str) -> float:
    """Age of a cached entry in days"""
    cached_at = datetime.fromisoformat(timestamp.replace("Z", "+00:00"))
    if cached_at.tzinfo is None:
        cached_at = cached_at.replace(tzinfo=timezone.utc)
    return (datetime.now(timezone.utc) - cached_at).total_seconds() / 86400


class ResearchCache:
    """Key-value cache for ResearchResult records"""

    def __init__(
        self,
        settings: Settings | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.settings = settings or get_settings()
        self._transport = transport

    @property
    def configured(self) -> bool:
        return self.settings.cache_configured

    async def _command(self, *args: str) -> Any:
        """Send one Redis command and return its result field"""
        async with httpx.AsyncClient(
            timeout=self.settings.http_timeout,
            transport=self._transport,
        ) as client:
            response = await client.post(
                self.settings.upstash_redis_rest_url,
                headers={
                    "Authorization": f"Bearer {self.settings.upstash_redis_rest_token}"
                },
                json=list(args),
            )
        response.raise_for_status()
        data = response.json()
        if isinstance(data, dict) and data.get("error"):
            raise RuntimeError(f"Redis {args[0]} error: {data['error']}")
        return data.get("result") if isinstance(data, dict) else None

    async def get(self, url: str) -> ResearchResult | None:
        """
        Look up cached research for a URL.

        Returns:
            The cached result flagged cached=True, or None on a miss or any error
        """
        if not self.configured:
            logger.debug("Cache not configured, skipping lookup")
            return None

        key = cache_key(url)
        try:
            raw = await self._command("GET", key)
            if not raw:
                logger.info("Cache miss for %s", key)
                return None

            payload = json.loads(raw) if isinstance(raw, str) else raw
            result = ResearchResult.model_validate(payload)
        except Exception as e:
            logger.warning("Cache read failed for %s: %s", key, e)
            return None

        try:
            logger.info(
                "Cache hit for %s (age %.1f days)", key, cache_age_days(result.timestamp)
            )
        except ValueError:
            logger.info("Cache hit for %s", key)

        return result.model_copy(update={"cached": True})

    async def set(self, url: str, result: ResearchResult) -> None:
        """Store research for a URL; the stored copy always has cached=False"""
        if not self.configured:
            logger.debug("Cache not configured, skipping write")
            return

        key = cache_key(url)
        value = result.model_copy(update={"cached": False}).model_dump_json(by_alias=True)
        try:
            await self._command(
                "SET", key, value, "EX", str(self.settings.cache_ttl_seconds)
            )
        except Exception as e:
            logger.warning("Cache write failed for %s: %s", key, e)
            return

        logger.info("Cached research for %s (TTL %ss)", key, self.settings.cache_ttl_seconds)

    async def delete(self, url: str) -> None:
        """Drop cached research for a URL (manual cache bust)"""
        if not self.configured:
            logger.debug("Cache not configured, skipping delete")
            return

        key = cache_key(url)
        try:
            await self._command("DEL", key)
        except Exception as e:
            logger.warning("Cache delete failed for %s: %s", key, e)
            return

        logger.info("Deleted cached research for %s", key)


# Singleton instance
_research_cache: ResearchCache | None = None


def get_research_cache() -> ResearchCache:
    """Get the research cache singleton"""
    global _research_cache
    if _research_cache is None:
        _research_cache = ResearchCache()
    return _research_cache
