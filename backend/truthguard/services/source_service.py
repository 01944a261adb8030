import html
import logging
import requests
import xml.etree.ElementTree as ET
from typing import Dict, List, Optional, Tuple

from truthguard.core.config import (
    DEFAULT_EMERGENCY_CLAIMS,
    FEED_ITEM_LIMIT,
    FEED_TIMEOUT_SECONDS,
    MIN_TITLE_LENGTH,
    clean_emergency_claims,
)
from truthguard.models.claim import Claim, Scope

logger = logging.getLogger(__name__)

EMERGENCY_SOURCE = "Emergency Snapshot"

# Reddit and several news sites block default library user agents
BROWSER_HEADERS = {
    "User-Agent": "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
                  "(KHTML, like Gecko) Chrome/119.0.0.0 Safari/537.36",
    "Accept": "application/json, application/rss+xml, application/xml;q=0.9, */*;q=0.8",
}

ATOM_NS = "{http://www.w3.org/2005/Atom}"


class SourceAcquirer:
    """
    Pulls candidate claims from untrusted feeds.

    Targets are tried in priority order and the first one yielding usable
    items wins. Targets are either "r/<subreddit>" or an RSS/Atom feed URL.
    When everything fails the emergency snapshot for the requested scope is
    returned instead, so acquire() never raises.
    """

    def __init__(
        self,
        emergency_claims: Optional[Dict[Scope, List[dict]]] = None,
        timeout: float = FEED_TIMEOUT_SECONDS,
        min_title_length: int = MIN_TITLE_LENGTH,
        item_limit: int = FEED_ITEM_LIMIT,
    ):
        self.emergency_claims = emergency_claims or {}
        self.timeout = timeout
        self.min_title_length = min_title_length
        self.item_limit = item_limit

    def acquire(self, targets: List[str], scope: Scope = Scope.LOCAL) -> Tuple[List[Claim], str]:
        """
        Fetch claims from the first working target.

        Args:
            targets (List[str]): Feed identifiers in priority order
            scope (Scope): Partition whose emergency snapshot backs the targets

        Returns:
            tuple: (claims, source_used)
        """
        for target in targets:
            try:
                logger.info(f"[Sources] Attempting to connect to {target}...")
                claims = self._fetch(target)
            except (requests.exceptions.RequestException, ValueError, ET.ParseError) as e:
                logger.warning(f"[Sources] Could not reach {target}: {e}")
                continue
            except Exception:
                logger.exception(f"[Sources] Unexpected failure reading {target}")
                continue

            if claims:
                logger.info(f"[Sources] Pulled {len(claims)} claims from {target}")
                return claims, target
            logger.warning(f"[Sources] {target} returned no usable items")

        logger.warning(f"[Sources] All {len(targets)} targets failed, serving {scope.value} {EMERGENCY_SOURCE}")
        return self._emergency_claims(scope), EMERGENCY_SOURCE

    def _fetch(self, target: str) -> List[Claim]:
        if target.startswith("r/"):
            return self._fetch_subreddit(target)
        if target.startswith(("http://", "https://")):
            return self._fetch_feed(target)
        raise ValueError(f"Unsupported target: {target}")

    def _fetch_subreddit(self, target: str) -> List[Claim]:
        subreddit = target[2:]
        response = requests.get(
            f"https://www.reddit.com/r/{subreddit}/hot.json",
            params={"limit": self.item_limit},
            headers=BROWSER_HEADERS,
            timeout=self.timeout,
        )
        response.raise_for_status()
        children = response.json().get("data", {}).get("children", [])

        claims = []
        for child in children:
            post = child.get("data", {}) if isinstance(child, dict) else {}
            if post.get("stickied") or post.get("pinned"):
                continue
            claim = self._to_claim(post.get("title"), post.get("url"), target)
            if claim:
                claims.append(claim)
        return claims

    def _fetch_feed(self, target: str) -> List[Claim]:
        response = requests.get(target, headers=BROWSER_HEADERS, timeout=self.timeout)
        response.raise_for_status()
        root = ET.fromstring(response.content)

        claims = []
        # RSS 2.0
        for item in root.iter("item"):
            claim = self._to_claim(item.findtext("title"), item.findtext("link"), target)
            if claim:
                claims.append(claim)
        # Atom
        for entry in root.iter(f"{ATOM_NS}entry"):
            claim = self._to_claim(entry.findtext(f"{ATOM_NS}title"), self._atom_link(entry), target)
            if claim:
                claims.append(claim)
        return claims[:self.item_limit]

    def _to_claim(self, title, url, source_label: str) -> Optional[Claim]:
        """Normalize one feed item, rejecting trivial titles."""
        if not isinstance(title, str):
            return None
        title = " ".join(html.unescape(title).split())
        if len(title) <= self.min_title_length:
            return None
        return Claim(title=title, url=url if isinstance(url, str) else "", source_label=source_label)

    @staticmethod
    def _atom_link(entry) -> Optional[str]:
        """The entry's article link: rel="alternate", or a link with no rel."""
        for link in entry.findall(f"{ATOM_NS}link"):
            if link.get("rel", "alternate") == "alternate" and link.get("href"):
                return link.get("href")
        return None

    def _emergency_claims(self, scope: Scope) -> List[Claim]:
        """Scope's configured snapshot, or the built-in one when nothing usable is configured."""
        items = clean_emergency_claims(self.emergency_claims.get(scope), self.min_title_length)
        if not items:
            items = DEFAULT_EMERGENCY_CLAIMS[scope]
        return [
            Claim(title=item["title"], url=item.get("url") or "", source_label=EMERGENCY_SOURCE)
            for item in items
        ]
