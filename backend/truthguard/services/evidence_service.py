import logging
import re
import requests
from typing import List, Optional

from truthguard.core.config import (
    GLOBAL_TRUSTED_DOMAINS,
    LOCAL_TRUSTED_DOMAINS,
    NEWS_API_KEY,
    NEWS_API_URL,
    SEARCH_TIMEOUT_SECONDS,
)
from truthguard.models.evidence import EvidenceSentinel

logger = logging.getLogger(__name__)

QUERY_WORD_LIMIT = 6
PAGE_SIZE = 2
EVIDENCE_DELIMITER = " | "


class EvidenceRetriever:
    """
    Cross-checks a claim against trusted outlets through NewsAPI.

    retrieve() always returns a string: either "[Source] headline" pairs or
    one of the EvidenceSentinel values. Search failures never propagate.
    """

    def __init__(
        self,
        api_key: Optional[str] = NEWS_API_KEY,
        local_domains: Optional[List[str]] = None,
        global_domains: Optional[List[str]] = None,
        base_url: str = NEWS_API_URL,
        timeout: float = SEARCH_TIMEOUT_SECONDS,
    ):
        if not api_key:
            logger.warning("[Evidence] NEWS_API_KEY not set. Evidence search is disabled.")
        self.api_key = api_key
        self.local_domains = local_domains or LOCAL_TRUSTED_DOMAINS
        self.global_domains = global_domains or GLOBAL_TRUSTED_DOMAINS
        self.base_url = base_url
        self.timeout = timeout

    def retrieve(self, claim_title: str, is_global_scope: bool = False) -> str:
        """
        Find trusted coverage for a claim.

        Args:
            claim_title (str): The claim text
            is_global_scope (bool): Search international outlets instead of regional ones

        Returns:
            str: Joined evidence string or a sentinel value
        """
        if not self.api_key:
            return EvidenceSentinel.MISSING_CREDENTIAL.value

        query = self.build_query(claim_title)
        domains = self.global_domains if is_global_scope else self.local_domains

        try:
            response = requests.get(
                self.base_url,
                params={
                    "q": query,
                    "domains": ",".join(domains),
                    "sortBy": "relevancy",
                    "pageSize": PAGE_SIZE,
                    "apiKey": self.api_key,
                },
                timeout=self.timeout,
            )
            response.raise_for_status()
            articles = response.json().get("articles") or []
        except (requests.exceptions.RequestException, ValueError, AttributeError) as e:
            logger.warning(f"[Evidence] Search failed for '{query}': {e}")
            return EvidenceSentinel.SEARCH_UNAVAILABLE.value

        if not isinstance(articles, list):
            logger.warning(f"[Evidence] Unexpected articles payload for '{query}': {type(articles).__name__}")
            return EvidenceSentinel.SEARCH_UNAVAILABLE.value

        pairs = []
        for article in articles[:PAGE_SIZE]:
            if not isinstance(article, dict) or not article.get("title"):
                continue
            source = article.get("source")
            source_name = (source.get("name") if isinstance(source, dict) else None) or "Unknown"
            pairs.append(f"[{source_name}] {article['title']}")

        if not pairs:
            logger.info(f"[Evidence] No trusted coverage for '{query}'")
            return EvidenceSentinel.NO_MATCH.value

        logger.info(f"[Evidence] Found {len(pairs)} trusted articles for '{query}'")
        return EVIDENCE_DELIMITER.join(pairs)

    @staticmethod
    def build_query(claim_title: str) -> str:
        """Strip punctuation and keep the first few words to bound query length."""
        cleaned = re.sub(r"[^\w\s]", "", claim_title)
        return " ".join(cleaned.split()[:QUERY_WORD_LIMIT])
