from enum import Enum


class EvidenceSentinel(str, Enum):
    """Stand-ins for evidence text when the search produced nothing usable."""
    MISSING_CREDENTIAL = "API_KEY_MISSING"
    NO_MATCH = "NO_MATCHING_SOURCES"
    SEARCH_UNAVAILABLE = "SEARCH_FAILED"


def is_sentinel(evidence: str) -> bool:
    return evidence in {sentinel.value for sentinel in EvidenceSentinel}
