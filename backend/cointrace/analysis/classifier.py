"""Address classification by shape"""

import logging
from typing import Dict, Iterable, List, Optional, Tuple

from cointrace.analysis.address_patterns import BASE58_ALPHABET, NETWORKS, NetworkDescriptor, get_network

logger = logging.getLogger(__name__)

UNKNOWN_GROUP = "unknown"

_BASE58_CHARS = frozenset(BASE58_ALPHABET)
_SOLANA = get_network("SOL")


def _looks_like_solana(address: str) -> bool:
    return len(address) == 44 and all(ch in _BASE58_CHARS for ch in address)


def classify(raw_input) -> Optional[NetworkDescriptor]:
    """
    Assign at most one network to an input string.

    A 44-character Base58 string is always Solana, even when a later entry
    would also accept it. Otherwise the first registry entry whose pattern
    matches the whole string wins.

    Args:
        raw_input: Candidate address; surrounding whitespace is ignored

    Returns:
        Matching NetworkDescriptor, or None when the format is unknown
    """
    if not isinstance(raw_input, str):
        return None
    address = raw_input.strip()
    if not address:
        return None

    if _looks_like_solana(address):
        return _SOLANA

    for network in NETWORKS:
        if network.matches(address):
            return network
    return None


def parse_address_list(text: Optional[str]) -> List[str]:
    """
    Split free text into addresses.

    Accepts one address per line or comma separated values. Blank lines and
    lines starting with '#' are skipped; duplicates keep their first position.
    """
    if not text:
        return []

    seen = set()
    addresses: List[str] = []
    for line in text.splitlines():
        line = line.strip()
        if not line or line.startswith("#"):
            continue
        for part in line.split(","):
            candidate = part.strip()
            if candidate and candidate not in seen:
                seen.add(candidate)
                addresses.append(candidate)
    return addresses


def classify_many(addresses: Iterable[str]) -> List[Tuple[str, Optional[NetworkDescriptor]]]:
    return [(address, classify(address)) for address in addresses]


def group_by_network(
    results: Iterable[Tuple[str, Optional[NetworkDescriptor]]]
) -> Dict[str, List[str]]:
    """Group classification results by network name, first-seen order"""
    groups: Dict[str, List[str]] = {}
    for address, network in results:
        key = network.name if network else UNKNOWN_GROUP
        groups.setdefault(key, []).append(address)
    logger.debug("Grouped addresses into %d networks", len(groups))
    return groups


def describe_patterns() -> List[Tuple[str, str]]:
    return [(network.name, network.description) for network in NETWORKS]
