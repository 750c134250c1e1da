"""
Merging, deduplication and ranking of local and external results.
"""

from __future__ import annotations

import logging
from typing import Final, List

from .models import SOURCE_LOCAL, UnifiedProperty


logger = logging.getLogger(__name__)


SORT_RELEVANCE: Final = "relevance"
SORT_PRICE_LOW: Final = "price_low"
SORT_PRICE_HIGH: Final = "price_high"


def _address_forms(address: str) -> set[str]:
    """The full address and its street line (text before the first comma), lowercased."""
    full = (address or "").strip().lower()
    street = full.split(",", 1)[0].strip()
    return {full, street} if street else {full}


def _addresses_overlap(local_address: str, external_address: str) -> bool:
    """
    Substring containment in either direction, ignoring case.

    Both the full address and the street line are compared, so
    "123 Main St, Gaborone" overlaps "123 Main Street". An empty address
    is contained in every address, so it always overlaps.
    """
    local_forms = _address_forms(local_address)
    external_forms = _address_forms(external_address)
    return any(
        ext in loc or loc in ext
        for loc in local_forms
        for ext in external_forms
    )


def merge_and_dedupe(
    local: List[UnifiedProperty],
    external: List[UnifiedProperty],
) -> List[UnifiedProperty]:
    """
    Combine local and external results.

    Every local record is kept. An external record is dropped when its
    address overlaps any local address (see _addresses_overlap) or when its
    id is already present in the merged list.

    Args:
        local: Records from the local store.
        external: Records from the external provider.

    Returns:
        New list: local records first, then surviving external records.
    """
    merged = list(local)
    seen_ids = {record.id for record in merged}
    dropped = 0

    for record in external:
        if record.id in seen_ids:
            dropped += 1
            continue
        if any(_addresses_overlap(l.address, record.address) for l in local):
            dropped += 1
            continue
        merged.append(record)
        seen_ids.add(record.id)

    if dropped:
        logger.debug("Dropped %d external results as duplicates", dropped)

    return merged


def _sort_key(record: UnifiedProperty, sort: str) -> tuple:
    # Local always outranks external
    priority = 0 if record.source == SOURCE_LOCAL else 1

    if sort == SORT_PRICE_LOW:
        return (priority, record.price)
    if sort == SORT_PRICE_HIGH:
        return (priority, -record.price)
    return (priority, -(record.score or 0))


def rank_results(results: List[UnifiedProperty], sort: str) -> List[UnifiedProperty]:
    """
    Order merged results.

    Local records precede external ones regardless of the sort key. Within a
    source: price_low ascending, price_high descending, anything else by
    relevance score descending (missing score counts as 0). The sort is
    stable, so ties keep their incoming order.
    """
    return sorted(results, key=lambda record: _sort_key(record, sort))
