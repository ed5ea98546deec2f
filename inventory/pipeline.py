"""Fetch-filter-sort pipeline for product lists."""

from dataclasses import dataclass
from typing import Callable, List, Sequence, Tuple

from inventory.logging_config import get_logger, log_client_event
from inventory.models import ProductRecord

__all__ = [
    "FilterPolicy",
    "NO_FILTER",
    "QUANTITY_TRUTHY",
    "quantity_equals",
    "filter_records",
    "sort_records",
    "refresh",
]

logger = get_logger("pipeline")


@dataclass(frozen=True)
class FilterPolicy:
    """A named predicate applied to the fetched collection."""

    name: str
    predicate: Callable[[ProductRecord], bool]

    def __call__(self, record: ProductRecord) -> bool:
        return self.predicate(record)


NO_FILTER = FilterPolicy("all", lambda record: True)

# Drops records whose quantity is missing or zero
QUANTITY_TRUTHY = FilterPolicy("with-quantity", lambda record: bool(record.quantity))


def quantity_equals(quantity: int) -> FilterPolicy:
    """Keep only records whose quantity is exactly ``quantity``."""
    return FilterPolicy(f"quantity=={quantity}", lambda record: record.quantity == quantity)


def filter_records(records: Sequence[ProductRecord], policy: FilterPolicy) -> List[ProductRecord]:
    """Apply a filter policy, preserving relative order."""
    return [record for record in records if policy(record)]


def _sort_key(record: ProductRecord) -> Tuple[bool, float, bool, int]:
    # Newest first; undated records go last
    if record.date_added is None:
        date_key = 0.0
    else:
        date_key = -record.date_added.timestamp()
    quantity = record.quantity
    return (
        record.date_added is None,
        date_key,
        quantity is None,
        quantity if quantity is not None else 0,
    )


def sort_records(records: Sequence[ProductRecord]) -> List[ProductRecord]:
    """Sort by date_added descending, then quantity ascending on exact ties.

    The sort is stable: records equal on both keys keep their order.
    """
    return sorted(records, key=_sort_key)


def refresh(client, policy: FilterPolicy = NO_FILTER) -> List[ProductRecord]:
    """Fetch the full product collection, then filter and sort it.

    Args:
        client: ApiClient (or anything with ``list_products()``)
        policy: Filter policy to apply

    Returns:
        Ordered list of products

    Raises:
        ApiError: If the fetch fails; callers keep their previous collection
    """
    records = client.list_products()
    ordered = sort_records(filter_records(records, policy))
    log_client_event("fetch_complete", {
        "message": f"Fetched {len(records)} products, {len(ordered)} after {policy.name}",
        "fetched": len(records),
        "shown": len(ordered),
        "policy": policy.name,
    }, logger_name="pipeline")
    return ordered
