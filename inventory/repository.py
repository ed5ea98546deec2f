"""Shared client-side repositories.

One repository instance is shared by every view of the same collection.
It loads on mount, reloads after every mutation and notifies subscribers,
so two views can never show diverging copies.
"""

import logging
from typing import Callable, Dict, Generic, List, Optional, TypeVar

from inventory.client import ApiClient, ApiError
from inventory.image_utils import ImagePart
from inventory.logging_config import get_logger, log_client_event
from inventory.models import DeleteResult, NoticeDraft, NoticeRecord, ProductRecord
from inventory.pipeline import NO_FILTER, FilterPolicy, filter_records, sort_records
from inventory.url_validation import URLValidationError

__all__ = ["Repository", "ProductRepository", "NoticeRepository"]

logger = get_logger("repository")

T = TypeVar("T")
Listener = Callable[[List[T]], None]


class Repository(Generic[T]):
    """Holds the last successfully fetched collection of one endpoint."""

    kind = "record"

    def __init__(self, client: ApiClient):
        self.client = client
        self._records: List[T] = []
        self._listeners: List[Listener] = []
        self.loading = False
        self.loaded = False

    def _fetch(self) -> List[T]:
        raise NotImplementedError

    def _delete(self, record_id: str) -> None:
        raise NotImplementedError

    @property
    def records(self) -> List[T]:
        """Snapshot of the collection in store order."""
        return list(self._records)

    def get(self, record_id: str) -> Optional[T]:
        for record in self._records:
            if record.id == record_id:  # type: ignore[attr-defined]
                return record
        return None

    def latest(self) -> Optional[T]:
        return self._records[-1] if self._records else None

    def subscribe(self, listener: Listener) -> None:
        self._listeners.append(listener)

    def unsubscribe(self, listener: Listener) -> None:
        if listener in self._listeners:
            self._listeners.remove(listener)

    def _notify(self) -> None:
        snapshot = self.records
        for listener in list(self._listeners):
            listener(snapshot)

    def load(self) -> bool:
        """Fetch the full collection and replace the held one.

        On failure the previous collection is kept and the error is logged.

        Returns:
            True if the collection was replaced
        """
        self.loading = True
        try:
            records = self._fetch()
        except ApiError as e:
            logger.error(f"Failed to load {self.kind}s: {e}")
            log_client_event("fetch_failed", {
                "kind": self.kind,
                "error": str(e),
                "kept": len(self._records),
            }, level=logging.ERROR)
            return False
        finally:
            self.loading = False

        self._records = records
        self.loaded = True
        logger.debug(f"Loaded {len(records)} {self.kind}s")
        self._notify()
        return True

    def delete(self, record_id: str) -> DeleteResult:
        """Delete a record remotely, then reload regardless of the outcome."""
        try:
            self._delete(record_id)
            result = DeleteResult.CONFIRMED
        except (ApiError, URLValidationError) as e:
            logger.error(f"Failed to delete {self.kind} {record_id}: {e}")
            log_client_event("delete_failed", {
                "kind": self.kind,
                "id": record_id,
                "error": str(e),
            }, level=logging.ERROR)
            result = DeleteResult.FAILED

        self.load()
        return result


class ProductRepository(Repository[ProductRecord]):
    kind = "product"

    def _fetch(self) -> List[ProductRecord]:
        return self.client.list_products()

    def _delete(self, record_id: str) -> None:
        self.client.delete_product(record_id)

    def view(self, policy: FilterPolicy = NO_FILTER) -> List[ProductRecord]:
        """Filtered and sorted snapshot of the shared collection."""
        return sort_records(filter_records(self._records, policy))

    def save(
        self,
        fields: Dict[str, str],
        image: Optional[ImagePart] = None,
        record_id: Optional[str] = None,
    ) -> Optional[ProductRecord]:
        """Create (no id) or fully overwrite (id) a product, then reload.

        Raises:
            ApiError: If the write fails; nothing is reloaded in that case
        """
        if record_id:
            saved = self.client.update_product(record_id, fields, image)
        else:
            saved = self.client.create_product(fields, image)
        log_client_event("product_saved", {
            "message": f"{'Updated' if record_id else 'Created'} product {fields.get('name', '')!r}",
            "id": record_id or (saved.id if saved else None),
            "mode": "edit" if record_id else "create",
            "with_image": image is not None,
        }, logger_name="repository")
        self.load()
        return saved


class NoticeRepository(Repository[NoticeRecord]):
    kind = "notice"

    def _fetch(self) -> List[NoticeRecord]:
        return self.client.list_notices()

    def _delete(self, record_id: str) -> None:
        self.client.delete_notice(record_id)

    def save(self, draft: NoticeDraft, record_id: Optional[str] = None) -> Optional[NoticeRecord]:
        """Create or overwrite a notice, then reload.

        Raises:
            ApiError: If the write fails
        """
        if record_id:
            saved = self.client.update_notice(record_id, draft)
        else:
            saved = self.client.create_notice(draft)
        self.load()
        return saved
