"""Form, list and selection state for products and notices.

Controllers own the transient draft and selection of one view and talk to
a shared repository for everything remote. Failures never escape a
controller: they are logged and reported through SubmitResult or
DeleteResult.
"""

import logging
import threading
from dataclasses import dataclass
from datetime import datetime
from typing import List, Optional

from inventory.client import ApiError
from inventory.config import get_category_label
from inventory.image_utils import ImageError, load_image_part
from inventory.logging_config import get_logger, log_client_event
from inventory.models import (
    DeleteResult,
    DraftValidationError,
    NoticeDraft,
    NoticeRecord,
    ProductDraft,
    ProductRecord,
    SubmitResult,
)
from inventory.pipeline import NO_FILTER, FilterPolicy
from inventory.repository import NoticeRepository, ProductRepository
from inventory.url_validation import URLValidationError

__all__ = [
    "InFlightGuard",
    "ProductFormController",
    "ProductListController",
    "ProductRow",
    "NoticeFormController",
    "NoticeBoard",
    "format_date",
]

logger = get_logger("controllers")

# Errors a submission can end with; anything else is a bug and propagates
SUBMIT_ERRORS = (ApiError, DraftValidationError, ImageError, URLValidationError)


class InFlightGuard:
    """Rejects a second submission while one is still running."""

    def __init__(self) -> None:
        self._lock = threading.Lock()

    @property
    def busy(self) -> bool:
        return self._lock.locked()

    def try_enter(self) -> bool:
        return self._lock.acquire(blocking=False)

    def exit(self) -> None:
        self._lock.release()


def format_date(value: Optional[datetime]) -> str:
    """Render a timestamp as d/m/yyyy h:m, without zero padding."""
    if value is None:
        return "-"
    return f"{value.day}/{value.month}/{value.year} {value.hour}:{value.minute}"


class ProductFormController:
    """Draft and selection for creating or editing a product.

    Args:
        repository: Shared product repository
        fixed_quantity: Quantity forced by the screen (None lets the user type it)
    """

    def __init__(self, repository: ProductRepository, fixed_quantity: Optional[int] = None):
        self.repository = repository
        self.fixed_quantity = fixed_quantity
        self.draft = ProductDraft()
        self.selected_id: Optional[str] = None
        self.last_error: Optional[str] = None
        self._guard = InFlightGuard()

    @property
    def mode(self) -> str:
        return "edit" if self.selected_id else "create"

    @property
    def is_submitting(self) -> bool:
        return self._guard.busy

    def select(self, record: ProductRecord) -> None:
        """Load a record into the draft and switch to edit mode."""
        self.draft = ProductDraft.from_record(record)
        self.selected_id = record.id
        self.last_error = None

    def set_image(self, path: Optional[str]) -> None:
        """Attach a picked image (local path) to the draft."""
        self.draft.image = path

    def reset(self) -> None:
        self.draft = ProductDraft()
        self.selected_id = None
        self.last_error = None

    def _build_payload(self):
        fields = self.draft.to_form(self.fixed_quantity)
        image_part = None
        if self.draft.image:
            image_part = load_image_part(self.draft.image)
        elif self.draft.stored_image_url:
            # PUT overwrites the whole record; resend the stored reference to keep it
            fields["imageUrl"] = self.draft.stored_image_url
        return fields, image_part

    def submit(self) -> SubmitResult:
        """Create or overwrite the product described by the draft.

        On success the draft and selection are cleared and the repository is
        reloaded. On failure both are kept so nothing typed is lost.
        """
        if not self._guard.try_enter():
            logger.warning("Submit ignored: a submission is already in flight")
            return SubmitResult(ok=False, skipped=True, error="submission already in progress")

        mode = self.mode
        try:
            fields, image_part = self._build_payload()
            saved = self.repository.save(fields, image_part, record_id=self.selected_id)
        except SUBMIT_ERRORS as e:
            self.last_error = str(e)
            logger.error(f"Failed to submit product ({mode}): {e}")
            log_client_event("submit_failed", {
                "kind": "product",
                "mode": mode,
                "id": self.selected_id,
                "error": str(e),
            }, level=logging.ERROR)
            return SubmitResult(ok=False, error=str(e))
        finally:
            self._guard.exit()

        self.reset()
        return SubmitResult(ok=True, record=saved)


@dataclass
class ProductRow:
    """One display row of a product list."""

    record: ProductRecord
    date_text: str
    category: str

    @classmethod
    def from_record(cls, record: ProductRecord) -> "ProductRow":
        return cls(
            record=record,
            date_text=format_date(record.date_added),
            category=get_category_label(record.quantity),
        )


class ProductListController:
    """Rows, row actions, detail view and form visibility of a product list."""

    def __init__(
        self,
        repository: ProductRepository,
        form: ProductFormController,
        policy: FilterPolicy = NO_FILTER,
        supports_detail: bool = False,
        collapsible_form: bool = False,
    ):
        self.repository = repository
        self.form = form
        self.policy = policy
        self.supports_detail = supports_detail
        self.collapsible_form = collapsible_form
        # A collapsible form starts closed; a fixed one is always shown
        self.form_open = not collapsible_form
        self.detail: Optional[ProductRecord] = None

    def refresh(self) -> bool:
        return self.repository.load()

    def records(self) -> List[ProductRecord]:
        return self.repository.view(self.policy)

    def rows(self) -> List[ProductRow]:
        return [ProductRow.from_record(record) for record in self.records()]

    def select(self, record: ProductRecord) -> None:
        """Edit action: copy the row into the form."""
        self.form.select(record)
        self.form_open = True

    def toggle_form(self) -> bool:
        if self.collapsible_form:
            self.form_open = not self.form_open
        return self.form_open

    def remove(self, record_id: str) -> DeleteResult:
        """Delete action: remote delete, then an unconditional reload."""
        result = self.repository.delete(record_id)
        if result.ok:
            if self.detail is not None and self.detail.id == record_id:
                self.detail = None
            if self.form.selected_id == record_id:
                self.form.reset()
        return result

    def open(self, record: ProductRecord) -> None:
        """Show the read-only detail view for a record."""
        if not self.supports_detail:
            raise RuntimeError("This list has no detail view")
        self.detail = record

    def close(self) -> None:
        self.detail = None


class NoticeFormController:
    """Draft and selection for a general notice."""

    def __init__(self, repository: NoticeRepository):
        self.repository = repository
        self.draft = NoticeDraft()
        self.selected_id: Optional[str] = None
        self.last_error: Optional[str] = None
        self._guard = InFlightGuard()

    @property
    def mode(self) -> str:
        return "edit" if self.selected_id else "create"

    @property
    def is_submitting(self) -> bool:
        return self._guard.busy

    def select(self, record: NoticeRecord) -> None:
        self.draft = NoticeDraft.from_record(record)
        self.selected_id = record.id
        self.last_error = None

    def reset(self) -> None:
        self.draft = NoticeDraft()
        self.selected_id = None
        self.last_error = None

    def submit(self) -> SubmitResult:
        if not self._guard.try_enter():
            logger.warning("Notice submit ignored: a submission is already in flight")
            return SubmitResult(ok=False, skipped=True, error="submission already in progress")

        mode = self.mode
        try:
            saved = self.repository.save(self.draft, record_id=self.selected_id)
        except (ApiError, URLValidationError) as e:
            self.last_error = str(e)
            logger.error(f"Failed to submit notice ({mode}): {e}")
            log_client_event("submit_failed", {
                "kind": "notice",
                "mode": mode,
                "id": self.selected_id,
                "error": str(e),
            }, level=logging.ERROR)
            return SubmitResult(ok=False, error=str(e))
        finally:
            self._guard.exit()

        self.reset()
        return SubmitResult(ok=True, record=saved)


class NoticeBoard:
    """The general notices list with its form."""

    def __init__(self, repository: NoticeRepository):
        self.repository = repository
        self.form = NoticeFormController(repository)

    def mount(self) -> bool:
        return self.repository.load()

    def notices(self) -> List[NoticeRecord]:
        return self.repository.records

    def select(self, record: NoticeRecord) -> None:
        self.form.select(record)

    def remove(self, record_id: str) -> DeleteResult:
        result = self.repository.delete(record_id)
        if result.ok and self.form.selected_id == record_id:
            self.form.reset()
        return result
