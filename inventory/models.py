"""Data models for products and notices."""

import enum
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict, Optional

__all__ = [
    "ProductRecord",
    "NoticeRecord",
    "ProductDraft",
    "NoticeDraft",
    "SubmitResult",
    "DeleteResult",
    "DraftValidationError",
    "parse_timestamp",
    "parse_quantity",
]


class DraftValidationError(ValueError):
    """Raised when a draft cannot be turned into a request payload."""
    pass


def parse_timestamp(value: Any) -> Optional[datetime]:
    """Parse an ISO-8601 timestamp from the API (trailing 'Z' accepted)."""
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value
    text = str(value).strip()
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    try:
        return datetime.fromisoformat(text)
    except ValueError:
        return None


def parse_quantity(value: Any) -> Optional[int]:
    """Coerce a quantity from the API or a form field to int.

    Returns None for missing or non-numeric values.
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    try:
        return int(float(str(value).strip()))
    except (ValueError, OverflowError):
        return None


def _record_id(data: Dict[str, Any]) -> str:
    raw = data.get("_id") or data.get("id")
    if raw is None or raw == "":
        raise ValueError(f"Record has no id: {data!r}")
    return str(raw)


@dataclass
class ProductRecord:
    """A single product as stored by the remote API.

    The id and date_added are assigned by the store and never change
    on the client.
    """

    id: str
    name: str = ""
    description: str = ""
    quantity: Optional[int] = None
    image_url: Optional[str] = None
    date_added: Optional[datetime] = None

    @classmethod
    def from_api(cls, data: Dict[str, Any]) -> "ProductRecord":
        return cls(
            id=_record_id(data),
            name=str(data.get("name") or ""),
            description=str(data.get("description") or ""),
            quantity=parse_quantity(data.get("quantity")),
            image_url=data.get("imageUrl") or None,
            date_added=parse_timestamp(data.get("dateAdded")),
        )


@dataclass
class NoticeRecord:
    """A single general notice."""

    id: str
    notice: str = ""

    @classmethod
    def from_api(cls, data: Dict[str, Any]) -> "NoticeRecord":
        return cls(id=_record_id(data), notice=data.get("notice") or "")


@dataclass
class ProductDraft:
    """Form state for a product being created or edited.

    ``quantity`` holds the text as typed. ``image`` is a local file path
    picked by the user; ``stored_image_url`` is the store's reference for
    the record under edit, resent as-is unless a new image was picked.
    """

    name: str = ""
    description: str = ""
    quantity: str = ""
    image: Optional[str] = None
    stored_image_url: Optional[str] = None

    @classmethod
    def from_record(cls, record: ProductRecord) -> "ProductDraft":
        return cls(
            name=record.name,
            description=record.description,
            quantity="" if record.quantity is None else str(record.quantity),
            stored_image_url=record.image_url,
        )

    def to_form(self, fixed_quantity: Optional[int] = None) -> Dict[str, str]:
        """Build the multipart text fields for this draft.

        Args:
            fixed_quantity: Quantity forced by the screen, overriding the typed value

        Raises:
            DraftValidationError: If the typed quantity is not numeric
        """
        if fixed_quantity is not None:
            quantity = str(fixed_quantity)
        else:
            quantity = self.quantity.strip()
            if quantity and parse_quantity(quantity) is None:
                raise DraftValidationError(f"Quantity must be numeric, got {self.quantity!r}")

        return {
            "name": self.name,
            "description": self.description,
            "quantity": quantity,
        }


@dataclass
class NoticeDraft:
    notice: str = ""

    @classmethod
    def from_record(cls, record: NoticeRecord) -> "NoticeDraft":
        return cls(notice=record.notice)

    def to_json(self) -> Dict[str, str]:
        return {"notice": self.notice}


@dataclass
class SubmitResult:
    """Outcome of a form submission."""

    ok: bool
    record: Optional[Any] = None
    error: Optional[str] = None
    # Set when the in-flight guard rejected the submission
    skipped: bool = False


class DeleteResult(enum.Enum):
    CONFIRMED = "confirmed"
    FAILED = "failed"

    @property
    def ok(self) -> bool:
        return self is DeleteResult.CONFIRMED
