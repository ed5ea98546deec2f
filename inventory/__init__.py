"""Client for documenting inventory items against the remote products API."""

__version__ = "0.1.0"

# Re-export main components for convenient imports
from inventory.client import (
    ApiClient,
    ApiError,
    ResponseFormatError,
    ServerError,
    TransportError,
)
from inventory.controllers import (
    NoticeBoard,
    ProductFormController,
    ProductListController,
)
from inventory.models import (
    DeleteResult,
    NoticeDraft,
    NoticeRecord,
    ProductDraft,
    ProductRecord,
    SubmitResult,
)
from inventory.pipeline import (
    NO_FILTER,
    QUANTITY_TRUTHY,
    filter_records,
    quantity_equals,
    refresh,
    sort_records,
)
from inventory.repository import NoticeRepository, ProductRepository
from inventory.screens import SCREEN_VARIANTS, Screen, get_variant

__all__ = [
    # Version
    "__version__",
    # Transport
    "ApiClient",
    "ApiError",
    "TransportError",
    "ServerError",
    "ResponseFormatError",
    # Models
    "ProductRecord",
    "NoticeRecord",
    "ProductDraft",
    "NoticeDraft",
    "SubmitResult",
    "DeleteResult",
    # Pipeline
    "NO_FILTER",
    "QUANTITY_TRUTHY",
    "quantity_equals",
    "filter_records",
    "sort_records",
    "refresh",
    # State
    "ProductRepository",
    "NoticeRepository",
    "ProductFormController",
    "ProductListController",
    "NoticeBoard",
    "Screen",
    "SCREEN_VARIANTS",
    "get_variant",
]
