"""Screen variants: which products a screen shows and how its form behaves."""

from dataclasses import dataclass
from typing import Dict, List, Optional

from inventory.controllers import ProductFormController, ProductListController, ProductRow
from inventory.models import ProductRecord
from inventory.pipeline import NO_FILTER, QUANTITY_TRUTHY, FilterPolicy, quantity_equals
from inventory.repository import ProductRepository

__all__ = [
    "ScreenVariant",
    "Screen",
    "SCREEN_VARIANTS",
    "DEFAULT_SCREEN",
    "DEFAULT_FORM_SCREEN",
    "get_variant",
]


@dataclass(frozen=True)
class ScreenVariant:
    """Static description of one product screen."""

    key: str
    title: str
    policy: FilterPolicy = NO_FILTER
    # Quantity written by the form regardless of user input
    fixed_quantity: Optional[int] = None
    supports_detail: bool = False
    collapsible_form: bool = False
    # Show only the most recently added product instead of a list
    latest_only: bool = False


SCREEN_VARIANTS: Dict[str, ScreenVariant] = {
    "entrada": ScreenVariant(
        key="entrada",
        title="Gerenciar Produto",
        latest_only=True,
    ),
    "eletronica": ScreenVariant(
        key="eletronica",
        title="Gerenciar Produtos (Quantidade 1)",
        policy=quantity_equals(1),
        fixed_quantity=1,
        supports_detail=True,
    ),
    "montagem": ScreenVariant(
        key="montagem",
        title="Gerenciar Produtos (Quantidade 2)",
        policy=quantity_equals(2),
        fixed_quantity=2,
        supports_detail=True,
        collapsible_form=True,
    ),
    "todos": ScreenVariant(
        key="todos",
        title="Todos os Produtos",
        policy=QUANTITY_TRUTHY,
        fixed_quantity=2,
        supports_detail=True,
    ),
}

DEFAULT_SCREEN = "todos"
# Form-driven commands default to the screen where the quantity is typed
DEFAULT_FORM_SCREEN = "entrada"


def get_variant(key: str) -> ScreenVariant:
    """Look up a screen variant by key.

    Raises:
        KeyError: If the key is unknown
    """
    try:
        return SCREEN_VARIANTS[key]
    except KeyError:
        raise KeyError(
            f"Unknown screen {key!r}. Available: {sorted(SCREEN_VARIANTS)}"
        ) from None


class Screen:
    """A mounted product screen bound to the shared repository."""

    def __init__(self, variant: ScreenVariant, repository: ProductRepository):
        self.variant = variant
        self.repository = repository
        self.form = ProductFormController(repository, fixed_quantity=variant.fixed_quantity)
        self.list = ProductListController(
            repository,
            self.form,
            policy=variant.policy,
            supports_detail=variant.supports_detail,
            collapsible_form=variant.collapsible_form,
        )

    def mount(self) -> bool:
        """Load the collection once, unless another screen already did."""
        if self.repository.loaded:
            return True
        return self.repository.load()

    @property
    def loading(self) -> bool:
        return self.repository.loading

    def current(self) -> Optional[ProductRecord]:
        """The single product shown by a latest-only screen."""
        return self.repository.latest()

    def rows(self) -> List[ProductRow]:
        if self.variant.latest_only:
            record = self.current()
            return [ProductRow.from_record(record)] if record else []
        return self.list.rows()
