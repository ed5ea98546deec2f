"""CSV export of product lists."""

import csv
import os
from dataclasses import asdict
from typing import Dict, Iterable, List

from inventory.config import get_category_label
from inventory.models import ProductRecord

__all__ = ["CSV_FIELDNAMES", "product_to_row", "export_products_to_csv"]

CSV_FIELDNAMES = [
    "id",
    "name",
    "description",
    "quantity",
    "category",
    "image_url",
    "date_added",
]


def product_to_row(product: ProductRecord) -> Dict[str, str]:
    """Convert a ProductRecord into a CSV-ready row."""
    row = asdict(product)
    row["category"] = get_category_label(product.quantity)
    row["quantity"] = "" if product.quantity is None else str(product.quantity)
    row["image_url"] = product.image_url or ""
    row["date_added"] = product.date_added.isoformat() if product.date_added else ""
    return row


def export_products_to_csv(products: Iterable[ProductRecord], path: str) -> int:
    """Write products to a CSV file, in the order given.

    Returns:
        Number of products written
    """
    rows: List[Dict[str, str]] = [product_to_row(p) for p in products]

    directory = os.path.dirname(path)
    if directory:
        os.makedirs(directory, exist_ok=True)

    with open(path, "w", newline="", encoding="utf-8") as f:
        writer = csv.DictWriter(f, fieldnames=CSV_FIELDNAMES)
        writer.writeheader()
        for row in rows:
            writer.writerow(row)

    print(f"Exported {len(rows)} products to {path}")
    return len(rows)
