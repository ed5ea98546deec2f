"""Configuration and constants for the inventory client."""

import os
from pathlib import Path
from typing import Dict, Optional

from dotenv import load_dotenv

__all__ = [
    "BASE_URL",
    "PRODUCTS_PATH",
    "NOTICES_PATH",
    "HEADERS",
    "REQUEST_TIMEOUT",
    "MAX_IMAGE_SIZE",
    "DEFAULT_IMAGE_CONTENT_TYPE",
    "QUANTITY_CATEGORIES",
    "OTHER_CATEGORY_LABEL",
    "LOG_DIR",
    "LOG_LEVEL",
    "OUTPUT_PATH",
    "get_category_label",
]

# Load environment variables from the project .env file
_PROJECT_ROOT = Path(__file__).parent.parent
load_dotenv(dotenv_path=_PROJECT_ROOT / ".env")

# Remote API (local network address by default; point at the hosted API via env)
BASE_URL = os.getenv("INVENTORY_API_URL", "http://192.168.0.110:3000")

PRODUCTS_PATH = "/produtos"
NOTICES_PATH = "/general-notices"

HEADERS = {
    "User-Agent": "inventory-docs client",
    "Accept": "application/json",
}

# Request timeout in seconds (no retries are made on timeout)
REQUEST_TIMEOUT = float(os.getenv("INVENTORY_TIMEOUT", "15"))

# Maximum image upload size in bytes (5MB)
MAX_IMAGE_SIZE = 5 * 1024 * 1024

# Used when neither the file extension nor the file content identifies the image
DEFAULT_IMAGE_CONTENT_TYPE = "application/octet-stream"

# Quantity doubles as the product category
QUANTITY_CATEGORIES: Dict[int, str] = {
    1: "eletronica",
    2: "montagem",
}
OTHER_CATEGORY_LABEL = "outros"

LOG_DIR = Path(os.getenv("INVENTORY_LOG_DIR", str(_PROJECT_ROOT / "logs")))

# Console log level; the JSONL file always records INFO and above
LOG_LEVEL = os.getenv("INVENTORY_LOG_LEVEL", "WARNING")

OUTPUT_PATH = "data/produtos.csv"


def get_category_label(quantity: Optional[int]) -> str:
    """Get the category label for a quantity value."""
    if quantity is None:
        return OTHER_CATEGORY_LABEL
    return QUANTITY_CATEGORIES.get(quantity, OTHER_CATEGORY_LABEL)
