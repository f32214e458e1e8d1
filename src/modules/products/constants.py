"""Product domain constants.

Defines the fixed category enumeration, field defaults and the static
list of barcode formats the grocery client can scan.
"""

import re
from enum import Enum


class ProductCategory(str, Enum):
    DAIRY = "Dairy"
    FRUITS = "Fruits"
    VEGETABLES = "Vegetables"
    GROCERY = "Grocery"
    BAKERY = "Bakery"
    BEVERAGES = "Beverages"
    SNACKS = "Snacks"
    OTHER = "Other"


PRODUCT_CATEGORIES: tuple[str, ...] = tuple(c.value for c in ProductCategory)

DEFAULT_CATEGORY = ProductCategory.OTHER
DEFAULT_IMAGE_URL = "https://via.placeholder.com/100"
DEFAULT_STOCK = 0
DEFAULT_DISCOUNTS = ""

NAME_MAX_LENGTH = 200

# Largest integer the document store can encode (signed 64-bit).
MAX_STORED_INT = 2**63 - 1

EXPIRY_DATE_PATTERN = re.compile(r"^\d{4}-\d{2}-\d{2}$")

REQUIRED_FIELDS: tuple[str, ...] = ("productId", "name", "mrpPrice", "stock")

# Fields a client may set on create/update; everything else is ignored.
EDITABLE_FIELDS: tuple[str, ...] = (
    "productId",
    "name",
    "mrpPrice",
    "image",
    "stock",
    "category",
    "discounts",
    "expiryDate",
)

BARCODE_FORMATS: tuple[str, ...] = (
    "code_128",
    "code_39",
    "code_93",
    "codabar",
    "ean_13",
    "ean_8",
    "itf",
    "pdf417",
    "upc_a",
    "upc_e",
    "qr_code",
)

CURRENCY_SYMBOL = "₹"
