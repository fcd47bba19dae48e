from enum import Enum


class ProductStatus(str, Enum):
    DRAFT = "draft"          # Not visible in the storefront
    ACTIVE = "active"        # Listed and sellable
    SOLD = "sold"            # One-of-a-kind piece already sold
    ARCHIVED = "archived"    # Withdrawn from sale
