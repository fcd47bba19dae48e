from enum import Enum


class OrderStatus(str, Enum):
    PENDING = "pending"          # Created, payment not yet confirmed
    PROCESSING = "processing"    # Paid, being prepared by the shop
    SHIPPED = "shipped"          # Handed over to carrier
    DELIVERED = "delivered"      # Final: received by customer
    CANCELLED = "cancelled"      # Final: cancelled by admin
