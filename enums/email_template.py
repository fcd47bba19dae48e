from enum import Enum


class EmailTemplate(str, Enum):
    """
    Transactional email templates (file name under email_api/templates).
    """

    ORDER_CONFIRMATION = "order_confirmation"
    ADMIN_NEW_ORDER = "admin_new_order"
    ORDER_STATUS_UPDATE = "order_status_update"
    WELCOME = "welcome"
    CONNECTION_TEST = "connection_test"
