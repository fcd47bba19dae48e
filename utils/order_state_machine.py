"""
Order State Machine for validating order status transitions and maintaining consistency.

Fulfilment moves forward one step at a time; cancellation is the only way to
leave the line early. All status changes come from an admin, except the
payment confirmation (pending -> processing) which the webhook may apply.
"""

import logging
from typing import Dict, List, Optional, Set

from enums.order_status import OrderStatus
from exceptions.order import InvalidOrderTransitionException

logger = logging.getLogger(__name__)


class OrderStatusTransition:
    """Represents a valid status transition with metadata"""

    def __init__(self, from_status: OrderStatus, to_status: OrderStatus, requires_admin: bool = True,
                 description: str = ""):
        self.from_status = from_status
        self.to_status = to_status
        self.requires_admin = requires_admin
        self.description = description

    def __repr__(self):
        admin_flag = " (Admin)" if self.requires_admin else ""
        return f"{self.from_status.value} -> {self.to_status.value}{admin_flag}"


class OrderStateMachine:
    """
    Finite state machine for order status transitions with validation and audit logging.

    Valid status transitions:
    - PENDING -> PROCESSING (payment confirmed, webhook or admin)
    - PROCESSING -> SHIPPED (admin)
    - SHIPPED -> DELIVERED (admin)
    - PENDING | PROCESSING | SHIPPED -> CANCELLED (admin)

    DELIVERED and CANCELLED are final. Re-submitting the current status is
    accepted as a no-op so tracking details can be edited on their own.
    """

    FINAL_STATUSES: Set[OrderStatus] = {OrderStatus.DELIVERED, OrderStatus.CANCELLED}

    VALID_TRANSITIONS: List[OrderStatusTransition] = [
        # Forward progression
        OrderStatusTransition(
            OrderStatus.PENDING,
            OrderStatus.PROCESSING,
            requires_admin=False,
            description="Payment confirmed, order being prepared"
        ),
        OrderStatusTransition(
            OrderStatus.PROCESSING,
            OrderStatus.SHIPPED,
            description="Order handed over to carrier"
        ),
        OrderStatusTransition(
            OrderStatus.SHIPPED,
            OrderStatus.DELIVERED,
            description="Order delivered to customer"
        ),

        # Escape hatch
        OrderStatusTransition(
            OrderStatus.PENDING,
            OrderStatus.CANCELLED,
            description="Unpaid order cancelled"
        ),
        OrderStatusTransition(
            OrderStatus.PROCESSING,
            OrderStatus.CANCELLED,
            description="Paid order cancelled before shipping"
        ),
        OrderStatusTransition(
            OrderStatus.SHIPPED,
            OrderStatus.CANCELLED,
            description="Shipped order cancelled (lost or returned)"
        ),
    ]

    _transition_map: Dict[OrderStatus, Set[OrderStatus]] = {}
    _admin_required_transitions: Set[tuple] = set()
    _transition_descriptions: Dict[tuple, str] = {}

    @classmethod
    def _build_transition_map(cls):
        """Build internal transition maps for lookup"""
        if cls._transition_map:
            return

        for transition in cls.VALID_TRANSITIONS:
            cls._transition_map.setdefault(transition.from_status, set()).add(transition.to_status)
            if transition.requires_admin:
                cls._admin_required_transitions.add((transition.from_status, transition.to_status))
            cls._transition_descriptions[(transition.from_status, transition.to_status)] = transition.description

    @classmethod
    def is_valid_transition(cls, from_status: OrderStatus, to_status: OrderStatus) -> bool:
        """
        Check if a status transition is valid according to the state machine.

        Args:
            from_status: Current order status
            to_status: Desired new status

        Returns:
            True if transition is valid, False otherwise
        """
        cls._build_transition_map()

        # Staying in the same status is a tracking-only update
        if from_status == to_status:
            return True

        return to_status in cls._transition_map.get(from_status, set())

    @classmethod
    def requires_admin(cls, from_status: OrderStatus, to_status: OrderStatus) -> bool:
        cls._build_transition_map()
        return (from_status, to_status) in cls._admin_required_transitions

    @classmethod
    def get_transition_description(cls, from_status: OrderStatus, to_status: OrderStatus) -> str:
        cls._build_transition_map()
        return cls._transition_descriptions.get(
            (from_status, to_status),
            f"Transition from {from_status.value} to {to_status.value}"
        )

    @classmethod
    def is_final_status(cls, status: OrderStatus) -> bool:
        return status in cls.FINAL_STATUSES

    @classmethod
    def validate_and_log_transition(cls, order_id: int, from_status: OrderStatus, to_status: OrderStatus,
                                    admin_id: Optional[int] = None) -> None:
        """
        Validate a status transition and write an audit log line.

        Args:
            order_id: ID of the order being transitioned
            from_status: Current order status
            to_status: Desired new status
            admin_id: ID of admin performing transition (None for system)

        Raises:
            InvalidOrderTransitionException: If the transition is not allowed
        """
        if not cls.is_valid_transition(from_status, to_status):
            logger.warning(f"Invalid status transition for order {order_id}: {from_status.value} -> {to_status.value}")
            raise InvalidOrderTransitionException(order_id, from_status.value, to_status.value)

        if from_status == to_status:
            return

        if cls.requires_admin(from_status, to_status) and admin_id is None:
            logger.warning(f"Admin required for transition {from_status.value} -> {to_status.value} on order {order_id}")
            raise InvalidOrderTransitionException(order_id, from_status.value, to_status.value)

        transition_desc = cls.get_transition_description(from_status, to_status)
        performer = f"admin {admin_id}" if admin_id else "system"
        logger.info(f"ORDER_STATUS_TRANSITION: Order {order_id} {from_status.value} -> {to_status.value} "
                    f"by {performer}: {transition_desc}")
