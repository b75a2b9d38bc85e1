from enum import Enum


class NotificationType(str, Enum):
    BOOKING_CREATED = "BOOKING_CREATED"
    BOOKING_APPROVED = "BOOKING_APPROVED"
    BOOKING_REJECTED = "BOOKING_REJECTED"
    BOOKING_CANCELLED = "BOOKING_CANCELLED"
    BOOKING_TERMINATED = "BOOKING_TERMINATED"
    BOOKING_COMPLETED = "BOOKING_COMPLETED"
    PAYMENT_DUE = "PAYMENT_DUE"
    PAYMENT_OVERDUE = "PAYMENT_OVERDUE"
    PAYMENT_RECEIVED = "PAYMENT_RECEIVED"


class NotificationPriority(str, Enum):
    HIGH = "HIGH"
    MEDIUM = "MEDIUM"
    LOW = "LOW"


PRIORITY_BY_TYPE = {
    NotificationType.BOOKING_REJECTED: NotificationPriority.HIGH,
    NotificationType.PAYMENT_OVERDUE: NotificationPriority.HIGH,
    NotificationType.BOOKING_TERMINATED: NotificationPriority.HIGH,
    NotificationType.BOOKING_APPROVED: NotificationPriority.MEDIUM,
    NotificationType.PAYMENT_DUE: NotificationPriority.MEDIUM,
    NotificationType.BOOKING_CANCELLED: NotificationPriority.MEDIUM,
}
