from enum import Enum


class BookingKind(str, Enum):
    rent = "rent"
    pg = "pg"


class BookingStatus(str, Enum):
    PENDING_APPROVAL = "PENDING_APPROVAL"
    ACTIVE = "ACTIVE"
    REJECTED = "REJECTED"
    CANCELLED = "CANCELLED"
    TERMINATED = "TERMINATED"
    COMPLETED = "COMPLETED"

    @classmethod
    def terminal(cls):
        return {cls.REJECTED, cls.CANCELLED, cls.TERMINATED, cls.COMPLETED}

    @property
    def is_terminal(self) -> bool:
        return self in BookingStatus.terminal()


class PaymentStatus(str, Enum):
    PENDING = "PENDING"
    OVERDUE = "OVERDUE"
    PAID = "PAID"
    CANCELLED = "CANCELLED"

    @classmethod
    def unpaid(cls):
        return [cls.PENDING, cls.OVERDUE]


class PropertyStatus(str, Enum):
    for_rent = "for_rent"
    rented = "rented"
    for_sale = "for_sale"
    sold = "sold"
