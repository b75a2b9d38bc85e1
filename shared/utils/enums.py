from enum import Enum


class UserAccountType(str, Enum):
    PENDING = "pending"
    ORGANIZATION = "organization"
    TENANT = "tenant"
    STAFF = "staff"
    FLAT_OWNER = "owner"
    AGENT = "agent"
    ADMIN = "admin"
    SUPER_ADMIN = "super_admin"

    @classmethod
    def admin_types(cls):
        return {cls.ADMIN.value, cls.SUPER_ADMIN.value, cls.ORGANIZATION.value}
