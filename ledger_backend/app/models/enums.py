"""
User roles.
"""

import enum


class UserRole(str, enum.Enum):
    """
    ADMIN is the shop owner or bookkeeper and the only role with ledger
    access; accounts are created as ADMIN unless STAFF is asked for.
    STAFF can sign in and manage its own PIN.
    """
    ADMIN = "ADMIN"
    STAFF = "STAFF"
