from enum import Enum


class UserRole(str, Enum):
    SuperAdmin = "SuperAdmin"
    Admin = "Admin"
    AdvancedUser = "AdvancedUser"
    RegularUser = "RegularUser"


class UserStatus(str, Enum):
    Active = "active"
    Banned = "banned"


class BorrowStatus(str, Enum):
    Borrowed = "Borrowed"
    OverdueUnreturned = "OverdueUnreturned"
    Returned = "Returned"
    ReturnedLate = "ReturnedLate"


# Entries in these states still hold a unit of stock
OPEN_BORROW_STATUSES = (BorrowStatus.Borrowed, BorrowStatus.OverdueUnreturned)


class BorrowRequestStatus(str, Enum):
    Pending = "Pending"
    Approved = "Approved"
    Rejected = "Rejected"


class RegistrationStatus(str, Enum):
    Pending = "pending"
    Rejected = "rejected"


class DevicePlatform(str, Enum):
    Android = "android"
    IOS = "ios"
    Web = "web"
