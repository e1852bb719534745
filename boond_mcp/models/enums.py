from enum import StrEnum


class EvictionReason(StrEnum):
    CAPACITY = "capacity"
    TTL = "ttl"
    MANUAL = "manual"


class CandidateStatus(StrEnum):
    ACTIVE = "active"
    INACTIVE = "inactive"
    ARCHIVED = "archived"


class CompanyType(StrEnum):
    CLIENT = "client"
    SUPPLIER = "supplier"
    PARTNER = "partner"
