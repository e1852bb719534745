from boond_mcp.models.boond import (
    Candidate,
    CandidateSearchResponse,
    Company,
    CompanySearchResponse,
    CreateCandidate,
    EntityId,
    Pagination,
    SearchParams,
    UpdateCandidate,
)
from boond_mcp.models.enums import CandidateStatus, CompanyType, EvictionReason
from boond_mcp.models.shaping import (
    CacheStats,
    RateLimitConfig,
    RateLimitDecision,
    ToolConfig,
)

__all__ = [
    "CacheStats",
    "Candidate",
    "CandidateSearchResponse",
    "CandidateStatus",
    "Company",
    "CompanySearchResponse",
    "CompanyType",
    "CreateCandidate",
    "EntityId",
    "EvictionReason",
    "Pagination",
    "RateLimitConfig",
    "RateLimitDecision",
    "SearchParams",
    "ToolConfig",
    "UpdateCandidate",
]
