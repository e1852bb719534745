from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from boond_mcp.models.enums import CandidateStatus, CompanyType


class BoondModel(BaseModel):
    """Base for BoondManager payloads, which use camelCase keys on the wire."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
    )


class Candidate(BoondModel):
    id: str
    first_name: str
    last_name: str
    email: str
    phone: str | None = None
    status: CandidateStatus = CandidateStatus.ACTIVE
    address: str | None = None
    city: str | None = None
    country: str | None = None
    created_at: str | None = None
    updated_at: str | None = None


class Company(BoondModel):
    id: str
    name: str
    type: CompanyType | None = None
    address: str | None = None
    city: str | None = None
    country: str | None = None
    contacts: list[str] = []
    created_at: str | None = None
    updated_at: str | None = None


class Pagination(BoondModel):
    page: int = 1
    limit: int = 20
    total: int = 0

    @property
    def page_count(self) -> int:
        if self.limit <= 0:
            return 0
        return -(-self.total // self.limit)


class CandidateSearchResponse(BoondModel):
    data: list[Candidate] = []
    pagination: Pagination = Field(default_factory=Pagination)


class CompanySearchResponse(BoondModel):
    data: list[Company] = []
    pagination: Pagination = Field(default_factory=Pagination)


# ── Tool inputs ──────────────────────────────────────────────────────────────


class SearchParams(BoondModel):
    query: str | None = None
    page: int = Field(default=1, ge=1)
    limit: int = Field(default=20, ge=1, le=100)


class EntityId(BoondModel):
    id: str = Field(min_length=1)


class CreateCandidate(BoondModel):
    first_name: str = Field(min_length=1)
    last_name: str = Field(min_length=1)
    email: str = Field(min_length=3, pattern=r"^[^@\s]+@[^@\s]+$")
    phone: str | None = None
    status: CandidateStatus = CandidateStatus.ACTIVE
    address: str | None = None
    city: str | None = None
    country: str | None = None


class UpdateCandidate(BoondModel):
    id: str = Field(min_length=1)
    first_name: str | None = Field(default=None, min_length=1)
    last_name: str | None = Field(default=None, min_length=1)
    email: str | None = Field(default=None, pattern=r"^[^@\s]+@[^@\s]+$")
    phone: str | None = None
    status: CandidateStatus | None = None
    address: str | None = None
    city: str | None = None
    country: str | None = None
