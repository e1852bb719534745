"""MCP tools for BoondManager candidates."""

import logging
from typing import Any

from fastmcp.tools import ToolResult

from boond_mcp.clients.boond import BoondClient
from boond_mcp.middleware.interceptor import RegisterTool
from boond_mcp.models.boond import (
    Candidate,
    CandidateSearchResponse,
    CreateCandidate,
    EntityId,
    SearchParams,
    UpdateCandidate,
)
from boond_mcp.models.shaping import ToolConfig
from boond_mcp.tools.error_messages import handle_tool_error

logger = logging.getLogger(__name__)


def _detail_lines(candidate: Candidate, indent: str = "") -> list[str]:
    lines = [f"{indent}Email: {candidate.email}"]
    if candidate.phone:
        lines.append(f"{indent}Phone: {candidate.phone}")
    lines.append(f"{indent}Status: {candidate.status}")
    if candidate.address:
        lines.append(f"{indent}Address: {candidate.address}")
    if candidate.city:
        lines.append(f"{indent}City: {candidate.city}")
    if candidate.country:
        lines.append(f"{indent}Country: {candidate.country}")
    return lines


def format_candidate_list(result: CandidateSearchResponse) -> str:
    if not result.data:
        return "No candidates found."

    blocks = []
    for candidate in result.data:
        header = f"👤 {candidate.first_name} {candidate.last_name} (ID: {candidate.id})"
        blocks.append("\n".join([header, *_detail_lines(candidate, indent="   ")]))

    page = result.pagination
    summary = (
        f"Found {len(result.data)} candidate(s) "
        f"(Page {page.page}/{page.page_count} of {page.total} total)"
    )
    return f"{summary}\n\n" + "\n\n".join(blocks)


def format_candidate(candidate: Candidate) -> str:
    lines = [
        f"👤 Candidate: {candidate.first_name} {candidate.last_name}",
        f"ID: {candidate.id}",
        *_detail_lines(candidate),
    ]
    if candidate.created_at:
        lines.append(f"Created: {candidate.created_at}")
    if candidate.updated_at:
        lines.append(f"Updated: {candidate.updated_at}")
    return "\n".join(lines)


def register_candidate_tools(register: RegisterTool, client: BoondClient) -> None:
    """Register candidate search/get/create/update tools."""

    async def search_candidates(arguments: dict[str, Any]) -> ToolResult:
        try:
            params = SearchParams.model_validate(arguments)
            result = await client.search_candidates(params)
        except Exception as exc:  # noqa: BLE001
            return handle_tool_error(exc, "searching", "Candidates")
        return ToolResult(content=format_candidate_list(result))

    async def get_candidate(arguments: dict[str, Any]) -> ToolResult:
        try:
            params = EntityId.model_validate(arguments)
            candidate = await client.get_candidate(params.id)
        except Exception as exc:  # noqa: BLE001
            return handle_tool_error(exc, "retrieving", "Candidate")
        return ToolResult(content=format_candidate(candidate))

    async def create_candidate(arguments: dict[str, Any]) -> ToolResult:
        try:
            params = CreateCandidate.model_validate(arguments)
            candidate = await client.create_candidate(params)
        except Exception as exc:  # noqa: BLE001
            return handle_tool_error(exc, "creating", "Candidate")
        logger.info("Created candidate %s", candidate.id)
        return ToolResult(
            content=f"Candidate created successfully!\n\n{format_candidate(candidate)}"
        )

    async def update_candidate(arguments: dict[str, Any]) -> ToolResult:
        try:
            params = UpdateCandidate.model_validate(arguments)
            changes = params.model_dump(
                by_alias=True, exclude_none=True, exclude={"id"}, mode="json"
            )
            if not changes:
                return ToolResult(
                    content="Validation error: provide at least one field to update",
                    is_error=True,
                )
            candidate = await client.update_candidate(params.id, changes)
        except Exception as exc:  # noqa: BLE001
            return handle_tool_error(exc, "updating", "Candidate")
        logger.info("Updated candidate %s", candidate.id)
        return ToolResult(
            content=f"Candidate updated successfully!\n\n{format_candidate(candidate)}"
        )

    register(
        "boond_candidates_search",
        ToolConfig(
            description="Search candidates by name, email, or other criteria",
            input_schema=SearchParams.model_json_schema(),
        ),
        search_candidates,
    )
    register(
        "boond_candidates_get",
        ToolConfig(
            description="Get a candidate by ID",
            input_schema=EntityId.model_json_schema(),
        ),
        get_candidate,
    )
    register(
        "boond_candidates_create",
        ToolConfig(
            description="Create a new candidate",
            input_schema=CreateCandidate.model_json_schema(),
        ),
        create_candidate,
    )
    register(
        "boond_candidates_update",
        ToolConfig(
            description="Update an existing candidate",
            input_schema=UpdateCandidate.model_json_schema(),
        ),
        update_candidate,
    )
