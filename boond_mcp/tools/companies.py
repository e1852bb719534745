"""MCP tools for BoondManager companies."""

from typing import Any

from fastmcp.tools import ToolResult

from boond_mcp.clients.boond import BoondClient
from boond_mcp.middleware.interceptor import RegisterTool
from boond_mcp.models.boond import Company, CompanySearchResponse, EntityId, SearchParams
from boond_mcp.models.shaping import ToolConfig
from boond_mcp.tools.error_messages import handle_tool_error


def format_company_list(result: CompanySearchResponse) -> str:
    if not result.data:
        return "No companies found."

    blocks = []
    for company in result.data:
        lines = [f"🏢 {company.name} (ID: {company.id})"]
        if company.type:
            lines.append(f"   Type: {company.type}")
        location = ", ".join(part for part in (company.city, company.country) if part)
        if location:
            lines.append(f"   Location: {location}")
        blocks.append("\n".join(lines))

    page = result.pagination
    summary = (
        f"Found {len(result.data)} company(ies) "
        f"(Page {page.page}/{page.page_count} of {page.total} total)"
    )
    return f"{summary}\n\n" + "\n\n".join(blocks)


def format_company(company: Company) -> str:
    lines = [f"🏢 Company: {company.name}", f"ID: {company.id}"]
    if company.type:
        lines.append(f"Type: {company.type}")
    if company.address:
        lines.append(f"Address: {company.address}")
    if company.city:
        lines.append(f"City: {company.city}")
    if company.country:
        lines.append(f"Country: {company.country}")
    if company.contacts:
        lines.append(f"Contacts: {', '.join(company.contacts)}")
    if company.created_at:
        lines.append(f"Created: {company.created_at}")
    if company.updated_at:
        lines.append(f"Updated: {company.updated_at}")
    return "\n".join(lines)


def register_company_tools(register: RegisterTool, client: BoondClient) -> None:
    """Register company search/get tools."""

    async def search_companies(arguments: dict[str, Any]) -> ToolResult:
        try:
            params = SearchParams.model_validate(arguments)
            result = await client.search_companies(params)
        except Exception as exc:  # noqa: BLE001
            return handle_tool_error(exc, "searching", "Companies")
        return ToolResult(content=format_company_list(result))

    async def get_company(arguments: dict[str, Any]) -> ToolResult:
        try:
            params = EntityId.model_validate(arguments)
            company = await client.get_company(params.id)
        except Exception as exc:  # noqa: BLE001
            return handle_tool_error(exc, "retrieving", "Company")
        return ToolResult(content=format_company(company))

    register(
        "boond_companies_search",
        ToolConfig(
            description="Search companies by name or other criteria",
            input_schema=SearchParams.model_json_schema(),
        ),
        search_companies,
    )
    register(
        "boond_companies_get",
        ToolConfig(
            description="Get a company by ID",
            input_schema=EntityId.model_json_schema(),
        ),
        get_company,
    )
