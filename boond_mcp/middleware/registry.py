"""In-process registry of tools, so they can be listed and called without a transport."""

import logging
from typing import Any, NamedTuple

from fastmcp.tools import ToolResult

from boond_mcp.middleware.interceptor import RegisterTool, ToolHandler, invoke_handler
from boond_mcp.models.shaping import ToolConfig

logger = logging.getLogger(__name__)


class ToolNotFoundError(KeyError):
    """No tool is registered under the requested name."""

    def __init__(self, name: str) -> None:
        super().__init__(name)
        self.name = name

    def __str__(self) -> str:
        return f"Tool not found: {self.name}"


class RegisteredTool(NamedTuple):
    name: str
    config: ToolConfig
    handler: ToolHandler


class ToolRegistry:
    """Records every tool registered through :meth:`recording`.

    The recorded handler is the one that reaches the downstream primitive,
    so when the registry sits below :func:`shape_registration` direct calls
    through :meth:`call_tool` are sanitized and rate limited too.
    """

    def __init__(self) -> None:
        self._tools: dict[str, RegisteredTool] = {}

    def recording(self, register: RegisterTool | None = None) -> RegisterTool:
        """Return a primitive that records each tool, then forwards to *register*."""

        def record(name: str, config: ToolConfig, handler: ToolHandler) -> None:
            if name in self._tools:
                logger.warning("Tool %s registered twice; keeping the latest", name)
            self._tools[name] = RegisteredTool(name=name, config=config, handler=handler)
            if register is not None:
                register(name, config, handler)

        return record

    def list_tools(self) -> list[RegisteredTool]:
        return list(self._tools.values())

    def has_tool(self, name: str) -> bool:
        return name in self._tools

    def get_tool(self, name: str) -> RegisteredTool:
        try:
            return self._tools[name]
        except KeyError:
            raise ToolNotFoundError(name) from None

    async def call_tool(self, name: str, arguments: dict[str, Any] | None = None) -> ToolResult:
        """Invoke a registered tool by name.

        Raises:
            ToolNotFoundError: If *name* was never registered.
        """
        tool = self.get_tool(name)
        return await invoke_handler(tool.handler, arguments or {})

    def __len__(self) -> int:
        return len(self._tools)
