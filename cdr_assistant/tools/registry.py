"""
Tool registry - central repository for all available tools.

Singleton pattern ensures only one registry exists across the application.
"""

from typing import Dict, List, Type, Optional
from cdr_assistant.tools.base import Tool, ToolDefinition, ToolCategory
import logging

logger = logging.getLogger(__name__)


class ToolRegistry:
    """
    Singleton registry for all available tools.

    Manages tool registration, lookup, and schema generation for different hosts.
    """

    _instance = None

    def __new__(cls):
        """Singleton pattern - only one instance exists."""
        if cls._instance is None:
            cls._instance = super().__new__(cls)
            cls._instance._tools = {}
            cls._instance._initialized = False
        return cls._instance

    def register(self, tool_class: Type[Tool]) -> None:
        """
        Register a tool class.

        Args:
            tool_class: Tool class (not instance) to register

        Example:
            registry.register(SearchCallsTool)
        """
        tool = tool_class()
        tool_name = tool.definition.name

        if tool_name in self._tools:
            logger.warning(f"Tool {tool_name} already registered, overwriting")

        self._tools[tool_name] = tool
        logger.info(f"Registered tool: {tool_name} ({tool.definition.category.value})")

    def get(self, name: str) -> Optional[Tool]:
        """Get tool by name, or None if not found."""
        return self._tools.get(name)

    def get_all(self) -> List[Tool]:
        return list(self._tools.values())

    def get_by_category(self, category: ToolCategory) -> List[Tool]:
        return [
            tool for tool in self._tools.values()
            if tool.definition.category == category
        ]

    def get_definitions(self) -> List[ToolDefinition]:
        return [tool.definition for tool in self._tools.values()]

    def to_mcp_schema(self) -> List[Dict]:
        """
        Export all tools in MCP tools/list format.

        Returns:
            List of tool schemas with name, description and inputSchema
        """
        return [
            tool.definition.to_mcp_schema()
            for tool in self._tools.values()
        ]

    def to_openai_schema(self) -> List[Dict]:
        """
        Export all tools in OpenAI Chat Completions API format.

        Returns:
            List of tool schemas for OpenAI Chat Completions (nested format)
        """
        return [
            tool.definition.to_openai_schema()
            for tool in self._tools.values()
        ]

    def initialize_default_tools(self) -> None:
        """
        Register all built-in tools.

        Called once during gateway startup.
        """
        if self._initialized:
            logger.info("Tools already initialized, skipping")
            return

        from cdr_assistant.tools.cdr import (
            SearchCallsTool,
            GetCallDetailsTool,
            GetPcapInfoTool,
            SearchProblemCallsTool,
        )

        for tool_class in (SearchCallsTool, GetCallDetailsTool, GetPcapInfoTool, SearchProblemCallsTool):
            self.register(tool_class)

        self._initialized = True
        logger.info(f"Initialized {len(self._tools)} tools")

    def list_tools(self) -> List[str]:
        return list(self._tools.keys())

    def clear(self) -> None:
        """
        Clear all registered tools.

        Mainly for testing purposes.
        """
        self._tools.clear()
        self._initialized = False
        logger.info("Cleared all registered tools")


# Global singleton instance
tool_registry = ToolRegistry()
