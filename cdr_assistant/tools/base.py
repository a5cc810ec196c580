"""
Base classes for the tool calling layer.

This module defines the core abstractions that all tools implement,
regardless of which assistant host calls them (MCP, OpenAI function calling).
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Dict, Any, List, Optional
from enum import Enum
import logging

logger = logging.getLogger(__name__)


class ToolCategory(Enum):
    """Category of tool, used for grouping in listings."""
    SEARCH = "search"    # Queries returning lists of calls
    LOOKUP = "lookup"    # Single-call details and artifacts


_JSON_TYPES = {
    "string": (str,),
    "integer": (int,),
    "number": (int, float),
    "boolean": (bool,),
}


@dataclass
class ToolParameter:
    """Definition of a tool parameter."""
    name: str
    type: str  # "string", "integer", "boolean", "number"
    description: str
    required: bool = False
    enum: Optional[List[str]] = None
    default: Optional[Any] = None

    def to_dict(self, include_default: bool = True) -> Dict[str, Any]:
        """Convert to a JSON Schema property."""
        result = {
            "type": self.type,
            "description": self.description
        }
        if self.enum:
            result["enum"] = self.enum
        if include_default and self.default is not None:
            result["default"] = self.default
        return result

    def accepts(self, value: Any) -> bool:
        expected = _JSON_TYPES.get(self.type)
        if expected is None:
            return True
        # bool is an int subclass; keep it out of integer/number parameters
        if self.type in ("integer", "number") and isinstance(value, bool):
            return False
        return isinstance(value, expected)


@dataclass
class ToolDefinition:
    """
    Host-agnostic tool definition.

    Contains all metadata needed to expose a tool to an assistant.
    """
    name: str
    description: str
    category: ToolCategory
    parameters: List[ToolParameter] = field(default_factory=list)

    def _json_schema(self) -> Dict[str, Any]:
        return {
            "type": "object",
            "properties": {
                p.name: p.to_dict()
                for p in self.parameters
            },
            "required": [p.name for p in self.parameters if p.required]
        }

    def to_mcp_schema(self) -> Dict[str, Any]:
        """
        Convert to the MCP tools/list format.

        {
            "name": "tool_name",
            "description": "Tool description",
            "inputSchema": {"type": "object", "properties": {...}, "required": [...]}
        }
        """
        return {
            "name": self.name,
            "description": self.description,
            "inputSchema": self._json_schema(),
        }

    def to_openai_schema(self) -> Dict[str, Any]:
        """Convert to OpenAI Chat Completions function calling format."""
        return {
            "type": "function",
            "function": {
                "name": self.name,
                "description": self.description,
                "parameters": self._json_schema(),
            }
        }


class Tool(ABC):
    """
    Abstract base class for all tools.

    All tools must inherit from this class and implement:
    - definition property: Returns ToolDefinition with metadata
    - execute method: Performs the actual tool action
    """

    @property
    @abstractmethod
    def definition(self) -> ToolDefinition:
        """Return tool definition with metadata."""
        pass

    @abstractmethod
    async def execute(
        self,
        parameters: Dict[str, Any],
        context: 'ToolExecutionContext'
    ) -> Dict[str, Any]:
        """
        Execute the tool with given parameters and context.

        Implementations never raise: upstream failures come back as an
        error result.

        Args:
            parameters: Tool arguments from the assistant
            context: Execution context with the VoIPmonitor client and config

        Returns:
            Result dictionary with:
            - status: "success" | "not_found" | "error"
            - message: Human-readable report for the assistant
            - Additional tool-specific fields
        """
        pass

    def validate_parameters(self, parameters: Dict[str, Any]) -> bool:
        """
        Validate parameters before execution.

        Args:
            parameters: Parameters to validate

        Returns:
            True if valid

        Raises:
            ValueError: If validation fails with specific error message
        """
        for param in self.definition.parameters:
            value = parameters.get(param.name)
            if param.required and (param.name not in parameters or value is None or value == ""):
                raise ValueError(f"Missing required parameter: {param.name}")
            if value is None:
                continue

            if not param.accepts(value):
                raise ValueError(f"Invalid value for {param.name}: expected {param.type}")

            if param.enum and value not in param.enum:
                raise ValueError(
                    f"Invalid value for {param.name}. "
                    f"Must be one of: {', '.join(param.enum)}"
                )

        return True
