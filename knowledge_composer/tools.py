"""
MCP Tools module for Knowledge Composer.

Contains the MCP tool handlers (list_tools and call_tool) and the server instance.
"""

import json
from typing import Any

from mcp.server import Server
from mcp.types import (
    Resource,
    TextContent,
    Tool,
)

from .composer import describe_skipped
from .config import settings
from .models import ReferenceToken
from .pipeline import InvocationPipeline
from .resolver import resolve
from .store import module_store
from .utils import EmptyInvocationError, NotFoundError
from .validator import default_section_families, validate

# Initialize server
server = Server("knowledge-composer")


@server.list_tools()
async def list_tools() -> list[Tool]:
    """List available tools."""
    return [
        Tool(
            name="knowledge_compose",
            description="Compose a topic instruction with referenced knowledge modules into one context payload. "
                       f"Reference modules with '{settings.reference_marker}name', e.g. "
                       f"'Explain window joins {settings.reference_marker}duckdb {settings.reference_marker}sql-style'. "
                       "Modules that are missing, invalid, or repeated are listed after the payload.",
            inputSchema={
                "type": "object",
                "properties": {
                    "invocation": {
                        "type": "string",
                        "description": "Topic text plus module references"
                    }
                },
                "required": ["invocation"]
            }
        ),
        Tool(
            name="knowledge_validate",
            description="Check that a knowledge module has every required section heading.",
            inputSchema={
                "type": "object",
                "properties": {
                    "module": {
                        "type": "string",
                        "description": "Module identifier (e.g., 'duckdb' or 'databases/duckdb')"
                    }
                },
                "required": ["module"]
            }
        ),
        Tool(
            name="knowledge_list_modules",
            description="List the knowledge modules available for composition.",
            inputSchema={
                "type": "object",
                "properties": {}
            }
        ),
    ]


@server.call_tool()
async def call_tool(name: str, arguments: dict[str, Any]) -> list[TextContent]:
    """Handle tool calls."""

    if name == "knowledge_compose":
        invocation = arguments.get("invocation", "")
        pipeline = InvocationPipeline(store=module_store)

        try:
            result, reports = await pipeline.run(invocation)
        except EmptyInvocationError as e:
            return [TextContent(type="text", text=f"Error: {e}")]

        output = result.payload
        if result.skipped_modules:
            output += "\n\n---\n\n## Skipped Modules\n"
            for line in describe_skipped(result, reports):
                output += f"- {line}\n"

        return [TextContent(type="text", text=output)]

    elif name == "knowledge_validate":
        module_name = arguments.get("module", "")
        if not module_name:
            return [TextContent(type="text", text="Error: module is required")]

        resolution = await resolve(ReferenceToken(raw=module_name, position=0), module_store)
        if isinstance(resolution, NotFoundError):
            return [TextContent(type="text", text=f"Module not found: '{resolution.identifier}'")]

        report = validate(resolution)
        if report.is_valid:
            return [TextContent(type="text", text=f"**{report.module_identifier}** is valid.")]

        output = f"**{report.module_identifier}** is missing required sections:\n\n"
        for section in report.missing_sections:
            output += f"- {section}\n"

        return [TextContent(type="text", text=output)]

    elif name == "knowledge_list_modules":
        identifiers = module_store.list_identifiers()

        if not identifiers:
            return [TextContent(type="text", text="No knowledge modules found.")]

        output = f"Found {len(identifiers)} knowledge modules:\n\n"
        for identifier in identifiers:
            output += f"- {settings.reference_marker}{identifier}\n"

        return [TextContent(type="text", text=output)]

    return [TextContent(type="text", text=f"Unknown tool: {name}")]


# ============== Resources ==============

@server.list_resources()
async def list_resources() -> list[Resource]:
    """List available resources."""
    return [
        Resource(
            uri="composer://sections",
            name="Required Sections",
            description="Section families every knowledge module must contain",
            mimeType="application/json"
        ),
    ]


@server.read_resource()
async def read_resource(uri: Any) -> str:
    """Read a resource."""
    if str(uri) == "composer://sections":
        families = [family.model_dump(mode="json") for family in default_section_families()]
        return json.dumps({"required_sections": families}, indent=2)

    return json.dumps({"error": f"Unknown resource: {uri}"})
