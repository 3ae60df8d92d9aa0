"""MCP Server for IOS-XR L2 configuration analysis.

Lets an assistant inspect a base configuration and turn a small change
input into the device commands that apply it.

Tools exposed:
- parse_config: Parse configuration text into a node tree
- analyze_config: Bridge-domains, simplified config and lint of a base config
- generate_change_config: Commands applying a change input to a base config

Resources:
- l2craft://docs/change-input: Change-input syntax with examples
"""
import asyncio
import json
import logging
from typing import Optional

from mcp.server import Server
from mcp.server.stdio import stdio_server
from mcp.types import (
    TextContent,
    Tool,
    Resource,
)
from pydantic import AnyUrl

from .config.settings import load_settings
from .config_engine import ConfigEngine
from .utils.logging_config import setup_logging, timed_section

logger = logging.getLogger(__name__)

# Global engine (initialized on first use)
engine: Optional[ConfigEngine] = None

CHANGE_INPUT_DOCS_URI = "l2craft://docs/change-input"

CHANGE_INPUT_DOCS = """\
# Change input syntax

Declare VLAN names first; every VLAN added to an interface must be named
here unless the interface already carries it.

    vlan database
      vlan 300 name servers
      vlan 301 name storage

Add, remove or clear trunk VLANs per interface. Lists accept ranges.

    interface FortyGigE0/0/0/46
      description To:server1
      switchport mode trunk
      switchport trunk allowed vlan add 300-301
      switchport trunk allowed vlan remove 200

`switchport trunk allowed vlan none` removes every VLAN configured before it.
Any other line (mtu, shutdown, ...) is passed through to the interface.

Attach a BVI to bridge-domain VLAN300 (the number selects the domain):

    interface BVI300
      ipv4 address 192.0.2.1 255.255.255.0

Rules:
- Interfaces without a description in the base config need one here.
- Only trunk mode is supported; access mode is rejected.
- Bundle members cannot take VLANs; configure the Bundle-Ether instead.
"""


def get_engine() -> ConfigEngine:
    """Get or create the config engine."""
    global engine
    if engine is None:
        engine = ConfigEngine(load_settings())
    return engine


# Create MCP server
server = Server("l2craft")


# === TOOLS ===

@server.list_tools()
async def list_tools() -> list[Tool]:
    """List all available tools."""
    return [
        Tool(
            name="parse_config",
            description="Parse indented IOS-XR configuration text into a block/statement tree",
            inputSchema={
                "type": "object",
                "properties": {
                    "config": {
                        "type": "string",
                        "description": "Configuration text"
                    }
                },
                "required": ["config"]
            }
        ),
        Tool(
            name="analyze_config",
            description=(
                "Analyze a base configuration: bridge-domains, simplified "
                "switch-style view and lint findings"
            ),
            inputSchema={
                "type": "object",
                "properties": {
                    "config": {
                        "type": "string",
                        "description": "Base configuration text"
                    }
                },
                "required": ["config"]
            }
        ),
        Tool(
            name="generate_change_config",
            description=(
                f"Generate the commands that apply a change input to a base "
                f"configuration. See {CHANGE_INPUT_DOCS_URI} for the syntax."
            ),
            inputSchema={
                "type": "object",
                "properties": {
                    "base_config": {
                        "type": "string",
                        "description": "Base configuration text"
                    },
                    "change_input": {
                        "type": "string",
                        "description": "Change input (vlan database, interface blocks)"
                    },
                    "summary": {
                        "type": "boolean",
                        "description": "Return a human-readable plan summary instead of commands",
                        "default": False
                    }
                },
                "required": ["base_config", "change_input"]
            }
        ),
    ]


@server.call_tool()
async def call_tool(name: str, arguments: dict) -> list[TextContent]:
    """Handle tool calls."""
    async with timed_section(f"tool:{name}", subject="mcp"):
        try:
            eng = get_engine()

            if name == "parse_config":
                return await handle_parse_config(eng, arguments["config"])

            elif name == "analyze_config":
                return await handle_analyze_config(eng, arguments["config"])

            elif name == "generate_change_config":
                return await handle_generate_change_config(
                    eng,
                    arguments["base_config"],
                    arguments["change_input"],
                    arguments.get("summary", False)
                )

            else:
                return [TextContent(type="text", text=f"Unknown tool: {name}")]

        except Exception as e:
            logger.exception(f"Tool {name} failed")
            return [TextContent(type="text", text=f"Error: {str(e)}")]


# === TOOL HANDLERS ===

async def handle_parse_config(eng: ConfigEngine, config: str) -> list[TextContent]:
    """Parse configuration text."""
    nodes = eng.parse_config(config)

    return [TextContent(
        type="text",
        text=json.dumps([n.to_dict() for n in nodes], indent=2)
    )]


async def handle_analyze_config(eng: ConfigEngine, config: str) -> list[TextContent]:
    """Analyze a base configuration."""
    result = eng.analyze_config(config)

    return [TextContent(
        type="text",
        text=json.dumps(result.to_dict(), indent=2)
    )]


async def handle_generate_change_config(
    eng: ConfigEngine,
    base_config: str,
    change_input: str,
    summary: bool
) -> list[TextContent]:
    """
    Generate change commands.

    Validation errors are returned in the response, not raised, so the
    assistant can fix the change input and retry.
    """
    if summary:
        return [TextContent(type="text", text=eng.preview(base_config, change_input))]

    result = eng.apply(base_config, change_input)

    response = {
        "success": result.success,
        "change_output": result.change_output,
    }

    if result.error:
        response["error"] = result.error
        response["error_kind"] = result.error_kind
        response["error_line"] = result.error_line
    elif not result.change_output:
        response["message"] = "No changes needed - base config already matches change input"

    return [TextContent(
        type="text",
        text=json.dumps(response, indent=2)
    )]


# === RESOURCES ===

@server.list_resources()
async def list_resources() -> list[Resource]:
    """List available resources."""
    return [
        Resource(
            uri=AnyUrl(CHANGE_INPUT_DOCS_URI),
            name="Change input syntax",
            description="Statements accepted by generate_change_config, with examples",
            mimeType="text/markdown",
        )
    ]


@server.read_resource()
async def read_resource(uri: AnyUrl) -> str:
    """Read a resource."""
    if str(uri) == CHANGE_INPUT_DOCS_URI:
        return CHANGE_INPUT_DOCS

    return json.dumps({"error": f"Unknown resource: {uri}"})


def main():
    """Run the MCP server."""
    settings = load_settings()
    setup_logging(settings.log_level, settings.log_file)

    global engine
    engine = ConfigEngine(settings)

    async def run():
        async with stdio_server() as (read_stream, write_stream):
            await server.run(
                read_stream,
                write_stream,
                server.create_initialization_options()
            )

    try:
        asyncio.run(run())
    except KeyboardInterrupt:
        pass


if __name__ == "__main__":
    main()
