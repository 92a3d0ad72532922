"""
MCP server exposing the express tools over stdio.

Tools:
- query_express: real-time tracking for one shipment
- compare_price: price comparison across the configured carriers
"""

import asyncio
from typing import Any, Optional

import click
import mcp.types as types
import orjson
from loguru import logger
from mcp.server.lowlevel import Server
from mcp.server.stdio import stdio_server

from express_mcp import __version__
from express_mcp.config import ExpressConfig, load_config
from express_mcp.express_client import ExpressClient
from express_mcp.logging_config import setup_logging
from express_mcp.models import ErrorKind, ExpressError


SERVER_NAME = "mcp-server-express"

TOOLS = [
    types.Tool(
        name="query_express",
        description="实时查询快递物流信息",
        inputSchema={
            "type": "object",
            "properties": {
                "com": {"type": "string", "description": "快递公司名称或快递编码"},
                "num": {"type": "string", "description": "快递单号"},
            },
            "required": ["com", "num"],
        },
    ),
    types.Tool(
        name="compare_price",
        description="查询多个快递公司快递价格",
        inputSchema={
            "type": "object",
            "properties": {
                "weight": {"type": "number", "description": "重量"},
                "length": {"type": "number", "description": "长度"},
                "width": {"type": "number", "description": "宽度"},
                "height": {"type": "number", "description": "高度"},
                "from": {"type": "string", "description": "出发地"},
                "to": {"type": "string", "description": "目的地"},
            },
            "required": ["from", "to"],
        },
    ),
]


def _required_argument(arguments: dict[str, Any], name: str, message: str) -> str:
    value = arguments.get(name)
    if value is None or not str(value).strip():
        raise ExpressError(ErrorKind.INVALID_ARGUMENT, message)
    return str(value)


async def handle_query_express(client: ExpressClient, arguments: dict[str, Any]) -> str:
    """Run query_express and render the tracking payload as text."""
    com = _required_argument(arguments, "com", "请输入快递公司名称或编码")
    num = _required_argument(arguments, "num", "请输入快递单号")

    result = (await client.query(com, num)).unwrap()
    return f"实时查询快递成功： {orjson.dumps(result).decode('utf-8')}"


async def handle_compare_price(client: ExpressClient, arguments: dict[str, Any]) -> str:
    """Run compare_price and render the ranked quotes as pretty-printed JSON."""
    origin = _required_argument(arguments, "from", "请输入出发地")
    destination = _required_argument(arguments, "to", "请输入目的地")

    comparison = (
        await client.compare_price(
            arguments.get("weight"),
            arguments.get("length"),
            arguments.get("width"),
            arguments.get("height"),
            origin=origin,
            destination=destination,
        )
    ).unwrap()

    body = orjson.dumps(comparison.model_dump(mode="json")["quotes"], option=orjson.OPT_INDENT_2)
    return f"快递价格比对结果：{body.decode('utf-8')}"


HANDLERS = {
    "query_express": handle_query_express,
    "compare_price": handle_compare_price,
}


def create_server(client: ExpressClient) -> Server:
    """Build the MCP server bound to one ExpressClient."""
    server = Server(SERVER_NAME, version=__version__)

    @server.list_tools()
    async def list_tools() -> list[types.Tool]:
        return TOOLS

    @server.call_tool()
    async def call_tool(name: str, arguments: Optional[dict[str, Any]]) -> list[types.TextContent]:
        handler = HANDLERS.get(name)
        if handler is None:
            raise ValueError(f"Unknown tool: {name}")

        try:
            text = await handler(client, arguments or {})
        except ExpressError as e:
            logger.warning(f"Tool {name} failed: {e.kind.value} - {e.message}")
            raise ValueError(e.message) from e

        return [types.TextContent(type="text", text=text)]

    return server


async def run_server(config: ExpressConfig):
    """Serve the tools over stdio until the client disconnects."""
    async with ExpressClient(config) as client:
        server = create_server(client)
        async with stdio_server() as (read_stream, write_stream):
            logger.info(f"{SERVER_NAME} v{__version__} listening on stdio")
            await server.run(read_stream, write_stream, server.create_initialization_options())


def prepare_runtime(config: ExpressConfig):
    """Set up logging and reject invalid configuration before any client is built."""
    setup_logging(config, console=True)

    for problem in config.validate():
        if problem.startswith("Warning:"):
            logger.warning(problem)
        else:
            logger.error(f"Config error: {problem}")
            raise click.ClickException(problem)


def serve(config: ExpressConfig):
    """Validate config, set up logging and run the server (blocking)."""
    prepare_runtime(config)

    try:
        asyncio.run(run_server(config))
    except KeyboardInterrupt:
        logger.info("Keyboard interrupt received")


@click.command()
@click.option("--auth_key", default=None, help="Upstream auth key (EXPRESS_AUTH_KEY)")
@click.option("--customer", default=None, help="Upstream customer id (EXPRESS_CUSTOMER)")
@click.option("--config", "-c", "config_file", type=click.Path(exists=True), help="Path to configuration file")
def main(auth_key, customer, config_file):
    """Run the express MCP server on stdio."""
    serve(load_config(config_file, auth_key=auth_key, customer=customer))


if __name__ == "__main__":
    main()
