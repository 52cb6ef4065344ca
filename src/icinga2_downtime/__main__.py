"""Main entry point for the Icinga2 downtime MCP server."""

import asyncio
import logging
import sys

from mcp.server.stdio import stdio_server

from .client import PreconditionError
from .credentials import load_endpoint
from .server import app

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    stream=sys.stderr,
)

logger = logging.getLogger(__name__)


async def main():
    """Run the MCP server using stdio transport."""
    logger.info("Starting Icinga2 downtime MCP server...")

    try:
        endpoint = load_endpoint()
        logger.info(f"Using Icinga2 API at {endpoint.base_url} as {endpoint.username}")
    except PreconditionError as e:
        # The record is re-read on every tool call, so it can still be added later
        logger.warning(str(e))

    try:
        async with stdio_server() as (read_stream, write_stream):
            await app.run(
                read_stream,
                write_stream,
                app.create_initialization_options(),
            )
    except Exception as e:
        logger.error(f"Server error: {e}", exc_info=True)
        sys.exit(1)


def run():
    """Console script entry point."""
    asyncio.run(main())


if __name__ == "__main__":
    run()
