"""
Logging configuration for the Express MCP server.
Uses loguru for enhanced logging capabilities.
"""

import sys
from pathlib import Path
from loguru import logger

from express_mcp.config import ExpressConfig


def setup_logging(config: ExpressConfig, console: bool = True) -> None:
    """
    Configure logging for the server.

    Console output goes to stderr: stdout carries the MCP stdio stream.

    Args:
        config: Server configuration
        console: Whether to output to the console
    """

    # Remove default handler
    logger.remove()

    # Log format
    log_format = (
        "<green>{time:YYYY-MM-DD HH:mm:ss}</green> | "
        "<level>{level: <8}</level> | "
        "<cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> | "
        "<level>{message}</level>"
    )

    simple_format = "{time:YYYY-MM-DD HH:mm:ss} | {level: <8} | {name}:{function}:{line} | {message}"

    if console:
        logger.add(
            sys.stderr,
            format=log_format,
            level=config.log_level,
            colorize=True,
        )

    # File output
    if config.log_file:
        log_path = Path(config.log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)

        logger.add(
            str(log_path),
            format=simple_format,
            level=config.log_level,
            rotation="10 MB",
            retention="30 days",
            compression="zip",
            enqueue=True,  # Thread-safe
        )

    logger.info(f"Logging initialized - Level: {config.log_level}, File: {config.log_file or 'none'}")
