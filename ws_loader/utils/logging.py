"""
Logging utilities for ws-loader.

This module provides logging configuration and helper functions for tracing
a single request/response exchange.
"""

import logging
from typing import List, Optional

from rich.console import Console
from rich.logging import RichHandler

LOGGER_NAME = 'ws_loader'
BODY_PREVIEW_SIZE = 1024


def setup_logging(
    level: int = logging.INFO,
    log_file: Optional[str] = None,
    verbose: bool = False,
) -> logging.Logger:
    """Set up logging for the application.

    Args:
        level: Logging level (e.g., logging.INFO, logging.DEBUG)
        log_file: Optional file path to write logs to
        verbose: Whether to enable verbose logging

    Returns:
        Configured logger
    """
    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(logging.DEBUG if verbose else level)

    # Remove existing handlers
    for handler in logger.handlers[:]:
        logger.removeHandler(handler)

    console = Console(stderr=True)
    console_handler = RichHandler(
        console=console,
        show_path=True,
        show_time=True,
        markup=False,
        rich_tracebacks=True,
    )
    console_handler.setLevel(logging.DEBUG if verbose else level)
    console_handler.setFormatter(logging.Formatter('%(message)s', datefmt='%Y-%m-%d %H:%M:%S'))
    logger.addHandler(console_handler)

    if log_file:
        file_handler = logging.FileHandler(log_file)
        file_handler.setFormatter(logging.Formatter(
            '%(asctime)s - %(name)s - %(filename)s:%(lineno)d - %(levelname)s - %(message)s',
            datefmt='%Y-%m-%d %H:%M:%S'
        ))
        file_handler.setLevel(logging.DEBUG)
        logger.addHandler(file_handler)

    return logger


def get_logger() -> logging.Logger:
    """Get the application logger."""
    return logging.getLogger(LOGGER_NAME)


def _preview(body: bytes) -> str:
    body_text = body.decode('utf-8', errors='replace')
    if len(body_text) > BODY_PREVIEW_SIZE:
        return f"{body_text[:BODY_PREVIEW_SIZE]}... ({len(body)} bytes)"
    return body_text


def log_request(
    logger: logging.Logger,
    method: str,
    url: str,
    headers: List[str],
    body: Optional[bytes] = None,
) -> None:
    """Log an outgoing HTTP request.

    Args:
        logger: Logger to use
        method: HTTP method
        url: Target URL
        headers: Formatted ``Name: Value`` header lines
        body: Request body
    """
    if not logger.isEnabledFor(logging.DEBUG):
        return

    logger.debug(f"Sending {method} request to {url}")
    for line in headers:
        logger.debug(f"  {line}")

    if body:
        logger.debug(f"  Body: {_preview(body)}")


def log_response(
    logger: logging.Logger,
    status_code: int,
    headers: list,
    body: bytes,
    response_time: float,
) -> None:
    """Log an HTTP response.

    Args:
        logger: Logger to use
        status_code: Response status code
        headers: Response headers as (name, value) tuples
        body: Response body
        response_time: Response time in seconds
    """
    if not logger.isEnabledFor(logging.DEBUG):
        return

    logger.debug(f"Received response: {status_code} ({response_time:.6f}s)")
    for name, value in headers:
        logger.debug(f"  {name}: {value}")
    logger.debug(f"  Body: {_preview(body)}")
