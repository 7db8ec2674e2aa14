"""
Logging utilities for the snapshot pipeline.

Provides colorful CLI logging using the rich library.
"""

import logging
from typing import Optional

from rich.console import Console
from rich.logging import RichHandler


# Global console instance
console = Console(stderr=True)

# Logger instances cache
_loggers: dict = {}

# Level applied to loggers created after setup_logger() was called
_default_level = logging.INFO


def setup_logger(
    name: str = "dom_snapshot",
    level: int = logging.INFO,
    log_file: Optional[str] = None
) -> logging.Logger:
    """
    Set up and configure a logger with rich formatting.
    
    Args:
        name: Logger name
        level: Logging level (default: INFO)
        log_file: Optional file path to write logs
        
    Returns:
        Configured logger instance
    """
    global _default_level
    _default_level = level

    logger = logging.getLogger(name)
    logger.setLevel(level)
    
    # Clear existing handlers
    logger.handlers.clear()
    
    console_handler = RichHandler(
        console=console,
        show_time=True,
        show_path=False,
        markup=False,
        rich_tracebacks=True
    )
    console_handler.setFormatter(logging.Formatter("%(message)s"))
    console_handler.setLevel(level)
    logger.addHandler(console_handler)
    
    # File handler if specified
    if log_file:
        file_handler = logging.FileHandler(log_file, encoding="utf-8")
        file_handler.setFormatter(
            logging.Formatter("%(asctime)s - %(name)s - %(levelname)s - %(message)s")
        )
        file_handler.setLevel(level)
        logger.addHandler(file_handler)
    
    _loggers[name] = logger

    # Re-level component loggers that already exist
    for other_name, other in _loggers.items():
        if other_name.startswith(f"{name}."):
            other.setLevel(level)

    return logger


def get_logger(name: str = "dom_snapshot") -> logging.Logger:
    """
    Get a component logger.

    Component names are nested under the package logger, so they share
    the handlers installed by setup_logger().
    
    Args:
        name: Component name (e.g. "image")
        
    Returns:
        Logger instance
    """
    if name != "dom_snapshot" and not name.startswith("dom_snapshot."):
        name = f"dom_snapshot.{name}"
    if name not in _loggers:
        logger = logging.getLogger(name)
        logger.setLevel(_default_level)
        _loggers[name] = logger
    return _loggers[name]


def print_status(message: str, style: str = "bold blue") -> None:
    """
    Print a styled status message.
    
    Args:
        message: Message to print
        style: Rich style string
    """
    console.print(f"[{style}]{message}[/{style}]")


def print_error(message: str) -> None:
    """Print an error message."""
    print_status(f"❌ {message}", "bold red")


def print_success(message: str) -> None:
    """Print a success message."""
    print_status(f"✅ {message}", "bold green")


def print_warning(message: str) -> None:
    """Print a warning message."""
    print_status(f"⚠️ {message}", "bold yellow")


def print_info(message: str) -> None:
    """Print an info message."""
    print_status(f"ℹ️ {message}", "bold cyan")
