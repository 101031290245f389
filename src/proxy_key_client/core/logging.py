"""
Centralized logging configuration for proxy-key-client.

This module provides a consistent logging setup across all components
with support for TRACE level logging.
"""

import logging
import os
import sys
from typing import Optional

# Define TRACE level (below DEBUG)
TRACE_LEVEL = 5

def add_trace_level():
    """Add TRACE level to logging module."""
    logging.addLevelName(TRACE_LEVEL, "TRACE")
    
    def trace(self, message, *args, **kwargs):
        if self.isEnabledFor(TRACE_LEVEL):
            self._log(TRACE_LEVEL, message, args, **kwargs)
    
    logging.Logger.trace = trace

# Add TRACE level on module import
add_trace_level()

def resolve_level(level: Optional[str] = None, debug: bool = False) -> int:
    """
    Turn a level name into a numeric logging level.
    
    Args:
        level: Log level string (TRACE, DEBUG, INFO, WARNING, ERROR, CRITICAL)
        debug: If True, returns TRACE regardless of other settings
        
    Returns:
        Numeric log level
    """
    if debug:
        return TRACE_LEVEL
    name = (level or os.getenv("LOG_LEVEL", "WARNING")).upper()
    if name == "TRACE":
        return TRACE_LEVEL
    return getattr(logging, name, logging.WARNING)

def setup_logging(level: Optional[str] = None, debug: bool = False) -> None:
    """
    Configure logging for the command line.
    
    Args:
        level: Log level string (TRACE, DEBUG, INFO, WARNING, ERROR, CRITICAL)
        debug: If True, sets level to TRACE regardless of other settings
    """
    log_level = resolve_level(level, debug)
    
    logging.basicConfig(
        level=log_level,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        datefmt='%Y-%m-%d %H:%M:%S',
        handlers=[
            logging.StreamHandler(sys.stderr)
        ]
    )
    
    logging.getLogger("proxy_key_client").setLevel(log_level)
    
    # The access URL embeds the API secret; keep transport request lines out of the logs
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)

def get_logger(name: str) -> logging.Logger:
    """
    Get a logger instance for the given module name.
    
    Args:
        name: Name of the module/component
        
    Returns:
        Configured logger instance
    """
    return logging.getLogger(f"proxy_key_client.{name}")
