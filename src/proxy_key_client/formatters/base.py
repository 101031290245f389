"""Base formatter classes and registry."""

import sys
from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional


class OutputFormatter(ABC):
    """Abstract base class for output formatters."""
    
    @abstractmethod
    def format(self, data: Any, **kwargs) -> str:
        """Format data for output.
        
        Args:
            data: Data to format
            **kwargs: Formatter-specific options
        
        Returns:
            Formatted string
        """
        pass


class FormatterRegistry:
    """Registry for output formatters."""
    
    def __init__(self):
        """Initialize formatter registry."""
        self.formatters: Dict[str, OutputFormatter] = {}
    
    def register(self, name: str, formatter: OutputFormatter):
        """Register a formatter.
        
        Args:
            name: Formatter name
            formatter: Formatter instance
        """
        self.formatters[name] = formatter
    
    def get(self, name: str) -> Optional[OutputFormatter]:
        """Get a formatter by name."""
        return self.formatters.get(name)
    
    def format(self, data: Any, format_type: str = 'auto', **kwargs) -> str:
        """Format data using specified formatter.
        
        Args:
            data: Data to format
            format_type: Formatter to use ('auto' for automatic selection)
            **kwargs: Formatter-specific options
        
        Returns:
            Formatted string
        
        Raises:
            ValueError: If formatter not found
        """
        if format_type == 'auto':
            # Tables for people, JSON for pipes
            format_type = 'table' if sys.stdout.isatty() else 'json'
        
        formatter = self.get(format_type)
        if not formatter:
            raise ValueError(f"Unknown format type: {format_type}")
        
        return formatter.format(data, **kwargs)
    
    def list_formats(self) -> List[str]:
        """Get list of available formats."""
        return list(self.formatters.keys())
