"""JSON output formatter."""

import json
from typing import Any
from .base import OutputFormatter


class JSONFormatter(OutputFormatter):
    """Format output as JSON."""
    
    def format(self, data: Any, **kwargs) -> str:
        """Format data as JSON.
        
        Args:
            data: Data to format
            **kwargs: Options including:
                - indent: Indentation level (default: 2)
                - compact: Compact output without indentation (default: False)
        
        Returns:
            JSON formatted string
        """
        indent = None if kwargs.get('compact', False) else kwargs.get('indent', 2)
        
        return json.dumps(data, indent=indent, ensure_ascii=False)
