"""YAML output formatter."""

import yaml
from typing import Any
from .base import OutputFormatter


class YAMLFormatter(OutputFormatter):
    """Format output as YAML."""
    
    def format(self, data: Any, **kwargs) -> str:
        """Format data as YAML, keeping field order."""
        return yaml.safe_dump(
            data,
            default_flow_style=False,
            indent=kwargs.get('indent', 2),
            sort_keys=False,
            allow_unicode=True
        )
