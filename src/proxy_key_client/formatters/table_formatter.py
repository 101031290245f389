"""Table output formatter using rich."""

from typing import Any, Dict, List, Optional
from rich.console import Console
from rich.table import Table
from io import StringIO
from .base import OutputFormatter

# Column key, header, justification
KEY_COLUMNS = [
    ('id', 'ID', 'right'),
    ('name', 'Name', 'left'),
    ('port', 'Port', 'right'),
    ('cipher', 'Cipher', 'left'),
    ('bytes_used', 'Used', 'right'),
    ('data_limit_bytes', 'Limit', 'right'),
    ('access_uri', 'Access URI', 'left'),
]


def format_bytes(value: Optional[int]) -> str:
    """Render a byte count in binary units, '-' when absent."""
    if value is None:
        return '-'
    size = float(value)
    for unit in ('B', 'KiB', 'MiB', 'GiB', 'TiB'):
        if size < 1024 or unit == 'TiB':
            return f"{int(size)} {unit}" if unit == 'B' else f"{size:.1f} {unit}"
        size /= 1024
    return str(value)


class TableFormatter(OutputFormatter):
    """Format access keys as a rich table."""
    
    def format(self, data: Any, **kwargs) -> str:
        """Format data as a table.
        
        Args:
            data: Key dictionary or list of them
            **kwargs: Options including:
                - title: Table title
                - show_uri: Include the access URI column (default: False)
                - width: Render width (default: 160)
        
        Returns:
            Table formatted string
        """
        rows: List[Dict[str, Any]] = [data] if isinstance(data, dict) else list(data)
        if not rows:
            return "No access keys"
        
        columns = [c for c in KEY_COLUMNS if c[0] != 'access_uri' or kwargs.get('show_uri', False)]
        
        table = Table(title=kwargs.get('title'), show_header=True, header_style='bold cyan')
        for _, header, justify in columns:
            table.add_column(header, justify=justify)
        
        for row in rows:
            cells = []
            for key, _, _ in columns:
                value = row.get(key)
                if key in ('bytes_used', 'data_limit_bytes'):
                    cells.append(format_bytes(value))
                else:
                    cells.append('' if value is None else str(value))
            table.add_row(*cells)
        
        buffer = StringIO()
        console = Console(file=buffer, force_terminal=False, width=kwargs.get('width', 160))
        console.print(table)
        return buffer.getvalue().rstrip('\n')
