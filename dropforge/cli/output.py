"""
DropForge - CLI Output Formatting

Renders command results as tables (via tabulate), JSON or YAML.
"""

import json
from enum import Enum
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml
from tabulate import tabulate

OUTPUT_FORMATS = ['table', 'json', 'yaml']


class OutputFormatter:
    """Output formatter for CLI results."""

    def __init__(self, format_type: str = 'table'):
        """
        Initialize output formatter.

        Args:
            format_type: Output format (table, json, yaml)
        """
        if format_type not in OUTPUT_FORMATS:
            raise ValueError(f"Unknown output format: {format_type}")
        self.format_type = format_type

    def format(self, data: Any, headers: Optional[List[str]] = None) -> str:
        """Format data according to the configured format type."""
        if self.format_type == 'json':
            return self.format_json(data)
        elif self.format_type == 'yaml':
            return self.format_yaml(data)
        else:
            return self.format_table(data, headers)

    def format_json(self, data: Any) -> str:
        return json.dumps(data, indent=2, default=self._json_encoder)

    def format_yaml(self, data: Any) -> str:
        # Round-trip through JSON so enums and paths become plain scalars
        plain = json.loads(self.format_json(data))
        return yaml.safe_dump(plain, default_flow_style=False, sort_keys=False).rstrip()

    def format_table(self, data: Any, headers: Optional[List[str]] = None) -> str:
        """Format data as a table."""
        if isinstance(data, dict):
            return self._format_dict_table(data)
        elif isinstance(data, list):
            return self._format_list_table(data, headers)
        else:
            return str(data)

    def _format_dict_table(self, data: Dict[str, Any]) -> str:
        """Format dictionary as a key-value table."""
        table_data = [[key, self._format_value(value)] for key, value in data.items()]
        return tabulate(table_data, tablefmt='plain')

    def _format_list_table(self, data: List[Any], headers: Optional[List[str]] = None) -> str:
        """Format list as a table."""
        if not data:
            return "No data available"

        if not isinstance(data[0], dict):
            return '\n'.join(str(item) for item in data)

        if headers is None:
            headers = list(data[0].keys())

        table_data = [[self._format_value(item.get(h, '')) for h in headers] for item in data]
        return tabulate(table_data, headers=headers, tablefmt='grid')

    def _format_value(self, value: Any) -> str:
        """Format individual value for display."""
        if value is None:
            return '-'
        elif isinstance(value, bool):
            return 'yes' if value else 'no'
        elif isinstance(value, Enum):
            return str(value.value)
        elif isinstance(value, dict):
            return f"<{len(value)} items>"
        elif isinstance(value, list):
            return f"[{len(value)} items]"
        return str(value)

    def _json_encoder(self, obj):
        """Custom JSON encoder for special types."""
        if isinstance(obj, Enum):
            return obj.value
        elif isinstance(obj, Path):
            return str(obj)
        elif hasattr(obj, 'to_dict'):
            return obj.to_dict()
        return str(obj)
