"""
JSON Output Formatter for the modelprops CLI

Produces the machine-readable envelope printed when ``--json`` is used.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any

import orjson


def format_json_output(
    success: bool,
    command: str,
    data: Any | None = None,
    errors: list[dict[str, Any]] | None = None,
) -> bytes:
    """
    Format command output as JSON.

    Args:
        success: Whether the command executed successfully
        command: The command name (e.g., "check", "types")
        data: The command's output data
        errors: Error or validation issue entries

    Returns:
        JSON-encoded bytes ready for output

    Example:
        >>> output = format_json_output(True, "types", data={"types": ["string"]})
        >>> print(output.decode())
        {
          "command": "types",
          "data": {
            "types": [
              "string"
            ]
          },
          "errors": [],
          "success": true,
          "timestamp": "2026-01-01T10:30:00+00:00"
        }
    """
    if errors is None:
        errors = []

    if errors:
        success = False

    json_data = {
        "success": success,
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "command": command,
        "data": data,
        "errors": errors,
    }

    return orjson.dumps(
        json_data,
        default=str,
        option=orjson.OPT_SORT_KEYS | orjson.OPT_INDENT_2,
    )
