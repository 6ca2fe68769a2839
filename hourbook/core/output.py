"""
Output formatters for CLI display.

Supports human-readable, JSON, and markdown output modes. Nested mappings
(per-member figures) render as one indented block per key.
"""

import json
from dataclasses import asdict, is_dataclass
from enum import Enum
from typing import Any, Dict, List, Optional


class OutputFormat(str, Enum):
    HUMAN = "human"
    JSON = "json"
    MARKDOWN = "markdown"


def format_result(
    result: Any,
    fmt: OutputFormat = OutputFormat.HUMAN,
    title: Optional[str] = None,
) -> str:
    """Format a result object for display."""
    if fmt == OutputFormat.JSON:
        return json.dumps(to_plain(result), indent=2, default=str)
    if fmt == OutputFormat.MARKDOWN:
        return _format_markdown(result, title)
    return _format_human(result, title)


def to_plain(value: Any) -> Any:
    """Dataclasses, enums and mappings down to JSON-friendly values."""
    if is_dataclass(value) and not isinstance(value, type):
        return to_plain(asdict(value))
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, dict):
        return {str(k): to_plain(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [to_plain(v) for v in value]
    return value


def _label(key: str) -> str:
    return str(key).replace("_", " ").title()


def _scalar(value: Any) -> str:
    if value is None:
        return "-"
    if isinstance(value, float):
        return f"{value:,.2f}"
    return str(value)


def _rows(result: Any) -> Dict[str, Any]:
    data = to_plain(result)
    if not isinstance(data, dict):
        return {"value": data}
    return data


def _format_human(result: Any, title: Optional[str] = None) -> str:
    lines: List[str] = []
    if title:
        lines.extend([title, "=" * len(title), ""])

    data = _rows(result)
    width = max((len(_label(k)) for k in data), default=0)

    for key, value in data.items():
        if isinstance(value, dict):
            lines.append(f"{_label(key)}:")
            if not value:
                lines.append("  (none)")
            for sub_key, sub_value in value.items():
                if isinstance(sub_value, dict):
                    inner = ", ".join(f"{k}={_scalar(v)}" for k, v in sub_value.items())
                    lines.append(f"  {sub_key}: {inner}")
                else:
                    lines.append(f"  {sub_key}: {_scalar(sub_value)}")
        elif isinstance(value, list):
            lines.append(f"{_label(key)}:")
            lines.extend(f"  - {v}" for v in value) if value else lines.append("  (none)")
        else:
            lines.append(f"{_label(key):<{width + 2}}: {_scalar(value)}")

    return "\n".join(lines)


def _format_markdown(result: Any, title: Optional[str] = None) -> str:
    lines: List[str] = []
    if title:
        lines.extend([f"# {title}", ""])

    data = _rows(result)
    lines.extend(["| Field | Value |", "|-------|-------|"])
    for key, value in data.items():
        if isinstance(value, dict):
            formatted = "; ".join(f"{k}: {_scalar(v)}" for k, v in value.items()) or "-"
        elif isinstance(value, list):
            formatted = ", ".join(str(v) for v in value) or "-"
        else:
            formatted = _scalar(value)
        lines.append(f"| {_label(key)} | {formatted} |")

    return "\n".join(lines)
