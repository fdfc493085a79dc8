"""Output formats for variable mappings and variable diffs."""

import json
import re
from dataclasses import dataclass, field

import yaml

from core.validation import sanitize_output

# ANSI colors for diff output
GREEN = "\x1b[32m"
RED = "\x1b[31m"
YELLOW = "\x1b[33m"
GRAY = "\x1b[90m"
BOLD = "\x1b[1m"
RESET = "\x1b[0m"

MAX_DIFF_VALUE_LENGTH = 50

_DOTENV_NEEDS_QUOTES = re.compile(r"[\s\"'$\\#]")


def shell_single_quote(value: str) -> str:
    """Quote a value for POSIX shells using single quotes."""
    return "'" + value.replace("'", "'\\''") + "'"


def format_dotenv(variables: dict[str, str]) -> str:
    """Format variables as KEY=VALUE lines, double-quoting where needed."""
    lines = []
    for key, value in variables.items():
        if _DOTENV_NEEDS_QUOTES.search(value):
            escaped = value.replace("\\", "\\\\").replace('"', '\\"').replace("$", "\\$")
            value = f'"{escaped}"'
        lines.append(f"{key}={value}")
    return "".join(line + "\n" for line in lines)


def format_json(variables: dict[str, str]) -> str:
    return json.dumps(variables, indent=2, ensure_ascii=False) + "\n"


def format_yaml(variables: dict[str, str]) -> str:
    if not variables:
        return ""
    return yaml.safe_dump(variables, default_flow_style=False, sort_keys=False, allow_unicode=True)


def format_shell(variables: dict[str, str]) -> str:
    """Format variables as export statements safe to eval."""
    return "".join(f"export {key}={shell_single_quote(value)}\n" for key, value in variables.items())


def format_envrc(variables: dict[str, str]) -> str:
    """
    Format variables as .envrc content the parser reads back unchanged.

    Values with whitespace or quotes are wrapped in whichever quote character
    they do not contain; the parser strips exactly one layer.
    """
    lines = []
    for key, value in variables.items():
        if value != value.strip() or re.search(r"[\s\"'#]", value):
            quote = "'" if '"' in value else '"'
            value = f"{quote}{value}{quote}"
        lines.append(f"{key}={value}")
    return "".join(line + "\n" for line in lines)


EXPORT_FORMATS = {
    "dotenv": format_dotenv,
    "json": format_json,
    "yaml": format_yaml,
    "shell": format_shell,
}


@dataclass
class VariableDiff:
    """Differences between two variable mappings."""

    added: dict[str, str] = field(default_factory=dict)
    removed: dict[str, str] = field(default_factory=dict)
    modified: dict[str, tuple[str, str]] = field(default_factory=dict)
    unchanged: dict[str, str] = field(default_factory=dict)

    @property
    def total_changes(self) -> int:
        return len(self.added) + len(self.removed) + len(self.modified)


def compare_variables(before: dict[str, str], after: dict[str, str]) -> VariableDiff:
    """
    Compare two variable mappings.

    Args:
        before: Original mapping
        after: New mapping

    Returns:
        VariableDiff describing the change from before to after
    """
    diff = VariableDiff()
    for key, value in before.items():
        if key not in after:
            diff.removed[key] = value
        elif after[key] != value:
            diff.modified[key] = (value, after[key])
        else:
            diff.unchanged[key] = value

    for key, value in after.items():
        if key not in before:
            diff.added[key] = value

    return diff


def _display(value: str) -> str:
    value = sanitize_output(value)
    if len(value) > MAX_DIFF_VALUE_LENGTH:
        return f'"{value[:MAX_DIFF_VALUE_LENGTH - 3]}..."'
    return f'"{value}"'


def format_diff(diff: VariableDiff, color: bool = True, show_unchanged: bool = False) -> str:
    """Render a diff with optional ANSI colors."""

    def paint(text: str, *codes: str) -> str:
        return "".join(codes) + text + RESET if color else text

    lines: list[str] = []

    if diff.added:
        lines.append(paint("Added variables:", GREEN, BOLD))
        lines.extend(paint(f"+ {key}={_display(value)}", GREEN) for key, value in diff.added.items())
        lines.append("")

    if diff.removed:
        lines.append(paint("Removed variables:", RED, BOLD))
        lines.extend(paint(f"- {key}={_display(value)}", RED) for key, value in diff.removed.items())
        lines.append("")

    if diff.modified:
        lines.append(paint("Modified variables:", YELLOW, BOLD))
        for key, (old, new) in diff.modified.items():
            lines.append(paint(f"~ {key}", YELLOW))
            lines.append(paint(f"  - {_display(old)}", RED))
            lines.append(paint(f"  + {_display(new)}", GREEN))
        lines.append("")

    if show_unchanged and diff.unchanged:
        lines.append(paint("Unchanged variables:", GRAY, BOLD))
        lines.extend(paint(f"  {key}={_display(value)}", GRAY) for key, value in diff.unchanged.items())
        lines.append("")

    return "\n".join(lines)


def format_diff_summary(diff: VariableDiff, color: bool = True) -> str:
    """Render the added/removed/modified counts of a diff."""

    def paint(text: str, *codes: str) -> str:
        return "".join(codes) + text + RESET if color else text

    lines = [paint("Summary:", BOLD)]
    if diff.added:
        lines.append(paint(f"  {len(diff.added)} added", GREEN))
    if diff.removed:
        lines.append(paint(f"  {len(diff.removed)} removed", RED))
    if diff.modified:
        lines.append(paint(f"  {len(diff.modified)} modified", YELLOW))
    if not diff.total_changes:
        lines.append(paint("  No changes", GRAY))
    return "\n".join(lines)
