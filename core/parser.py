"""
Configuration file parsing.

Turns the text of a ``.envrc`` file into a variable mapping. The grammar is
restricted to ``[export ]KEY=VALUE`` lines; nothing is executed.
"""

import logging

from .constants import MAX_INTERPOLATION_DEPTH, VALID_VAR_NAME_PATTERN, VARIABLE_REFERENCE_PATTERN
from .exceptions import ValidationError
from .permissions.dangerous import is_dangerous_variable

logger = logging.getLogger(__name__)

EXPORT_PREFIX = "export "
QUOTE_CHARS = ('"', "'")


def strip_quotes(value: str) -> str:
    """Remove one layer of matching single or double quotes."""
    if len(value) >= 2 and value[0] in QUOTE_CHARS and value[-1] == value[0]:
        return value[1:-1]
    return value


def parse_line(line: str) -> tuple[str, str] | None:
    """
    Parse a single line into a key and raw value.

    Args:
        line: One line of configuration text

    Returns:
        (key, value) tuple, or None for blank, comment or malformed lines
    """
    stripped = line.strip()
    if not stripped or stripped.startswith("#"):
        return None

    if stripped.startswith(EXPORT_PREFIX):
        stripped = stripped[len(EXPORT_PREFIX):]

    key, sep, value = stripped.partition("=")
    if not sep:
        return None

    key = key.strip()
    if not VALID_VAR_NAME_PATTERN.match(key):
        return None

    return key, strip_quotes(value.strip())


def references(value: str) -> list[str]:
    """List the ${NAME} references in a value, in order of appearance."""
    return VARIABLE_REFERENCE_PATTERN.findall(value)


def _substitute(value: str, resolved: dict[str, str]) -> str:
    return VARIABLE_REFERENCE_PATTERN.sub(
        lambda match: resolved.get(match.group(1), match.group(0)),
        value,
    )


def interpolate(variables: dict[str, str], max_depth: int = MAX_INTERPOLATION_DEPTH) -> dict[str, str]:
    """
    Resolve ${NAME} references between variables of the same file.

    References to names that are not in the mapping are left verbatim.
    Resolution uses an explicit stack holding the current reference chain.
    Every chain is followed to its end before the depth limit is applied,
    so a cycle is always reported as a cycle, whatever its length.

    Args:
        variables: Raw variable mapping
        max_depth: Longest reference chain (in variables) that may be resolved

    Returns:
        New mapping with every known reference substituted

    Raises:
        ValidationError: On a circular reference or a chain longer than max_depth
    """
    known = {
        name: [ref for ref in references(value) if ref in variables]
        for name, value in variables.items()
    }
    # Length of the longest chain starting at each variable
    heights: dict[str, int] = {}
    # Variables in dependency order, references before their users
    order: list[str] = []

    for name in variables:
        if name in heights:
            continue

        # The chain holds distinct names, so it never grows past len(variables)
        chain = [name]
        while chain:
            current = chain[-1]
            pending = next((ref for ref in known[current] if ref not in heights), None)

            if pending is None:
                heights[current] = 1 + max((heights[ref] for ref in known[current]), default=0)
                order.append(current)
                chain.pop()
                continue

            if pending in chain:
                cycle = " -> ".join(chain + [pending])
                raise ValidationError(f"Circular variable reference detected: {cycle}")

            chain.append(pending)

    deepest = max(heights, key=heights.__getitem__, default=None)
    if deepest is not None and heights[deepest] > max_depth:
        raise ValidationError(
            f"Variable interpolation exceeds maximum depth of {max_depth}: "
            f"{' -> '.join(_longest_chain(deepest, known, heights))}"
        )

    resolved: dict[str, str] = {}
    for name in order:
        resolved[name] = _substitute(variables[name], resolved)

    return {name: resolved[name] for name in variables}


def _longest_chain(start: str, known: dict[str, list[str]], heights: dict[str, int]) -> list[str]:
    chain = [start]
    while heights[chain[-1]] > 1:
        current = chain[-1]
        chain.append(next(ref for ref in known[current] if heights[ref] == heights[current] - 1))
    return chain


def parse_config(
    content: str,
    source: str | None = None,
    max_depth: int = MAX_INTERPOLATION_DEPTH,
) -> dict[str, str]:
    """
    Parse configuration text into a variable mapping.

    Dangerous variables are dropped with a single warning per call. Later
    definitions of the same key overwrite earlier ones.

    Args:
        content: Configuration file text
        source: Where the text came from, used in warnings
        max_depth: Longest interpolation chain that may be resolved

    Returns:
        Mapping of variable name to interpolated value

    Raises:
        ValidationError: On circular or too deep interpolation
    """
    variables: dict[str, str] = {}
    dangerous: list[str] = []

    for line in content.splitlines():
        parsed = parse_line(line)
        if parsed is None:
            continue

        key, value = parsed
        if is_dangerous_variable(key):
            if key not in dangerous:
                dangerous.append(key)
            continue
        variables[key] = value

    if dangerous:
        logger.warning(
            "%s contains restricted variables and they were ignored: %s",
            source or "configuration",
            ", ".join(dangerous),
        )

    return interpolate(variables, max_depth)
