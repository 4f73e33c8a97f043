"""
Variable Resolver - {{name}} template interpolation

Rendering is best-effort: placeholders whose name is not in the mapping are
left verbatim. Text inside braces may be padded with whitespace
({{ topic }}). Sequences that are not a single well-formed pair of double
braces around a name are not placeholders and stay untouched.
"""

import re
import logging
from typing import Any, Dict, Iterator, List, Mapping, Optional

logger = logging.getLogger(__name__)

# Non-greedy, single pair of braces, no braces inside the name
PLACEHOLDER_PATTERN = re.compile(r'\{\{\s*([^{}]+?)\s*\}\}')

STEP_OUTPUT_KEY = 'step_{position}_output'


def render(template: str, variables: Mapping[str, Any]) -> str:
    """
    Replace every {{key}} in template with variables[key].

    Examples:
        render('Summarize: {{topic}}', {'topic': 'cats'}) -> 'Summarize: cats'
        render('Hi {{name}}', {}) -> 'Hi {{name}}'
    """
    if not template:
        return template or ''

    def replace_var(match):
        name = match.group(1)
        if name in variables:
            value = variables[name]
            return '' if value is None else str(value)
        return match.group(0)

    return PLACEHOLDER_PATTERN.sub(replace_var, template)


def find_placeholders(template: str) -> List[str]:
    """Placeholder names in template, in order of first appearance"""
    names = []
    for match in PLACEHOLDER_PATTERN.finditer(template or ''):
        name = match.group(1)
        if name not in names:
            names.append(name)
    return names


def step_output_key(position: int) -> str:
    """Variable name holding the output of the step at 1-based position"""
    return STEP_OUTPUT_KEY.format(position=position)


class VariableSet(Mapping):
    """
    Immutable variable mapping threaded through a flow run.

    Values only accumulate: with_value() returns a new set and refuses to
    rebind an existing key.
    """

    def __init__(self, values: Optional[Mapping[str, Any]] = None):
        self._values: Dict[str, str] = {
            str(key): '' if value is None else str(value)
            for key, value in (values or {}).items()
        }

    def __getitem__(self, key: str) -> str:
        return self._values[key]

    def __iter__(self) -> Iterator[str]:
        return iter(self._values)

    def __len__(self) -> int:
        return len(self._values)

    def __repr__(self):
        return f"VariableSet({self._values!r})"

    def with_value(self, key: str, value: Any) -> 'VariableSet':
        if key in self._values:
            raise KeyError(f"Variable already set: {key}")
        updated = VariableSet(self._values)
        updated._values[key] = '' if value is None else str(value)
        logger.debug(f"Added variable: {key}")
        return updated

    def overlay(self, overrides: Optional[Mapping[str, Any]]) -> Dict[str, Any]:
        """Plain mapping for one render where overrides take precedence; the set itself is unchanged"""
        merged: Dict[str, Any] = dict(self._values)
        if overrides:
            merged.update(overrides)
        return merged
