"""
Template Variables - Placeholder substitution for text and link templates.

Both ``${name}`` and ``$name`` forms are supported. Placeholders without a
value in the context are left untouched.
"""

import json
import logging
import re
from datetime import date, datetime
from typing import Any, Callable

from flowrules.core.domain.state import ElementState
from flowrules.core.services.formatting import plain_number
from flowrules.core.services.patterns import parse_flags

logger = logging.getLogger(__name__)

# /body/flags optionally followed by literal text appended to the value
_REGEX_TEMPLATE = re.compile(r"/(.+?)/([gimsuy]*)(.*)")

_BRACED_VAR = re.compile(r"\$\{([^}]+)\}")
_BARE_VAR = re.compile(r"\$([a-zA-Z_][a-zA-Z0-9_]*)")


def replace_variables(text: str, context: dict[str, Any]) -> str:
    """Substitute every context entry into ``text``."""
    result = text
    for key, value in context.items():
        if value is None:
            continue
        formatted = format_variable_value(value)
        result = re.sub(r"\$\{" + re.escape(key) + r"\}", lambda _: formatted, result)
        result = re.sub(r"\$" + re.escape(key) + r"\b", lambda _: formatted, result)
    return result


def format_variable_value(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, int):
        return str(value)
    if isinstance(value, float):
        return str(int(value)) if value.is_integer() else f"{value:.2f}"
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    if isinstance(value, (list, tuple)):
        return ", ".join(str(v) for v in value)
    if isinstance(value, dict):
        return json.dumps(value, separators=(",", ":"))
    return str(value)


def create_variable_context(
    state: ElementState,
    additional: dict[str, Any] | None = None,
) -> dict[str, Any]:
    """Variables exposed to templates for one element."""
    context = {
        "_value": state.value,
        "_label": state.element_id,
        "_alias": state.rule_name,
        "_rule": state.rule_name,
        "_level": state.level,
        "_color": state.color,
        "_formattedValue": state.formatted_value or plain_number(state.value),
    }
    if additional:
        context.update(additional)
    return context


def resolve_text_template(
    template: str,
    state: ElementState,
    original_text: str,
) -> str:
    """
    Resolve a text directive's template for one element.

    A template shaped like ``/regex/flags[suffix]`` rewrites the element's
    original label, replacing matches with the formatted value plus the
    suffix. Anything else is a placeholder template.
    """
    regex_template = _REGEX_TEMPLATE.fullmatch(template)
    if regex_template is None:
        return replace_variables(template, create_variable_context(state))

    body, flags, suffix = regex_template.groups()
    replacement = state.formatted_value + (suffix or "")
    try:
        regex = re.compile(body, parse_flags(flags))
    except (re.error, ValueError) as e:
        logger.debug(f"Invalid text template regex '{template}': {e}")
        return state.formatted_value
    # Without the g flag only the first match is replaced
    count = 0 if "g" in flags else 1
    return regex.sub(lambda _: replacement, original_text, count=count)


def resolve_link_variables(
    url: str,
    state: ElementState,
    resolve_host_variable: Callable[[str], str],
    additional: dict[str, Any] | None = None,
) -> str:
    """Resolve host variables first, then element variables, in a link URL."""
    resolved = resolve_host_variable(url)
    return replace_variables(resolved, create_variable_context(state, additional))


def extract_variables(text: str) -> list[str]:
    """Names of all placeholders in ``text``, first-seen order, without duplicates."""
    names: list[str] = []
    for pattern in (_BRACED_VAR, _BARE_VAR):
        for name in pattern.findall(text):
            if name not in names:
                names.append(name)
    return names
