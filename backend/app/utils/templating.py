"""Placeholder substitution for message templates.

Tokens are `{identifier}` where identifier matches \\w+. Every token is
replaced by its mapped value, or by an empty string when the mapping has
no entry for it. Rendering never fails on unknown tokens.

    fill_template("Hello {name}", {"name": "Acme"})  -> "Hello Acme"
    fill_template("Hello {name}", {})                -> "Hello "
"""

import re
from typing import Mapping

TOKEN_RE = re.compile(r"\{(\w+)\}")


def fill_template(text: str, values: Mapping[str, object]) -> str:
    def _sub(match: re.Match) -> str:
        value = values.get(match.group(1))
        return "" if value is None else str(value)

    return TOKEN_RE.sub(_sub, text or "")


def placeholders(text: str) -> list[str]:
    """Distinct token names in order of first appearance."""
    seen: dict[str, None] = {}
    for name in TOKEN_RE.findall(text or ""):
        seen.setdefault(name, None)
    return list(seen)
