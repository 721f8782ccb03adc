"""
Macro expansion for $(Name) property references.

Lookup order for each reference:
    1. The evaluation context's property table
    2. The process environment (or an injected mapping)
    3. Empty string, with an UNRESOLVED_MACRO diagnostic

A replacement value that itself contains $(...) is expanded again,
recursively, before it is substituted. Only the replacement is
re-expanded, never the surrounding text.
"""

import os
import re
from typing import Mapping, Optional, Tuple

from vcxprops.errors import MacroCycleError
from vcxprops.model import DiagnosticKind, EvaluationContext

MACRO_RE = re.compile(r"\$\(([A-Za-z0-9_]*)\)")


def has_macros(text: str) -> bool:
    """True if `text` contains at least one $(Name) reference."""
    return MACRO_RE.search(text) is not None


def resolve_macros(
    text: str,
    context: EvaluationContext,
    environ: Optional[Mapping[str, str]] = None,
    _expanding: Tuple[str, ...] = (),
) -> str:
    """
    Expand every $(Name) reference in `text`.

    Args:
        text: String possibly containing $(Name) references
        context: Supplies the property table and collects diagnostics
        environ: Fallback variables; defaults to os.environ

    Returns:
        `text` with all references replaced

    Raises:
        MacroCycleError: If a reference expands back to a name that is
            still being expanded
    """
    if environ is None:
        environ = os.environ

    def _replace(m: re.Match) -> str:
        name = m.group(1)
        if name in _expanding:
            chain = list(_expanding) + [name]
            raise MacroCycleError(
                "Macro cycle: " + " -> ".join(f"$({n})" for n in chain), chain
            )

        value = context.get_property(name)
        if value is None:
            value = environ.get(name)
        if value is None:
            context.add_diagnostic(
                DiagnosticKind.UNRESOLVED_MACRO,
                f"Unable to resolve variable: $({name})",
                name=name,
            )
            return ""

        if has_macros(value):
            return resolve_macros(value, context, environ, _expanding + (name,))
        return value

    return MACRO_RE.sub(_replace, text)


__all__ = ["MACRO_RE", "has_macros", "resolve_macros"]
