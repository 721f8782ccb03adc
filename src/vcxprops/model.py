"""
Evaluation Context Objects

Defines the mutable state shared by one evaluation run:
    - The property table (name -> current string value)
    - The active configuration marker
    - Diagnostics (informational, never fatal)
    - The stack of project files currently being read

ARCHITECTURAL RULE:
    One EvaluationContext is created per run and passed by reference
    into every recursive traversal and import. Imported files read and
    write the very same table; nothing is copied or merged.
"""

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Optional

logger = logging.getLogger(__name__)


class DiagnosticKind(Enum):
    """Kinds of informational findings recorded during evaluation."""

    PROPERTY_OVERWRITTEN = "property-overwritten"
    UNRESOLVED_MACRO = "unresolved-macro"
    IGNORED_CONFIGURATION_ITEM = "ignored-configuration-item"


@dataclass(frozen=True)
class Diagnostic:
    """
    A non-fatal finding.

    Examples:
        - Key: OutDir | Replacing "bin\\" with "out\\"
        - Unable to resolve variable: $(VCTargetsPath)

    Properties:
        kind: DiagnosticKind enum
        message: Human-readable text, as logged
        details: Structured values (property name, old/new value, ...)
    """

    kind: DiagnosticKind
    message: str
    details: Dict[str, str] = field(default_factory=dict)


@dataclass
class EvaluationContext:
    """
    State threaded through one evaluation run.

    Properties:
        properties:
            Property table. Keys are case-sensitive, non-empty names.
            Last write wins.

        active_configuration:
            Include value of the selected ProjectConfiguration item
            (e.g. "Debug|x64"). None until the first one is seen, then
            fixed for the rest of the run, imports included.

        diagnostics:
            Every Diagnostic recorded so far, in order.

        import_stack:
            Absolute paths of the files currently being read, outermost
            first. Import cycle checks compare their resolved real paths.
    """

    properties: Dict[str, str] = field(default_factory=dict)
    active_configuration: Optional[str] = None
    diagnostics: List[Diagnostic] = field(default_factory=list)
    import_stack: List[str] = field(default_factory=list)

    def get_property(self, name: str) -> Optional[str]:
        """
        Retrieve a property value.

        Args:
            name: Property name (case-sensitive)

        Returns:
            Current value or None if the property was never set
        """
        return self.properties.get(name)

    def set_property(self, name: str, value: str) -> None:
        """
        Store a property read from project text.

        Overwriting an existing entry records a PROPERTY_OVERWRITTEN
        diagnostic naming both values.
        """
        old = self.properties.get(name)
        self.properties[name] = value
        if old is not None:
            self.add_diagnostic(
                DiagnosticKind.PROPERTY_OVERWRITTEN,
                f'Key: {name} | Replacing "{old}" with "{value}"',
                name=name,
                old=old,
                new=value,
            )

    def seed_property(self, name: str, value: str) -> None:
        """Unconditionally set a synthetic property. No diagnostic."""
        self.properties[name] = value

    def add_diagnostic(self, kind: DiagnosticKind, message: str, **details: str) -> Diagnostic:
        diagnostic = Diagnostic(kind=kind, message=message, details=dict(details))
        self.diagnostics.append(diagnostic)
        logger.info(message)
        return diagnostic

    def diagnostics_of(self, kind: DiagnosticKind) -> List[Diagnostic]:
        """All diagnostics of one kind, in the order they were recorded."""
        return [d for d in self.diagnostics if d.kind == kind]

    def select_configuration(self, include: str) -> bool:
        """
        Offer a ProjectConfiguration Include value.

        The first value offered becomes the active configuration.

        Returns:
            True if `include` is the active configuration and the item
            should be processed, False if it must be skipped
        """
        if self.active_configuration is None:
            self.active_configuration = include
            logger.debug("Active configuration: %s", include)
        return self.active_configuration == include
