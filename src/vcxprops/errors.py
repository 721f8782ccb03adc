"""
Exception hierarchy for vcxprops.

Every error raised while reading a project derives from VcxpropsError, so
callers can separate "this project cannot be evaluated" from programming
errors. Non-fatal findings are never raised; they are recorded as
diagnostics on the evaluation context.
"""


class VcxpropsError(Exception):
    """
    Base class for all vcxprops errors.

    When converted to string, the message is prefixed with the project
    file it relates to, in the usual ``file: message`` form.

    Properties:
        msg: Error message to show to the user
        filename: Project file the error relates to (optional)
    """

    def __init__(self, msg, filename=None):
        super().__init__(msg)
        self.msg = msg
        self.filename = filename

    def __str__(self):
        if self.filename:
            return f"{self.filename}: {self.msg}"
        return self.msg


class ConditionParseError(VcxpropsError):
    """Raised when a Condition string does not match the condition grammar."""

    def __init__(self, msg, text=None, position=None, filename=None):
        super().__init__(msg, filename)
        self.text = text
        self.position = position


class ProjectLoadError(VcxpropsError):
    """Raised when a project file cannot be read, decoded or parsed as XML."""
    pass


class MalformedImportError(VcxpropsError):
    """Raised for an <Import> element without a Project attribute."""
    pass


class PropertiesFileError(VcxpropsError):
    """Raised when a global-properties file is not a flat mapping of scalars."""
    pass


class CycleDetectedError(VcxpropsError):
    """
    Raised when evaluation would recurse forever.

    Properties:
        chain: The names (files or macros) forming the cycle, in order,
               ending with the repeated entry.
    """

    def __init__(self, msg, chain, filename=None):
        super().__init__(msg, filename)
        self.chain = list(chain)


class ImportCycleError(CycleDetectedError):
    """A project imports a file that is already being imported."""
    pass


class MacroCycleError(CycleDetectedError):
    """A $(Name) reference expands, directly or transitively, to itself."""
    pass


__all__ = [
    "VcxpropsError",
    "ConditionParseError",
    "ProjectLoadError",
    "MalformedImportError",
    "PropertiesFileError",
    "CycleDetectedError",
    "ImportCycleError",
    "MacroCycleError",
]
