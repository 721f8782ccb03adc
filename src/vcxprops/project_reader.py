"""
Project Reader (Layer 3: Project XML → Property table).

Walks an MSBuild project file depth-first and fills the shared property
table of an EvaluationContext:

    - Elements with a false `Condition` are skipped with their subtree
    - <ItemGroup Label="ProjectConfigurations"> selects ONE configuration:
      the first ProjectConfiguration Include wins, later items are only
      processed when their Include matches it
    - <Import Project="..."> reads the named file into the same context
    - Any other element is descended into; its non-empty text becomes the
      property named after the element, after $(Name) expansion

Every file read (imports included) first seeds the MSBuildThisFile*
properties for that file.

Import paths and exists() arguments are resolved differently. A relative
Import Project is taken from the importing file's directory, with `\\`
turned into `/` on POSIX. An exists() argument is handed to the path
predicate as written, so a relative one is checked against the current
working directory. A guard such as

    <Import Project="sub\\x.props" Condition="exists('sub\\x.props')" />

is therefore false on POSIX or when run from another directory. Write
the guard as exists('$(MSBuildThisFileDirectory)sub/x.props') instead.
"""

import logging
import os
import xml.etree.ElementTree as ET
from typing import Dict, Mapping, Optional, Union

from vcxprops.errors import (
    ConditionParseError,
    ImportCycleError,
    MacroCycleError,
    MalformedImportError,
    ProjectLoadError,
)
from vcxprops.interpreter import PathExists, eval_condition
from vcxprops.macros import resolve_macros
from vcxprops.model import DiagnosticKind, EvaluationContext

logger = logging.getLogger(__name__)

PathLike = Union[str, "os.PathLike[str]"]

CONFIGURATION_GROUP_LABEL = "ProjectConfigurations"


def local_name(tag: str) -> str:
    """Remove the XML namespace from a tag name."""
    if tag[:1] == "{":
        return tag[tag.index("}") + 1:]
    return tag


def _is_markup(node: ET.Element) -> bool:
    """True for comment and processing-instruction nodes."""
    return node.tag is ET.Comment or node.tag is ET.ProcessingInstruction


def file_properties(filename: str) -> Dict[str, str]:
    """
    Compute the MSBuildThisFile* properties for a project path.

    Args:
        filename: Path as given by the caller or an Import

    Returns:
        Mapping of the synthetic property names to values. The directory
        values always end with a path separator.
    """
    full_path = os.path.abspath(filename)
    directory = os.path.dirname(full_path)
    if not directory.endswith(os.sep):
        directory += os.sep
    base = os.path.basename(full_path)
    stem, ext = os.path.splitext(base)
    no_root = os.path.splitdrive(directory)[1].lstrip("\\/")

    return {
        "MSBuildThisFile": base,
        "MSBuildThisFileDirectory": directory,
        "MSBuildThisFileDirectoryNoRoot": no_root,
        "MSBuildThisFileExtension": ext[1:],
        "MSBuildThisFileFullPath": full_path,
        "MSBuildThisFileName": stem,
    }


def load_project_text(filename: str) -> str:
    """
    Read a project file as text.

    A UTF-8 byte-order mark is stripped. Bytes that are not valid UTF-8
    are an error, not replaced.

    Raises:
        ProjectLoadError: If the file cannot be read or decoded
    """
    try:
        with open(filename, "rb") as f:
            raw = f.read()
    except OSError as e:
        raise ProjectLoadError(f"Cannot read project file: {e.strerror or e}", filename) from e

    try:
        return raw.decode("utf-8-sig")
    except UnicodeDecodeError as e:
        raise ProjectLoadError(f"Invalid UTF-8 at byte {e.start}", filename) from e


def parse_project_xml(text: str, filename: Optional[str] = None) -> ET.Element:
    """
    Parse project text into an element tree that keeps comments and
    processing instructions.

    Raises:
        ProjectLoadError: If the text is not well-formed XML
    """
    parser = ET.XMLParser(target=ET.TreeBuilder(insert_comments=True, insert_pis=True))
    try:
        parser.feed(text)
        return parser.close()
    except ET.ParseError as e:
        raise ProjectLoadError(f"Malformed XML: {e}", filename) from e


class ProjectReader:
    """
    Evaluates project files into one EvaluationContext.

    A reader may be used for several read() calls; they all accumulate
    into the same context, exactly as nested imports do.

    Args:
        environ: Fallback for $(Name) lookups; defaults to os.environ
        path_exists: Predicate behind the exists() condition function
        properties: Initial property table (global properties)
        configuration: Pre-selected configuration, e.g. "Release|x64".
            When omitted the first ProjectConfiguration item wins.
        context: Existing context to continue filling. Overrides
            `properties` and `configuration`.
    """

    def __init__(
        self,
        environ: Optional[Mapping[str, str]] = None,
        path_exists: Optional[PathExists] = None,
        properties: Optional[Mapping[str, str]] = None,
        configuration: Optional[str] = None,
        context: Optional[EvaluationContext] = None,
    ):
        if context is None:
            context = EvaluationContext(
                properties=dict(properties or {}),
                active_configuration=configuration,
            )
        self.context = context
        self.environ = environ
        self.path_exists = path_exists

    @property
    def properties(self) -> Dict[str, str]:
        return self.context.properties

    @property
    def current_file(self) -> Optional[str]:
        """Absolute path of the file being traversed, or None between reads."""
        if self.context.import_stack:
            return self.context.import_stack[-1]
        return None

    def read(self, filename: PathLike) -> None:
        """
        Read one project file (and, recursively, everything it imports).

        Raises:
            ConditionParseError: A Condition anywhere fails to parse
            ImportCycleError: A file imports itself, directly or not
            MalformedImportError: An <Import> lacks a Project attribute
            MacroCycleError: A $(Name) reference expands to itself
            ProjectLoadError: A file cannot be read, decoded or parsed
        """
        path = os.path.abspath(os.fspath(filename))
        self._enter(path)
        try:
            text = load_project_text(path)
            self._traverse_document(parse_project_xml(text, path))
        finally:
            self.context.import_stack.pop()

    def read_string(self, text: str, filename: PathLike) -> None:
        """
        Evaluate project text as if it had been read from `filename`.

        `filename` only feeds the MSBuildThisFile* properties and the base
        directory for relative imports; it need not exist.
        """
        path = os.path.abspath(os.fspath(filename))
        self._enter(path)
        try:
            self._traverse_document(parse_project_xml(text, path))
        finally:
            self.context.import_stack.pop()

    def _enter(self, path: str) -> None:
        canonical = os.path.realpath(path)
        stack = self.context.import_stack
        if any(os.path.realpath(p) == canonical for p in stack):
            chain = stack + [path]
            raise ImportCycleError("Import cycle: " + " -> ".join(chain), chain, path)

        logger.info("Reading %s", path)
        for name, value in file_properties(path).items():
            self.context.seed_property(name, value)
        stack.append(path)

    def _resolve(self, text: str) -> str:
        try:
            return resolve_macros(text, self.context, self.environ)
        except MacroCycleError as e:
            if e.filename is None:
                e.filename = self.current_file
            raise

    def _traverse_document(self, root: ET.Element) -> None:
        # Comments and processing instructions outside the root element
        # are dropped by the tree builder; they carry no properties anyway.
        self._traverse_element(root)

    def _failed_condition(self, elem: ET.Element) -> bool:
        raw = elem.get("Condition")
        if raw is None:
            return False

        cond = self._resolve(raw)
        logger.debug("Condition %r resolved to %r", raw, cond)
        try:
            result = eval_condition(cond, self.path_exists)
        except ConditionParseError as e:
            if e.filename is None:
                e.filename = self.current_file
            raise
        if not result:
            logger.debug("Skipping <%s>: condition is false", local_name(elem.tag))
        return not result

    def _is_project_config_item_group(self, name: str, elem: ET.Element) -> bool:
        return name == "ItemGroup" and elem.get("Label") == CONFIGURATION_GROUP_LABEL

    def _parse_project_configurations(self, group: ET.Element) -> None:
        for child in group:
            if _is_markup(child):
                continue

            name = local_name(child.tag)
            include = child.get("Include")
            if name != "ProjectConfiguration" or include is None:
                self.context.add_diagnostic(
                    DiagnosticKind.IGNORED_CONFIGURATION_ITEM,
                    f"Ignoring <{name}> in {CONFIGURATION_GROUP_LABEL}: "
                    "expected <ProjectConfiguration Include=...>",
                    element=name,
                )
                continue

            if self.context.select_configuration(include):
                self._traverse_element(child)
            else:
                logger.debug("Skipping configuration %s", include)

    def _parse_import(self, elem: ET.Element) -> None:
        project = elem.get("Project")
        if project is None:
            raise MalformedImportError("<Import> element has no Project attribute", self.current_file)

        path = self._import_path(self._resolve(project))
        logger.info("Importing %s", path)
        self.read(path)

    def _import_path(self, project: str) -> str:
        """Turn an Import's Project value into a path on this host."""
        if os.sep == "/":
            project = project.replace("\\", "/")
        if not os.path.isabs(project):
            project = os.path.join(os.path.dirname(self.current_file), project)
        return os.path.normpath(project)

    def _update_property(self, name: str, text: Optional[str]) -> None:
        if text is None:
            return
        value = text.strip()
        if not value:
            return
        self.context.set_property(name, self._resolve(value))

    def _traverse_element(self, elem: ET.Element) -> None:
        if self._failed_condition(elem):
            return

        name = local_name(elem.tag)
        if self._is_project_config_item_group(name, elem):
            self._parse_project_configurations(elem)
        elif name == "Import":
            self._parse_import(elem)
        else:
            self._update_property(name, elem.text)
            for child in elem:
                if not _is_markup(child):
                    self._traverse_element(child)
                self._update_property(name, child.tail)


def read_project(
    filename: PathLike,
    environ: Optional[Mapping[str, str]] = None,
    path_exists: Optional[PathExists] = None,
    properties: Optional[Mapping[str, str]] = None,
    configuration: Optional[str] = None,
) -> EvaluationContext:
    """
    Evaluate a project file and return the filled context.

    Args:
        filename: Path to the .vcxproj/.props/.targets file
        environ: Fallback for $(Name) lookups; defaults to os.environ
        path_exists: Predicate behind exists(); defaults to os.path.exists
        properties: Initial property table
        configuration: Pre-selected configuration

    Returns:
        EvaluationContext with properties, active configuration and
        diagnostics

    Raises:
        VcxpropsError: Any subclass; see ProjectReader.read
    """
    reader = ProjectReader(
        environ=environ,
        path_exists=path_exists,
        properties=properties,
        configuration=configuration,
    )
    reader.read(filename)
    return reader.context


__all__ = [
    "ProjectReader",
    "read_project",
    "file_properties",
    "load_project_text",
    "parse_project_xml",
    "local_name",
]
