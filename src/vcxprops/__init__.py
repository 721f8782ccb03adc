"""
Visual Studio Project Property Evaluator (vcxprops)

Reads an MSBuild-style XML project (.vcxproj, .props, .targets) and
reconstructs the property table MSBuild would compute for one
configuration.

Two layers:
    - Condition language: parse `Condition` attributes into an AST
      (expressions, condition_parser) and fold it to a boolean
      (interpreter).
    - Property resolution: walk the XML tree, expand $(Name) macros,
      select one ProjectConfiguration and merge imported files into a
      single shared table (macros, model, project_reader).

This package does NOT evaluate item groups, targets or tasks.
"""

__version__ = "0.1.0"
