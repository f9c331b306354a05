"""AppForge scaffolder -- turns a project descriptor into a source tree.

One platform generator exists per target (Android, iOS, React Native,
Flutter, Express, FastAPI).  ``ProjectGenerator`` picks the generator for a
descriptor's target, validates the descriptor and runs the generator's step
pipeline into an output directory.

Quick usage::

    from appforge.scaffolder import ProjectGenerator
    from appforge.models import ProjectDescriptor

    descriptor = ProjectDescriptor.from_document({"name": "Acme", "target": "backend-express"})
    result = await ProjectGenerator().generate(descriptor, "/tmp/acme")
"""

from appforge.scaffolder.base import PlatformGenerator, Step
from appforge.scaffolder.context import FileSet, GenerationContext
from appforge.scaffolder.generator import (
    GENERATORS,
    GenerationResult,
    ProjectGenerator,
    supported_targets,
    validate_descriptor,
)
from appforge.scaffolder.identifiers import IdentifierGraph, SymbolTable
from appforge.scaffolder.templates import TemplateRegistry
from appforge.scaffolder.tree import DirectoryTreeBuilder

__all__ = [
    "GENERATORS",
    "DirectoryTreeBuilder",
    "FileSet",
    "GenerationContext",
    "GenerationResult",
    "IdentifierGraph",
    "PlatformGenerator",
    "ProjectGenerator",
    "Step",
    "SymbolTable",
    "TemplateRegistry",
    "supported_targets",
    "validate_descriptor",
]
