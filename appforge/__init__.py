"""AppForge -- multi-platform project generator.

Turns a validated ``ProjectDescriptor`` into a complete source tree for one
of six targets (Android, iOS, React Native, Flutter, Express, FastAPI) and
packages it for delivery.
"""

from appforge.config import GeneratorConfig
from appforge.errors import (
    GenerationError,
    GenerationIOError,
    PackagingError,
    SymbolTableError,
    TemplateError,
    UnsupportedTargetError,
    ValidationError,
)
from appforge.models import GeneratedFile, ProjectDescriptor, Target, ValidationReport
from appforge.scaffolder.generator import (
    GenerationResult,
    ProjectGenerator,
    supported_targets,
    validate_descriptor,
)

__version__ = "0.1.0"

__all__ = [
    "GeneratedFile",
    "GenerationError",
    "GenerationIOError",
    "GenerationResult",
    "GeneratorConfig",
    "PackagingError",
    "ProjectDescriptor",
    "ProjectGenerator",
    "SymbolTableError",
    "Target",
    "TemplateError",
    "UnsupportedTargetError",
    "ValidationError",
    "ValidationReport",
    "supported_targets",
    "validate_descriptor",
]
