"""AppForge configuration.

Typed settings for generation runs.  Everything a platform generator or the
packager needs beyond the descriptor itself (SDK levels, deployment targets,
scratch and archive locations, identifier seeding) lives here so that it is
validated once and can be saved to / loaded from JSON or read from the
environment.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any, Optional

from pydantic import BaseModel, Field


class AndroidConfig(BaseModel):
    """Build settings written into the generated Gradle files."""

    compile_sdk: int = Field(default=34, ge=21)
    min_sdk: int = Field(default=21, ge=16)
    target_sdk: int = Field(default=34, ge=21)
    gradle_plugin_version: str = Field(default="8.1.2")
    kotlin_version: str = Field(default="1.9.10")

    def as_dict(self) -> dict[str, Any]:
        """Return the values reported in a generation result's build info."""
        return {
            "compileSdk": self.compile_sdk,
            "minSdk": self.min_sdk,
            "targetSdk": self.target_sdk,
            "gradlePlugin": self.gradle_plugin_version,
            "kotlin": self.kotlin_version,
        }


class IOSConfig(BaseModel):
    """Build settings written into the generated Xcode project."""

    deployment_target: str = Field(default="13.0")
    swift_version: str = Field(default="5.0")
    object_version: int = Field(default=56, description="pbxproj objectVersion")
    compatibility_version: str = Field(default="Xcode 14.0")
    development_team: str = Field(default="")

    def as_dict(self) -> dict[str, Any]:
        return {
            "deploymentTarget": self.deployment_target,
            "swiftVersion": self.swift_version,
            "objectVersion": self.object_version,
        }


class PackagingConfig(BaseModel):
    """Where scratch trees are created and where archives are written."""

    scratch_root: Optional[Path] = Field(
        default=None, description="Parent of run scratch directories (system temp if unset)"
    )
    archive_dir: Path = Field(default=Path("./output"))
    compression_level: int = Field(default=6, ge=0, le=9)


class GeneratorConfig(BaseModel):
    """Global AppForge configuration.

    Created once by the CLI (or by the embedding service) and passed to
    ``ProjectGenerator`` and ``GenerationPipeline``.
    """

    android: AndroidConfig = Field(default_factory=AndroidConfig)
    ios: IOSConfig = Field(default_factory=IOSConfig)
    packaging: PackagingConfig = Field(default_factory=PackagingConfig)
    identifier_seed: Optional[int] = Field(
        default=None,
        description="Seed for reference-graph identifiers; None uses system randomness",
    )
    concurrent_steps: bool = Field(
        default=False, description="Run generator steps on worker threads"
    )
    node_version: str = Field(default="18")
    python_version: str = Field(default="3.11")

    # ------------------------------------------------------------------
    # Serialisation helpers
    # ------------------------------------------------------------------

    def save(self, path: Path) -> Path:
        """Persist the configuration to a JSON file and return its path."""
        target = Path(path)
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_text(self.model_dump_json(indent=2), encoding="utf-8")
        return target

    @classmethod
    def load(cls, path: Path) -> "GeneratorConfig":
        """Load a previously-saved configuration from JSON."""
        raw = Path(path).read_text(encoding="utf-8")
        return cls.model_validate_json(raw)

    @classmethod
    def from_env(cls) -> "GeneratorConfig":
        """Build a ``GeneratorConfig`` from environment variables.

        Recognised variables (all optional):
            APPFORGE_SEED, APPFORGE_CONCURRENT_STEPS, APPFORGE_SCRATCH_ROOT,
            APPFORGE_ARCHIVE_DIR, APPFORGE_COMPRESSION_LEVEL,
            APPFORGE_ANDROID_COMPILE_SDK, APPFORGE_ANDROID_MIN_SDK,
            APPFORGE_ANDROID_TARGET_SDK, APPFORGE_IOS_DEPLOYMENT_TARGET,
            APPFORGE_IOS_SWIFT_VERSION.
        """
        android_kwargs: dict[str, Any] = {}
        if os.environ.get("APPFORGE_ANDROID_COMPILE_SDK"):
            android_kwargs["compile_sdk"] = int(os.environ["APPFORGE_ANDROID_COMPILE_SDK"])
        if os.environ.get("APPFORGE_ANDROID_MIN_SDK"):
            android_kwargs["min_sdk"] = int(os.environ["APPFORGE_ANDROID_MIN_SDK"])
        if os.environ.get("APPFORGE_ANDROID_TARGET_SDK"):
            android_kwargs["target_sdk"] = int(os.environ["APPFORGE_ANDROID_TARGET_SDK"])

        ios_kwargs: dict[str, Any] = {}
        if os.environ.get("APPFORGE_IOS_DEPLOYMENT_TARGET"):
            ios_kwargs["deployment_target"] = os.environ["APPFORGE_IOS_DEPLOYMENT_TARGET"]
        if os.environ.get("APPFORGE_IOS_SWIFT_VERSION"):
            ios_kwargs["swift_version"] = os.environ["APPFORGE_IOS_SWIFT_VERSION"]

        packaging_kwargs: dict[str, Any] = {}
        if os.environ.get("APPFORGE_SCRATCH_ROOT"):
            packaging_kwargs["scratch_root"] = Path(os.environ["APPFORGE_SCRATCH_ROOT"])
        if os.environ.get("APPFORGE_ARCHIVE_DIR"):
            packaging_kwargs["archive_dir"] = Path(os.environ["APPFORGE_ARCHIVE_DIR"])
        if os.environ.get("APPFORGE_COMPRESSION_LEVEL"):
            packaging_kwargs["compression_level"] = int(os.environ["APPFORGE_COMPRESSION_LEVEL"])

        seed = os.environ.get("APPFORGE_SEED")
        concurrent = os.environ.get("APPFORGE_CONCURRENT_STEPS", "").strip().lower()

        return cls(
            android=AndroidConfig(**android_kwargs),
            ios=IOSConfig(**ios_kwargs),
            packaging=PackagingConfig(**packaging_kwargs),
            identifier_seed=int(seed) if seed else None,
            concurrent_steps=concurrent in ("1", "true", "yes", "on"),
        )
