"""Data models for vagga-settings."""

from dataclasses import dataclass
from dataclasses import field
from enum import Enum
from pathlib import Path
from typing import Any

from pydantic import BaseModel
from pydantic import ConfigDict
from pydantic import Field
from pydantic import StrictBool
from pydantic import StrictStr

TOOL_NAME = "vagga"
DEFAULT_UBUNTU_MIRROR = "mirror://mirrors.ubuntu.com/mirrors.txt"


class Tier(Enum):
    """Trust tier of a settings source.

    Trusted sources live under the user's home directory and may set
    security-relevant fields. Project sources live in the project tree and
    may only set cosmetic/operational fields.
    """

    TRUSTED = "trusted"
    PROJECT = "project"


@dataclass(frozen=True)
class SettingsPaths:
    """Candidate settings files for both tiers, in processing order.

    Attributes:
        trusted: Files under the user's home (empty when no home is known)
        project: Files under the project root
    """

    trusted: tuple[Path, ...] = ()
    project: tuple[Path, ...] = ()

    @classmethod
    def for_project(cls, project_root: Path, home: Path | None = None, tool: str = TOOL_NAME) -> "SettingsPaths":
        """Build the fixed candidate lists for a project.

        Args:
            project_root: Root directory of the project
            home: Home of the acting user, or None to skip the trusted tier
            tool: Tool name used in file names

        Returns:
            SettingsPaths with both candidate lists
        """
        trusted: tuple[Path, ...] = ()
        if home is not None:
            trusted = (
                home / ".config" / tool / "settings.yaml",
                home / f".{tool}" / "settings.yaml",
                home / f".{tool}.yaml",
            )
        project = (
            project_root / f".{tool}.settings.yaml",
            project_root / f".{tool}" / "settings.yaml",
        )
        return cls(trusted=trusted, project=project)

    def for_tier(self, tier: Tier) -> tuple[Path, ...]:
        """Get candidate files for a tier."""
        tier_map = {
            Tier.TRUSTED: self.trusted,
            Tier.PROJECT: self.project,
        }
        return tier_map[tier]


class SiteOverride(BaseModel):
    """Per-project record nested inside a trusted settings file.

    Same fields as a trusted file, but cannot nest further.
    """

    model_config = ConfigDict(extra="forbid", frozen=True)

    allowed_dirs: dict[str, Path] = Field(default_factory=dict)
    storage_dir: Path | None = None
    cache_dir: Path | None = None
    version_check: StrictBool | None = None
    proxy_env_vars: StrictBool | None = None
    ubuntu_mirror: StrictStr | None = None
    alpine_mirror: StrictStr | None = None


class TrustedRecord(SiteOverride):
    """Contents of one trusted (home directory) settings file.

    Attributes:
        site_overrides: Project root -> settings applied only when resolving
            for exactly that root

    The nested key is `site_overrides`. Files using the older
    `site_settings` key are rejected as having an unknown field.
    """

    site_overrides: dict[Path, SiteOverride] = Field(default_factory=dict)


class ProjectRecord(BaseModel):
    """Contents of one project settings file.

    Has no path-valued fields, so a project file can't touch allowed
    directories or storage locations. Such keys are rejected as extras.
    """

    model_config = ConfigDict(extra="forbid", frozen=True)

    version_check: StrictBool | None = None
    shared_cache: StrictBool | None = None
    ubuntu_mirror: StrictStr | None = None
    alpine_mirror: StrictStr | None = None


@dataclass(frozen=True)
class ExternalSettings:
    """Settings consumed by the filesystem access policy.

    `allowed_files` is never populated by settings files; it exists so
    callers can extend the policy.
    """

    allowed_dirs: dict[str, Path] = field(default_factory=dict)
    allowed_files: dict[str, Path] = field(default_factory=dict)
    storage_dir: Path | None = None
    cache_dir: Path | None = None
    shared_cache: bool = False


@dataclass(frozen=True)
class InternalSettings:
    """Settings consumed by the tool's own runtime behavior."""

    proxy_env_vars: bool = True
    version_check: bool = True
    ubuntu_mirror: str = DEFAULT_UBUNTU_MIRROR
    alpine_mirror: str | None = None
    uid_map: Any = None


@dataclass(frozen=True)
class ResolvedSettings:
    """Effective settings after merging both tiers."""

    external: ExternalSettings = field(default_factory=ExternalSettings)
    internal: InternalSettings = field(default_factory=InternalSettings)
