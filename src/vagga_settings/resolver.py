"""Settings resolution across the trusted and project tiers."""

import logging
import os
from collections.abc import Mapping
from dataclasses import replace
from pathlib import Path
from typing import Any

from .exceptions import ConfigExpansionError
from .exceptions import NoHomeError
from .loader import HOME_ENV_VAR
from .loader import decode_record
from .loader import existing_sources
from .loader import user_home_from_env
from .models import TOOL_NAME
from .models import ProjectRecord
from .models import ResolvedSettings
from .models import SettingsPaths
from .models import SiteOverride
from .models import Tier
from .models import TrustedRecord
from .utils import expand_home

logger = logging.getLogger(__name__)

# Fields copied as-is when present, per tier
_TRUSTED_RUNTIME_FIELDS = ("version_check", "proxy_env_vars", "ubuntu_mirror", "alpine_mirror")
_PROJECT_RUNTIME_FIELDS = ("version_check", "ubuntu_mirror", "alpine_mirror")


def _expand(path: Path, field: str, source: Path, environ: Mapping[str, str] | None) -> Path:
    try:
        return expand_home(path, environ)
    except NoHomeError as e:
        raise ConfigExpansionError(field, source) from e


def _apply_secure_fields(
    settings: ResolvedSettings,
    record: SiteOverride,
    source: Path,
    environ: Mapping[str, str] | None,
    field_prefix: str = "",
) -> ResolvedSettings:
    external_updates: dict[str, Any] = {}
    internal_updates: dict[str, Any] = {}

    if record.allowed_dirs:
        external_updates["allowed_dirs"] = {**settings.external.allowed_dirs, **record.allowed_dirs}
    if record.storage_dir is not None:
        external_updates["storage_dir"] = _expand(record.storage_dir, f"{field_prefix}storage_dir", source, environ)
    if record.cache_dir is not None:
        external_updates["cache_dir"] = _expand(record.cache_dir, f"{field_prefix}cache_dir", source, environ)
        external_updates["shared_cache"] = True

    for name in _TRUSTED_RUNTIME_FIELDS:
        value = getattr(record, name)
        if value is not None:
            internal_updates[name] = value

    return ResolvedSettings(
        external=replace(settings.external, **external_updates),
        internal=replace(settings.internal, **internal_updates),
    )


def apply_trusted(
    settings: ResolvedSettings,
    record: TrustedRecord,
    source: Path,
    environ: Mapping[str, str] | None = None,
) -> ResolvedSettings:
    """Merge the top-level fields of a trusted file.

    `allowed_dirs` entries are added by key; other present fields replace
    the current value. Setting `cache_dir` also turns on `shared_cache`.

    Args:
        settings: Settings accumulated so far
        record: Decoded trusted file
        source: File the record came from (for error messages)
        environ: Environment used for `~` expansion (default: os.environ)

    Returns:
        New settings value

    Raises:
        ConfigExpansionError: If a `~` path can't be expanded
    """
    return _apply_secure_fields(settings, record, source, environ)


def apply_site_override(
    settings: ResolvedSettings,
    override: SiteOverride,
    source: Path,
    project_root: Path,
    environ: Mapping[str, str] | None = None,
) -> ResolvedSettings:
    """Merge a site override using the same rules as top-level trusted fields.

    Paths in an override get the same `~` expansion as top-level paths.
    """
    prefix = f"site_overrides[{project_root}]."
    return _apply_secure_fields(settings, override, source, environ, field_prefix=prefix)


def apply_project(settings: ResolvedSettings, record: ProjectRecord) -> ResolvedSettings:
    """Merge a project file. Only operational fields can be set from here."""
    internal_updates: dict[str, Any] = {}
    for name in _PROJECT_RUNTIME_FIELDS:
        value = getattr(record, name)
        if value is not None:
            internal_updates[name] = value

    external = settings.external
    if record.shared_cache is not None:
        external = replace(external, shared_cache=record.shared_cache)
    return ResolvedSettings(external=external, internal=replace(settings.internal, **internal_updates))


def fold_trusted(
    settings: ResolvedSettings,
    record: TrustedRecord,
    source: Path,
    project_root: Path,
    environ: Mapping[str, str] | None = None,
) -> ResolvedSettings:
    """Merge a trusted file, then its site override for `project_root` if any.

    The override key must equal `project_root` exactly; parent directories
    and other roots never match.
    """
    settings = apply_trusted(settings, record, source, environ)
    override = record.site_overrides.get(project_root)
    if override is not None:
        logger.debug(f"Applying site override for {project_root} from {source}")
        settings = apply_site_override(settings, override, source, project_root, environ)
    return settings


class SettingsResolver:
    """Resolves effective settings for one project.

    Trusted files are processed first, in order, each followed by its
    matching site override. Project files come last and can only change
    version_check, shared_cache and the mirrors.

    Args:
        paths: Candidate settings files for both tiers
        project_root: Project root used to pick site overrides
        environ: Environment used for `~` expansion (default: os.environ)
    """

    def __init__(self, paths: SettingsPaths, project_root: Path, environ: Mapping[str, str] | None = None):
        self.paths = paths
        self.project_root = Path(project_root)
        self.environ = environ

    def sources(self, tier: Tier) -> list[Path]:
        """Get the existing settings files of a tier, in processing order."""
        return existing_sources(self.paths.for_tier(tier))

    def resolve(self) -> ResolvedSettings:
        """Read and merge all settings files.

        Returns:
            Resolved settings (defaults when no file exists)

        Raises:
            ConfigFileError: If any settings file is unreadable or malformed
            ConfigExpansionError: If a `~` path can't be expanded
        """
        settings = ResolvedSettings()

        for source in self.sources(Tier.TRUSTED):
            record = decode_record(source, TrustedRecord)
            settings = fold_trusted(settings, record, source, self.project_root, self.environ)

        for source in self.sources(Tier.PROJECT):
            record = decode_record(source, ProjectRecord)
            settings = apply_project(settings, record)

        logger.debug(
            f"Resolved settings for {self.project_root}: "
            f"allowed_dirs={sorted(settings.external.allowed_dirs)}, "
            f"storage_dir={settings.external.storage_dir}, "
            f"cache_dir={settings.external.cache_dir}, "
            f"shared_cache={settings.external.shared_cache}"
        )
        return settings


def read_settings(
    project_root: Path,
    environ: Mapping[str, str] | None = None,
    tool: str = TOOL_NAME,
    home_var: str = HOME_ENV_VAR,
) -> ResolvedSettings:
    """Resolve settings for a project using the standard file locations.

    The trusted tier is read from the directory named by `home_var`
    (VAGGA_USER_HOME by default) and skipped entirely when it is unset.

    Args:
        project_root: Absolute project root (compared exactly against
            site override keys, so pass a canonical path)
        environ: Environment mapping (default: os.environ)
        tool: Tool name used in settings file names
        home_var: Variable naming the acting user's home

    Returns:
        Resolved settings
    """
    env = os.environ if environ is None else environ
    project_root = Path(project_root)
    home = user_home_from_env(env, home_var)
    if home is None:
        logger.debug(f"{home_var} is not set, skipping trusted settings")
    paths = SettingsPaths.for_project(project_root, home=home, tool=tool)
    return SettingsResolver(paths, project_root, env).resolve()
