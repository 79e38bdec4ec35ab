"""vagga-settings: Trusted and project settings resolution for vagga.

Settings come from two trust tiers:
- Trusted (under the user's home, named by VAGGA_USER_HOME):
  ~/.config/vagga/settings.yaml, ~/.vagga/settings.yaml, ~/.vagga.yaml
- Project (under the project root):
  .vagga.settings.yaml, .vagga/settings.yaml

Only trusted files can set security-relevant fields (allowed_dirs,
storage_dir, cache_dir). A trusted file may pin values for one project via
`site_overrides`. Project files can only change version_check,
shared_cache and the package mirrors.

The package also provides an exclusive, non-blocking advisory lock used to
serialize access to shared directories such as the cache.

Public API:
    read_settings: Resolve settings for a project root
    SettingsResolver: Resolution over explicit candidate paths
    SettingsPaths: Candidate settings files for both tiers
    Tier: Enum for TRUSTED/PROJECT tiers
    TrustedRecord, SiteOverride, ProjectRecord: Settings file schemas
    ResolvedSettings, ExternalSettings, InternalSettings: Resolution result
    Lock, acquire_exclusive: Exclusive advisory lock
    ConfigError, ConfigFileError, ConfigValidationError,
    ConfigExpansionError, LockError, LockWouldBlock, LockIoError:
        Exception types

Example:
    ```python
    from pathlib import Path
    from vagga_settings import read_settings

    settings = read_settings(Path.cwd().resolve())
    if settings.external.cache_dir:
        print(f"Using shared cache at {settings.external.cache_dir}")
    ```
"""

from .exceptions import ConfigError
from .exceptions import ConfigExpansionError
from .exceptions import ConfigFileError
from .exceptions import ConfigValidationError
from .exceptions import LockError
from .exceptions import LockIoError
from .exceptions import LockWouldBlock
from .exceptions import NoHomeError
from .lock import Lock
from .lock import acquire_exclusive
from .models import ExternalSettings
from .models import InternalSettings
from .models import ProjectRecord
from .models import ResolvedSettings
from .models import SettingsPaths
from .models import SiteOverride
from .models import Tier
from .models import TrustedRecord
from .resolver import SettingsResolver
from .resolver import read_settings

__version__ = "0.1.0"

__all__ = [
    "read_settings",
    "SettingsResolver",
    "SettingsPaths",
    "Tier",
    "TrustedRecord",
    "SiteOverride",
    "ProjectRecord",
    "ResolvedSettings",
    "ExternalSettings",
    "InternalSettings",
    "Lock",
    "acquire_exclusive",
    "ConfigError",
    "ConfigFileError",
    "ConfigValidationError",
    "ConfigExpansionError",
    "NoHomeError",
    "LockError",
    "LockWouldBlock",
    "LockIoError",
]
