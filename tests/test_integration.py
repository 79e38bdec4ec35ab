"""Integration tests for read_settings."""

from pathlib import Path
from tempfile import TemporaryDirectory

import pytest
import yaml
from vagga_settings import ConfigError
from vagga_settings import ConfigExpansionError
from vagga_settings import ConfigValidationError
from vagga_settings import ResolvedSettings
from vagga_settings import read_settings


class TestReadSettings:
    """Integration tests for realistic settings layouts."""

    @pytest.fixture
    def layout(self):
        """Create a home directory and a project root."""
        with TemporaryDirectory() as tmpdir:
            tmp = Path(tmpdir)
            home = tmp / "home" / "alice"
            project = tmp / "work" / "app"
            home.mkdir(parents=True)
            project.mkdir(parents=True)
            yield home, project

    @pytest.fixture
    def environ(self, layout):
        home, _ = layout
        return {"VAGGA_USER_HOME": str(home), "HOME": str(home)}

    def _write(self, path, data):
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(yaml.safe_dump(data))

    def test_no_files_gives_defaults(self, layout, environ):
        """Test nothing configured resolves to defaults."""
        _, project = layout
        assert read_settings(project, environ) == ResolvedSettings()

    def test_project_only_shared_cache(self, layout, environ):
        """Test a lone project file turning on shared_cache."""
        _, project = layout
        self._write(project / ".vagga.settings.yaml", {"shared_cache": True})

        settings = read_settings(project, environ)

        assert settings.external.shared_cache is True
        assert settings.external.allowed_dirs == {}
        assert settings.internal.version_check is True
        assert settings.internal.ubuntu_mirror == "mirror://mirrors.ubuntu.com/mirrors.txt"
        assert settings.internal.alpine_mirror is None

    def test_trusted_files_priority_order(self, layout, environ):
        """Test ~/.config/vagga, then ~/.vagga/settings.yaml, then ~/.vagga.yaml."""
        home, project = layout
        self._write(home / ".config" / "vagga" / "settings.yaml", {"allowed_dirs": {"build": "/first"}, "alpine_mirror": "a1"})
        self._write(home / ".vagga" / "settings.yaml", {"allowed_dirs": {"build": "/second", "data": "/data"}})
        self._write(home / ".vagga.yaml", {"alpine_mirror": "a3"})

        settings = read_settings(project, environ)

        assert settings.external.allowed_dirs == {"build": Path("/second"), "data": Path("/data")}
        assert settings.internal.alpine_mirror == "a3"

    def test_project_files_priority_order(self, layout, environ):
        """Test .vagga.settings.yaml is read before .vagga/settings.yaml."""
        _, project = layout
        self._write(project / ".vagga.settings.yaml", {"ubuntu_mirror": "first", "version_check": False})
        self._write(project / ".vagga" / "settings.yaml", {"ubuntu_mirror": "second"})

        settings = read_settings(project, environ)

        assert settings.internal.ubuntu_mirror == "second"
        assert settings.internal.version_check is False

    def test_trusted_tier_skipped_without_home_variable(self, layout, environ):
        """Test trusted files are ignored when VAGGA_USER_HOME is unset."""
        home, project = layout
        self._write(home / ".vagga.yaml", {"storage_dir": "/srv/storage"})
        del environ["VAGGA_USER_HOME"]

        assert read_settings(project, environ).external.storage_dir is None

    def test_cache_dir_only(self, layout, environ):
        """Test a trusted cache_dir alone yields shared_cache."""
        home, project = layout
        self._write(home / ".vagga.yaml", {"cache_dir": "~/.cache/vagga"})

        settings = read_settings(project, environ)

        assert settings.external.cache_dir == home / ".cache" / "vagga"
        assert settings.external.shared_cache is True

    def test_project_cannot_set_cache_dir(self, layout, environ):
        """Test a project file naming cache_dir fails at decode time."""
        home, project = layout
        self._write(home / ".vagga.yaml", {"allowed_dirs": {"build": "/tmp/build"}, "cache_dir": "/var/cache/x"})
        self._write(project / ".vagga.settings.yaml", {"cache_dir": "/tmp/evil"})

        with pytest.raises(ConfigValidationError) as exc_info:
            read_settings(project, environ)
        assert exc_info.value.path == project / ".vagga.settings.yaml"
        assert "cache_dir" in str(exc_info.value)

    def test_site_override_exact_match(self, layout, environ):
        """Test a site override only applies to its own project root."""
        home, project = layout
        sibling = project.parent / "other"
        sibling.mkdir()
        self._write(
            home / ".vagga.yaml",
            {
                "storage_dir": "/srv/storage",
                "site_overrides": {str(project): {"storage_dir": "/srv/app", "allowed_dirs": {"src": "/src"}}},
            },
        )

        pinned = read_settings(project, environ)
        assert pinned.external.storage_dir == Path("/srv/app")
        assert pinned.external.allowed_dirs == {"src": Path("/src")}

        other = read_settings(sibling, environ)
        assert other.external.storage_dir == Path("/srv/storage")
        assert other.external.allowed_dirs == {}

        parent = read_settings(project.parent, environ)
        assert parent.external.storage_dir == Path("/srv/storage")

    def test_undecodable_project_file(self, layout):
        """Test a binary project file fails resolution with a ConfigError."""
        _, project = layout
        path = project / ".vagga.settings.yaml"
        path.write_bytes(b"ubuntu_mirror: \xff\xfe\n")

        with pytest.raises(ConfigError) as exc_info:
            read_settings(project, environ={})
        assert exc_info.value.path == path

    def test_expansion_failure(self, layout, environ):
        """Test a ~ path without HOME aborts with the field name."""
        home, project = layout
        self._write(home / ".vagga" / "settings.yaml", {"storage_dir": "~/storage"})
        del environ["HOME"]

        with pytest.raises(ConfigExpansionError) as exc_info:
            read_settings(project, environ)
        assert exc_info.value.field == "storage_dir"
        assert exc_info.value.path == home / ".vagga" / "settings.yaml"

    def test_custom_tool_and_home_variable(self, layout):
        """Test other tools can reuse the resolution with their own names."""
        home, project = layout
        self._write(home / ".crate.yaml", {"storage_dir": "/srv/crate"})
        self._write(project / ".crate.settings.yaml", {"version_check": False})

        settings = read_settings(project, {"CRATE_HOME": str(home)}, tool="crate", home_var="CRATE_HOME")

        assert settings.external.storage_dir == Path("/srv/crate")
        assert settings.internal.version_check is False

    def test_reads_process_environment_by_default(self, layout, monkeypatch):
        """Test os.environ is used when no mapping is given."""
        home, project = layout
        self._write(home / ".vagga.yaml", {"proxy_env_vars": False})
        monkeypatch.setenv("VAGGA_USER_HOME", str(home))

        assert read_settings(project).internal.proxy_env_vars is False
