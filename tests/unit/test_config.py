"""Unit tests for configuration loading."""

from pathlib import Path

import pytest

from admitflow.config import (
    DEFAULT_MAX_UPLOAD_BYTES,
    AdmitFlowConfig,
    ConfigError,
    load_config,
)

_ENV_VARS = (
    "ADMITFLOW_CONFIG",
    "ADMITFLOW_DB_PATH",
    "ADMITFLOW_SCHOOL_CODE",
    "ADMITFLOW_MAX_UPLOAD_BYTES",
    "ADMITFLOW_IDENTITY_BACKEND",
    "ADMITFLOW_STORAGE_BACKEND",
    "ADMITFLOW_UPLOAD_DIR",
    "SUPABASE_URL",
    "SUPABASE_SERVICE_ROLE_KEY",
    "SUPABASE_BUCKET",
)


@pytest.fixture(autouse=True)
def clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in _ENV_VARS:
        monkeypatch.delenv(name, raising=False)


@pytest.mark.unit
class TestDefaults:
    """Tests for the default configuration."""

    def test_defaults(self) -> None:
        config = load_config()

        assert config.school_code == "ELBA"
        assert config.max_upload_bytes == DEFAULT_MAX_UPLOAD_BYTES == 5 * 1024 * 1024
        assert config.identity_backend == "local"
        assert config.storage.backend == "local"


@pytest.mark.unit
class TestLoadFromFile:
    """Tests for YAML configuration files."""

    def test_load_yaml(self, tmp_path: Path) -> None:
        path = tmp_path / "admitflow.yaml"
        path.write_text(
            "db_path: /var/lib/admitflow/registry.db\n"
            "school_code: ELB\n"
            "max_upload_bytes: 1048576\n"
            "storage:\n"
            "  local_dir: /srv/uploads\n"
            "logging:\n"
            "  level: DEBUG\n"
            "  console: false\n"
        )

        config = load_config(path)

        assert config.db_path == "/var/lib/admitflow/registry.db"
        assert config.school_code == "ELB"
        assert config.max_upload_bytes == 1048576
        assert config.storage.local_dir == "/srv/uploads"
        assert config.logging.level == "DEBUG"
        assert config.logging.console is False

    def test_config_path_from_env(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        path = tmp_path / "admitflow.yaml"
        path.write_text("school_code: ABC\n")
        monkeypatch.setenv("ADMITFLOW_CONFIG", str(path))

        assert load_config().school_code == "ABC"

    def test_empty_file(self, tmp_path: Path) -> None:
        path = tmp_path / "admitflow.yaml"
        path.write_text("")

        assert load_config(path).school_code == "ELBA"

    def test_missing_file(self, tmp_path: Path) -> None:
        with pytest.raises(ConfigError, match="not found"):
            load_config(tmp_path / "missing.yaml")

    def test_invalid_yaml(self, tmp_path: Path) -> None:
        path = tmp_path / "admitflow.yaml"
        path.write_text("school_code: [unclosed\n")

        with pytest.raises(ConfigError, match="Invalid YAML"):
            load_config(path)

    def test_not_a_mapping(self, tmp_path: Path) -> None:
        path = tmp_path / "admitflow.yaml"
        path.write_text("- just\n- a list\n")

        with pytest.raises(ConfigError, match="mapping"):
            load_config(path)


@pytest.mark.unit
class TestEnvironmentOverrides:
    """Tests for environment variable overrides."""

    def test_env_overrides_file(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        path = tmp_path / "admitflow.yaml"
        path.write_text("school_code: ELB\ndb_path: from-file.db\n")
        monkeypatch.setenv("ADMITFLOW_DB_PATH", "from-env.db")

        config = load_config(path)

        assert config.db_path == "from-env.db"
        assert config.school_code == "ELB"

    def test_supabase_from_env(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("ADMITFLOW_IDENTITY_BACKEND", "supabase")
        monkeypatch.setenv("ADMITFLOW_STORAGE_BACKEND", "supabase")
        monkeypatch.setenv("SUPABASE_URL", "https://abc.supabase.co")
        monkeypatch.setenv("SUPABASE_SERVICE_ROLE_KEY", "service-key")

        config = load_config()

        assert config.identity_backend == "supabase"
        assert config.supabase.service_key == "service-key"
        assert config.supabase.bucket == "student-documents"

    def test_non_integer_upload_limit(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("ADMITFLOW_MAX_UPLOAD_BYTES", "five megabytes")

        with pytest.raises(ConfigError, match="integer"):
            load_config()


@pytest.mark.unit
class TestValidate:
    """Tests for AdmitFlowConfig.validate."""

    @pytest.mark.parametrize("school_code", ["elba", "EL", "ELBAS", "EL8A"])
    def test_bad_school_code(self, school_code: str) -> None:
        with pytest.raises(ConfigError):
            AdmitFlowConfig(school_code=school_code).validate()

    def test_unknown_backend(self) -> None:
        with pytest.raises(ConfigError, match="identity backend"):
            AdmitFlowConfig(identity_backend="ldap").validate()

    def test_supabase_requires_credentials(self) -> None:
        config = AdmitFlowConfig.from_dict({"storage": {"backend": "local"}})
        config.storage.backend = "supabase"

        with pytest.raises(ConfigError, match="Supabase"):
            config.validate()

    def test_non_positive_upload_limit(self) -> None:
        with pytest.raises(ConfigError):
            AdmitFlowConfig.from_dict({"max_upload_bytes": 0})
