"""Tests for configuration management."""

from pathlib import Path

import pytest
from pydantic import ValidationError

from coolify_migrate.core.config_loader import HostConfig, load_config
from coolify_migrate.core.exceptions import ConfigurationError


@pytest.fixture(autouse=True)
def isolated_env(monkeypatch, tmp_path):
    """Keep user config, .env files and COOLIFY_MIGRATE_* variables out of the tests."""
    monkeypatch.setenv("HOME", str(tmp_path / "home"))
    monkeypatch.chdir(tmp_path)
    for var in [
        "COOLIFY_MIGRATE_CONFIG",
        "COOLIFY_MIGRATE_DESTINATION_HOST",
        "COOLIFY_MIGRATE_SSH_KEY_PATH",
        "COOLIFY_MIGRATE_SSH_PORT",
    ]:
        monkeypatch.delenv(var, raising=False)


def test_default_config():
    """Test defaults for everything but the required fields."""
    config = HostConfig(ssh_key_path="/root/.ssh/id_ed25519", destination_host="server.example.com")

    assert config.destination_user == "root"
    assert config.ssh_port == 22
    assert config.connect_timeout == 5
    assert config.backup_source_dir == Path("/data/coolify")
    assert config.backup_file_name == "coolify_backup.tar.gz"
    assert config.volume_root == Path("/var/lib/docker/volumes")
    assert config.service_name == "docker"
    assert config.install_script_url == "https://cdn.coollabs.io/coolify/install.sh"
    assert config.exclude_patterns == ("*.sock",)
    assert config.destination == "root@server.example.com"


def test_config_is_immutable():
    config = HostConfig(ssh_key_path="/k", destination_host="server.example.com")
    with pytest.raises(ValidationError):
        config.destination_host = "other.example.com"


def test_archive_path_resolves_against_cwd(tmp_path):
    config = HostConfig(ssh_key_path="/k", destination_host="server.example.com")
    assert config.archive_path == tmp_path / "coolify_backup.tar.gz"


def test_key_path_expands_user(tmp_path):
    config = HostConfig(ssh_key_path="~/.ssh/id_rsa", destination_host="server.example.com")
    assert config.ssh_key_path == tmp_path / "home" / ".ssh" / "id_rsa"


@pytest.mark.parametrize(
    "host", ["", "-oProxyCommand=evil", "server.example.com; rm -rf /", "host name"]
)
def test_invalid_destination_host(host):
    with pytest.raises(ValidationError):
        HostConfig(ssh_key_path="/k", destination_host=host)


def test_install_url_must_be_https():
    with pytest.raises(ValidationError):
        HostConfig(
            ssh_key_path="/k",
            destination_host="server.example.com",
            install_script_url="http://example.com/install.sh",
        )


def test_load_yaml_config(tmp_path):
    """Test loading configuration from YAML file."""
    config_file = tmp_path / "migrate.yml"
    config_file.write_text(
        """
migration:
  ssh_key_path: ${HOME}/.ssh/id_ed25519
  destination_host: new.example.com
  ssh_port: 2222
  service_name: docker.service
"""
    )

    config = load_config(config_file)

    assert config.destination_host == "new.example.com"
    assert config.ssh_port == 2222
    assert config.service_name == "docker.service"
    assert config.ssh_key_path == tmp_path / "home" / ".ssh" / "id_ed25519"


def test_flat_yaml_config(tmp_path):
    config_file = tmp_path / "migrate.yml"
    config_file.write_text("ssh_key_path: /k\ndestination_host: flat.example.com\n")

    assert load_config(config_file).destination_host == "flat.example.com"


def test_precedence_env_over_file_and_overrides_over_env(tmp_path, monkeypatch):
    config_file = tmp_path / "migrate.yml"
    config_file.write_text("ssh_key_path: /k\ndestination_host: file.example.com\nssh_port: 2200\n")
    monkeypatch.setenv("COOLIFY_MIGRATE_DESTINATION_HOST", "env.example.com")
    monkeypatch.setenv("COOLIFY_MIGRATE_SSH_PORT", "2201")

    config = load_config(config_file, {"ssh_port": 2202, "destination_host": None})

    assert config.destination_host == "env.example.com"
    assert config.ssh_port == 2202


def test_user_config_file_is_read(tmp_path):
    user_config = tmp_path / "home" / ".config" / "coolify-migrate" / "config.yml"
    user_config.parent.mkdir(parents=True)
    user_config.write_text("ssh_key_path: /k\ndestination_host: user.example.com\n")

    assert load_config().destination_host == "user.example.com"


def test_config_path_from_environment(tmp_path, monkeypatch):
    config_file = tmp_path / "env.yml"
    config_file.write_text("ssh_key_path: /k\ndestination_host: envfile.example.com\n")
    monkeypatch.setenv("COOLIFY_MIGRATE_CONFIG", str(config_file))

    assert load_config().destination_host == "envfile.example.com"


def test_missing_config_file(tmp_path):
    with pytest.raises(ConfigurationError, match="does not exist"):
        load_config(tmp_path / "nope.yml")


def test_invalid_yaml(tmp_path):
    config_file = tmp_path / "broken.yml"
    config_file.write_text("invalid: yaml: content\n  - this is not valid\n")

    with pytest.raises(ConfigurationError, match="Failed to load config"):
        load_config(config_file)


def test_unknown_key_rejected(tmp_path):
    config_file = tmp_path / "migrate.yml"
    config_file.write_text("ssh_key_path: /k\ndestination_host: a.example.com\ndestination: typo\n")

    with pytest.raises(ConfigurationError, match="Invalid configuration"):
        load_config(config_file)


def test_missing_required_values():
    with pytest.raises(ConfigurationError):
        load_config()


def test_disallowed_env_var_not_expanded(tmp_path, monkeypatch):
    monkeypatch.setenv("SECRET_TOKEN", "leaked")
    config_file = tmp_path / "migrate.yml"
    config_file.write_text(
        "ssh_key_path: /k\ndestination_host: a.example.com\nservice_name: svc-$SECRET_TOKEN\n"
    )

    assert load_config(config_file).service_name == "svc-$SECRET_TOKEN"


def test_malformed_environment_value(monkeypatch):
    monkeypatch.setenv("COOLIFY_MIGRATE_SSH_PORT", "not-a-port")

    with pytest.raises(ConfigurationError, match="Invalid configuration"):
        load_config(overrides={"ssh_key_path": "/k", "destination_host": "server.example.com"})
