from __future__ import annotations

from pathlib import Path

from nodebucket.config import load_settings


def test_defaults(tmp_path: Path) -> None:
    settings = load_settings(environ={"NODEBUCKET_DATA_DIR": str(tmp_path)})
    assert settings.data_dir == tmp_path
    assert settings.environment == "production"
    assert settings.debug is False
    assert settings.port == 3000


def test_yaml_file_then_env_override(tmp_path: Path) -> None:
    (tmp_path / "config.yaml").write_text(
        "environment: development\n"
        "logging:\n  level: debug\n"
        "server:\n  host: 0.0.0.0\n  port: 4000\n  cors: true\n",
        encoding="utf-8",
    )
    settings = load_settings(environ={"NODEBUCKET_DATA_DIR": str(tmp_path), "PORT": "5000"})
    assert settings.environment == "development"
    assert settings.debug is True
    assert settings.log_level == "DEBUG"
    assert settings.host == "0.0.0.0"
    assert settings.port == 5000
    assert settings.enable_cors is True


def test_malformed_config_keeps_defaults(tmp_path: Path) -> None:
    bad = tmp_path / "broken.yaml"
    bad.write_text("server: [oops\n", encoding="utf-8")
    settings = load_settings(environ={"NODEBUCKET_CONFIG": str(bad)})
    assert settings.port == 3000


def test_unknown_environment_falls_back(tmp_path: Path) -> None:
    settings = load_settings(environ={"NODEBUCKET_DATA_DIR": str(tmp_path), "NODEBUCKET_ENV": "staging"})
    assert settings.environment == "production"
