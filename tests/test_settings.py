from __future__ import annotations

from core.settings import DEFAULT_API_BASE_URL, DEFAULT_POLL_INTERVAL, DEFAULT_TIMEOUT, load_settings


def test_defaults():
    settings = load_settings({})
    assert settings.api_base_url == DEFAULT_API_BASE_URL
    assert settings.timeout == DEFAULT_TIMEOUT
    assert settings.poll_interval == DEFAULT_POLL_INTERVAL
    assert settings.log_level == "INFO"


def test_reads_environment():
    settings = load_settings(
        {
            "ERP_API_BASE_URL": "http://10.0.0.5:4000/",
            "ERP_API_TIMEOUT": "3.5",
            "ERP_POLL_INTERVAL": "0",
            "ERP_LOG_LEVEL": "debug",
        }
    )
    assert settings.api_base_url == "http://10.0.0.5:4000"
    assert settings.timeout == 3.5
    assert settings.poll_interval == 0.0
    assert settings.log_level == "DEBUG"


def test_invalid_numbers_fall_back():
    settings = load_settings({"ERP_API_TIMEOUT": "soon", "ERP_POLL_INTERVAL": "-5"})
    assert settings.timeout == DEFAULT_TIMEOUT
    assert settings.poll_interval == DEFAULT_POLL_INTERVAL


def test_dotenv_file_is_loaded(tmp_path, monkeypatch):
    from dotenv import load_dotenv

    env_file = tmp_path / ".env"
    env_file.write_text("ERP_API_BASE_URL=http://erp.school.local:4000\n")
    monkeypatch.delenv("ERP_API_BASE_URL", raising=False)
    load_dotenv(env_file)
    try:
        assert load_settings().api_base_url == "http://erp.school.local:4000"
    finally:
        monkeypatch.delenv("ERP_API_BASE_URL", raising=False)
