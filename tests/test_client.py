import pytest

from mmui.core.client import (
    DEFAULT_URL,
    ClientConfigError,
    _sanitize_url,
    get_config,
    get_session,
)


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch):
    for name in ("MMUI_URL", "MMUI_VERIFY_TLS", "MMUI_TIMEOUT"):
        monkeypatch.delenv(name, raising=False)


@pytest.mark.parametrize(
    ("raw", "expected"),
    [
        ("https://daemon:6443/", "https://daemon:6443"),
        ("https://daemon:6443/?token=x", "https://daemon:6443"),
        ("https://daemon:6443#frag", "https://daemon:6443"),
        (" https://daemon ", "https://daemon"),
    ],
)
def test_sanitize_url(raw, expected):
    assert _sanitize_url(raw) == expected


def test_get_config_defaults():
    config = get_config()

    assert config.url == DEFAULT_URL
    assert config.verify_tls is True
    assert config.timeout == 10.0


def test_get_config_reads_environment(monkeypatch):
    monkeypatch.setenv("MMUI_URL", "http://10.0.0.5:6443/")
    monkeypatch.setenv("MMUI_VERIFY_TLS", "false")
    monkeypatch.setenv("MMUI_TIMEOUT", "2.5")

    config = get_config()

    assert config.url == "http://10.0.0.5:6443"
    assert config.verify_tls is False
    assert config.timeout == 2.5


def test_explicit_arguments_win_over_environment(monkeypatch):
    monkeypatch.setenv("MMUI_URL", "http://env:6443")
    monkeypatch.setenv("MMUI_VERIFY_TLS", "0")

    config = get_config("https://cli:6443", verify_tls=True)

    assert (config.url, config.verify_tls) == ("https://cli:6443", True)


def test_invalid_timeout_falls_back_to_default(monkeypatch):
    monkeypatch.setenv("MMUI_TIMEOUT", "soon")

    assert get_config().timeout == 10.0


@pytest.mark.parametrize("url", ["daemon:6443", "ftp://daemon", "https://"])
def test_get_config_rejects_invalid_url(url):
    with pytest.raises(ClientConfigError, match="Invalid daemon URL"):
        get_config(url)


def test_get_session_applies_tls_setting():
    session = get_session(get_config("https://daemon", verify_tls=False))

    assert session.verify is False
    assert session.headers["Accept"] == "application/json"
