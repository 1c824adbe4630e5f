import pytest

from reddit_discourse.config import DEFAULT_USER_AGENT, Settings, load_settings

ENV_KEYS = [
    "REDDIT_CLIENT_ID",
    "REDDIT_CLIENT_SECRET",
    "REDDIT_USER_AGENT",
    "REDDIT_USERNAME",
    "REDDIT_PASSWORD",
    "REDDIT_DISCOURSE_HASH_SALT",
]


@pytest.fixture
def clean_env(monkeypatch, tmp_path):
    # setenv first so monkeypatch restores the pre-test state, even for keys
    # that load_dotenv sets during the test
    for key in ENV_KEYS:
        monkeypatch.setenv(key, "placeholder")
        monkeypatch.delenv(key)
    monkeypatch.chdir(tmp_path)
    return tmp_path


def test_load_settings_from_env_file(clean_env):
    env = clean_env / "creds.env"
    env.write_text(
        "REDDIT_CLIENT_ID=abc\nREDDIT_CLIENT_SECRET=shh\nREDDIT_USER_AGENT=tests/1.0\n"
        "REDDIT_DISCOURSE_HASH_SALT=pepper\n",
        encoding="utf-8",
    )
    settings = load_settings(env)
    assert settings.client_id == "abc"
    assert settings.client_secret == "shh"
    assert settings.user_agent == "tests/1.0"
    assert settings.hash_salt == "pepper"
    assert settings.has_credentials
    assert not settings.is_script_app


def test_missing_explicit_env_file_raises(clean_env):
    with pytest.raises(FileNotFoundError):
        load_settings(clean_env / "nope.env")


def test_defaults_without_env(clean_env):
    settings = load_settings()
    assert settings.client_id is None
    assert settings.user_agent == DEFAULT_USER_AGENT
    assert settings.hash_salt == ""
    assert not settings.has_credentials


def test_script_app_needs_username_and_password():
    assert Settings(username="u", password="p").is_script_app
    assert not Settings(username="u").is_script_app
