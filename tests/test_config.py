import pytest
from pydantic import ValidationError

from core.config import AppSettings, _parse_env_lines, write_user_env_vars


def test_defaults_match_the_documented_policy():
    settings = AppSettings(_env_file=None)
    assert settings.rate_limit_max_calls == 1
    assert settings.rate_limit_window_seconds == 60
    assert settings.ai_max_attempts == 3
    assert settings.ai_backoff_step_seconds == 0.5
    assert settings.timeline_max_results == 10
    assert settings.redis_url is None


def test_reads_prefixed_environment(monkeypatch):
    monkeypatch.setenv("COGSEC_AI_MODEL", "some-model")
    monkeypatch.setenv("COGSEC_X_BEARER_TOKEN", "tok")
    settings = AppSettings(_env_file=None)
    assert settings.ai_model == "some-model"
    assert settings.x_bearer_token == "tok"


def test_rejects_more_than_ten_posts():
    with pytest.raises(ValidationError):
        AppSettings(_env_file=None, timeline_max_results=11)


def test_write_user_env_vars_merges_and_skips_empty(tmp_path):
    env_path = tmp_path / "cfg" / ".env"
    write_user_env_vars({"COGSEC_AI_MODEL": "a", "COGSEC_REDIS_URL": ""}, env_path=env_path)
    write_user_env_vars({"COGSEC_AI_API_KEY": "k"}, env_path=env_path)

    values = _parse_env_lines(env_path.read_text(encoding="utf-8"))
    assert values == {"COGSEC_AI_MODEL": "a", "COGSEC_AI_API_KEY": "k"}
