"""Tests for src.secrets covering the local credentials fallback.

Run with:
    pytest tests/test_secrets.py --maxfail=1 -v --cov=src.secrets --cov-report=term-missing
"""

import json

from src import secrets


def test_load_local_secrets_missing_and_invalid(tmp_path):
    assert secrets.load_local_secrets(tmp_path / "absent.json") == {}
    broken = tmp_path / "broken.json"
    broken.write_text("{not json", encoding="utf-8")
    assert secrets.load_local_secrets(broken) == {}
    listed = tmp_path / "list.json"
    listed.write_text("[1, 2]", encoding="utf-8")
    assert secrets.load_local_secrets(listed) == {}


def test_resolve_token_prefers_environment(monkeypatch, tmp_path):
    path = tmp_path / "local_secrets.json"
    path.write_text(json.dumps({"github_token": "from-file"}), encoding="utf-8")
    monkeypatch.setenv("GITHUB_TOKEN", "from-env")
    assert secrets.resolve_token("GITHUB_TOKEN", "github_token", path) == "from-env"


def test_resolve_token_falls_back_to_file(monkeypatch, tmp_path):
    path = tmp_path / "local_secrets.json"
    path.write_text(json.dumps({"gitlab_token": "from-file"}), encoding="utf-8")
    monkeypatch.delenv("GITLAB_TOKEN", raising=False)
    monkeypatch.setenv("LOCAL_SECRETS_FILE", str(path))
    assert secrets.resolve_token("GITLAB_TOKEN", "gitlab_token") == "from-file"
    assert secrets.resolve_token("GITHUB_TOKEN_UNSET_FOR_TEST", "missing") is None
