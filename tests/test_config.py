from __future__ import annotations

import pytest

from jira_epic_table.config import DEFAULT_TIMEOUT, load_secrets
from jira_epic_table.core.context import ExecutionContext

SECRETS = """
[jira]
base_url = "https://jira.example.com"
username = "someone@example.com"
token = "api-token"
timeout = 12
"""


def test_load_secrets_from_explicit_path(tmp_path):
    path = tmp_path / "secret.toml"
    path.write_text(SECRETS, encoding="utf-8")

    bundle = load_secrets(path=path)

    assert bundle.source_path == path
    assert bundle.jira.base_url == "https://jira.example.com"
    assert bundle.jira.username == "someone@example.com"
    assert bundle.jira.token == "api-token"
    assert bundle.jira.timeout == 12.0
    assert bundle.jira.uses_basic_auth


def test_load_secrets_honours_env_override(tmp_path, monkeypatch):
    path = tmp_path / "custom.toml"
    path.write_text('[jira]\nbase_url = "https://other.example.com"\npersonal_access_token = "pat"\n', encoding="utf-8")
    monkeypatch.setenv("JIRA_EPIC_SECRETS_PATH", str(path))

    bundle = load_secrets()

    assert bundle.jira.base_url == "https://other.example.com"
    assert bundle.jira.personal_access_token == "pat"
    assert bundle.jira.timeout == DEFAULT_TIMEOUT
    assert not bundle.jira.uses_basic_auth


def test_load_secrets_discovers_cwd_secrets_dir(tmp_path, monkeypatch):
    secrets_dir = tmp_path / ".secrets"
    secrets_dir.mkdir()
    (secrets_dir / "secret.toml").write_text(SECRETS, encoding="utf-8")
    monkeypatch.delenv("JIRA_EPIC_SECRETS_PATH", raising=False)
    monkeypatch.chdir(tmp_path)

    bundle = load_secrets()

    assert bundle.source_path == secrets_dir / "secret.toml"


def test_load_secrets_strict_missing(tmp_path):
    with pytest.raises(FileNotFoundError):
        load_secrets(strict=True, path=tmp_path / "absent.toml")


def test_load_secrets_ignores_malformed_section(tmp_path):
    path = tmp_path / "secret.toml"
    path.write_text('jira = "not a table"\n', encoding="utf-8")

    bundle = load_secrets(path=path)

    assert bundle.jira.base_url is None


def test_build_default_context_uses_explicit_secrets_file(tmp_path):
    path = tmp_path / "secret.toml"
    path.write_text(SECRETS, encoding="utf-8")

    context = ExecutionContext.build_default(secrets_path=path, observability_tags=["cli"])

    assert context.secrets.jira.base_url == "https://jira.example.com"
    assert context.observability_tags == ("cli",)
    assert not context.cancelled
