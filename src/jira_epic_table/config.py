"""
Secret and connection settings for the Jira epic table adapter.

Secrets are loaded from ``.secrets/secret.toml`` by default. The lookup order is:

1. Explicit ``JIRA_EPIC_SECRETS_PATH`` environment variable.
2. Project-relative ``.secrets/secret.toml`` (both from CWD and the package root).
3. Project-relative ``.secrets/secrets.toml``.
4. Fallback to ``.secrets/secrets.example.toml`` for scaffolding values.

The ``[jira]`` section is parsed into :class:`JiraSettings`::

    [jira]
    base_url = "https://example.atlassian.net"
    username = "someone@example.com"
    token = "api-token"
"""

from __future__ import annotations

import os
import tomllib
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Iterable, Optional

DEFAULT_TIMEOUT = 30.0


@dataclass(slots=True)
class JiraSettings:
    """Connection details for a Jira Cloud or Data Center instance."""

    base_url: Optional[str] = None
    username: Optional[str] = None
    token: Optional[str] = None
    personal_access_token: Optional[str] = None
    timeout: float = DEFAULT_TIMEOUT

    @property
    def uses_basic_auth(self) -> bool:
        return bool(self.username and self.token)


@dataclass(slots=True)
class SecretsBundle:
    """Lightweight container for parsed secret values."""

    source_path: Optional[Path]
    data: Dict[str, Dict[str, object]]
    jira: JiraSettings = field(default_factory=JiraSettings)


def _discover_project_root() -> Optional[Path]:
    current = Path(__file__).resolve()
    for parent in current.parents:
        if (parent / "pyproject.toml").is_file():
            return parent
    return None


def _candidate_paths() -> Iterable[Path]:
    env_override = os.getenv("JIRA_EPIC_SECRETS_PATH")
    if env_override:
        yield Path(env_override).expanduser()

    search_roots = [Path.cwd()]
    package_root = _discover_project_root()
    if package_root and package_root not in search_roots:
        search_roots.append(package_root)

    for base in search_roots:
        secrets_dir = base / ".secrets"
        for filename in ("secret.toml", "secrets.toml", "secrets.example.toml"):
            yield secrets_dir / filename


def _load_toml(path: Path) -> Dict[str, Dict[str, object]]:
    with path.open("rb") as handle:
        return tomllib.load(handle)


def _extract_jira_settings(raw: Dict[str, Dict[str, object]]) -> JiraSettings:
    section = raw.get("jira", {}) if isinstance(raw, dict) else {}
    if not isinstance(section, dict):
        section = {}

    def _extract(key: str) -> Optional[str]:
        value = section.get(key)
        return str(value) if isinstance(value, str) and value else None

    timeout = section.get("timeout")
    return JiraSettings(
        base_url=_extract("base_url"),
        username=_extract("username"),
        token=_extract("token"),
        personal_access_token=_extract("personal_access_token"),
        timeout=float(timeout) if isinstance(timeout, (int, float)) and timeout > 0 else DEFAULT_TIMEOUT,
    )


def load_secrets(strict: bool = False, *, path: Optional[Path] = None) -> SecretsBundle:
    """
    Attempt to load secrets from the configured locations.

    Parameters
    ----------
    strict:
        When ``True`` the function raises ``FileNotFoundError`` if no secrets file is
        discovered. Defaults to ``False`` for ease of use in development environments.
    path:
        Explicit secrets file. Skips discovery when given.
    """

    candidates = [path] if path is not None else _candidate_paths()
    for candidate in candidates:
        if candidate.is_file():
            data = _load_toml(candidate)
            return SecretsBundle(source_path=candidate, data=data, jira=_extract_jira_settings(data))

    if strict:
        raise FileNotFoundError("No secrets file found. Configure JIRA_EPIC_SECRETS_PATH or .secrets/secret.toml.")

    return SecretsBundle(source_path=None, data={})
