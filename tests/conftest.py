from __future__ import annotations

from typing import Any, Callable, Dict, List, Optional
from urllib.parse import parse_qs, urlsplit

import pytest
from typer.testing import CliRunner

from jira_epic_table.cli.main import app
from jira_epic_table.config import SecretsBundle
from jira_epic_table.core.context import ExecutionContext


def make_epic_payload(index: int) -> Dict[str, Any]:
    return {
        "id": 100 + index,
        "key": f"PROJ-{index}",
        "name": f"Epic {index}",
        "done": index % 2 == 0,
        "self": f"https://jira.example.com/rest/agile/1.0/epic/{100 + index}",
        "summary": f"Summary {index}",
        "color": {"key": f"color_{index % 9}"},
    }


class StubClient:
    """In-memory stand-in for the HTTP client, keyed by request path."""

    def __init__(self, handler: Callable[[str], Any]) -> None:
        self.handler = handler
        self.requests: List[tuple[str, str]] = []

    def new_request(self, method: str, path: str, body: Optional[Any] = None) -> tuple[str, str]:
        return (method, path)

    def do(self, request: tuple[str, str], decode: Optional[Callable[[Any], Any]] = None) -> Any:
        self.requests.append(request)
        outcome = self.handler(request[1])
        if isinstance(outcome, Exception):
            raise outcome
        return decode(outcome) if decode else outcome

    @property
    def paths(self) -> List[str]:
        return [path for _, path in self.requests]


class PagedEpicServer:
    """Serves ``total`` epics in pages of at most ``page_size`` items."""

    def __init__(self, total: int, page_size: int) -> None:
        self.epics = [make_epic_payload(index) for index in range(total)]
        self.page_size = page_size

    def __call__(self, path: str) -> Dict[str, Any]:
        query = parse_qs(urlsplit(path).query)
        start = int(query["startAt"][0])
        values = self.epics[start : start + self.page_size]
        return {
            "maxResults": int(query["maxResults"][0]),
            "startAt": start,
            "total": len(self.epics),
            "isLast": start + len(values) >= len(self.epics),
            "values": values,
        }


@pytest.fixture()
def make_context() -> Callable[[StubClient], ExecutionContext]:
    def _make(client: StubClient) -> ExecutionContext:
        return ExecutionContext(
            secrets=SecretsBundle(source_path=None, data={}),
            client_factory=lambda context: client,
        )

    return _make


@pytest.fixture()
def cli_runner() -> CliRunner:
    return CliRunner()


@pytest.fixture()
def cli_app():
    return app
