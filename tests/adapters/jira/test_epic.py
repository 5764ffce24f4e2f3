from __future__ import annotations

import pytest
from conftest import PagedEpicServer, StubClient, make_epic_payload

from jira_epic_table.adapters.api.base import APIError, DecodeError, NotFoundError
from jira_epic_table.adapters.base import QueryCancelledError
from jira_epic_table.adapters.jira.epic import (
    PAGE_SIZE,
    Epic,
    ListEpicResult,
    get_epic,
    is_soft_miss,
    list_epics,
    table_jira_epic,
)
from jira_epic_table.core.engine import collect
from jira_epic_table.core.query import QueryData

SCENARIO_PAYLOAD = {
    "id": 10,
    "key": "PROJ-1",
    "name": "Launch",
    "done": False,
    "self": "https://x/epic/10",
    "summary": "s",
    "color": {"key": "blue"},
}


def _list_query(sink):
    return QueryData(table=table_jira_epic(), quals={}, sink=sink)


@pytest.mark.parametrize("total", [0, 3, 4, 6])
def test_list_epics_emits_every_epic_once_in_order(make_context, total):
    page_size = 3
    client = StubClient(PagedEpicServer(total=total, page_size=page_size))
    streamed = []

    list_epics(make_context(client), _list_query(streamed.append))

    assert [epic.key for epic in streamed] == [f"PROJ-{index}" for index in range(total)]
    assert all(isinstance(epic, Epic) for epic in streamed)
    assert len(client.requests) == max(1, -(-total // page_size))


def test_list_epics_advances_cursor_by_returned_values(make_context):
    client = StubClient(PagedEpicServer(total=7, page_size=3))

    list_epics(make_context(client), _list_query(lambda item: None))

    assert client.paths == [
        f"/rest/agile/1.0/epic/search?startAt=0&maxResults={PAGE_SIZE}",
        f"/rest/agile/1.0/epic/search?startAt=3&maxResults={PAGE_SIZE}",
        f"/rest/agile/1.0/epic/search?startAt=6&maxResults={PAGE_SIZE}",
    ]


def test_list_epics_cursor_uses_server_start_at(make_context):
    pages = {
        0: {"startAt": 0, "isLast": False, "values": [make_epic_payload(0), make_epic_payload(1)]},
        2: {"startAt": 2, "isLast": True, "values": [make_epic_payload(2)]},
    }

    def handler(path):
        start = int(path.split("startAt=")[1].split("&")[0])
        return pages[start]

    client = StubClient(handler)
    streamed = []

    list_epics(make_context(client), _list_query(streamed.append))

    assert len(streamed) == 3
    assert "startAt=2" in client.paths[1]


def test_list_epics_stops_after_last_page(make_context):
    def handler(path):
        if "startAt=0" in path:
            return {"startAt": 0, "isLast": True, "values": [make_epic_payload(0)], "total": 50}
        raise AssertionError(f"unexpected request {path}")

    client = StubClient(handler)

    list_epics(make_context(client), _list_query(lambda item: None))

    assert len(client.requests) == 1


def test_list_epics_stops_on_empty_page(make_context):
    client = StubClient(lambda path: {"startAt": 0, "isLast": False, "values": []})

    list_epics(make_context(client), _list_query(lambda item: None))

    assert len(client.requests) == 1


def test_list_epics_propagates_page_failure(make_context):
    def handler(path):
        if "startAt=0" in path:
            return {"startAt": 0, "isLast": False, "values": [make_epic_payload(0)]}
        return APIError("HTTP 500 error", status_code=500)

    client = StubClient(handler)
    streamed = []

    with pytest.raises(APIError):
        list_epics(make_context(client), _list_query(streamed.append))

    assert len(streamed) == 1


def test_list_epics_has_no_soft_miss(make_context):
    client = StubClient(lambda path: NotFoundError("HTTP 404", status_code=404))

    with pytest.raises(NotFoundError):
        list_epics(make_context(client), _list_query(lambda item: None))


def test_list_epics_surfaces_malformed_page(make_context):
    client = StubClient(lambda path: {"startAt": 0, "isLast": True, "values": "oops"})

    with pytest.raises(TypeError):
        list_epics(make_context(client), _list_query(lambda item: None))


def test_list_epics_checks_cancellation_between_pages(make_context):
    client = StubClient(PagedEpicServer(total=10, page_size=2))
    context = make_context(client)
    streamed = []

    def sink(item):
        streamed.append(item)
        if len(streamed) == 2:
            context.cancel()

    with pytest.raises(QueryCancelledError):
        list_epics(context, _list_query(sink))

    assert len(client.requests) == 1
    assert len(streamed) == 2


def test_get_epic_prefers_key_over_id(make_context):
    client = StubClient(lambda path: SCENARIO_PAYLOAD)
    query = QueryData(table=table_jira_epic(), quals={"id": 10, "key": "PROJ-1"})

    get_epic(make_context(client), query)

    assert client.paths == ["/rest/agile/1.0/epic/PROJ-1"]


def test_get_epic_by_id(make_context):
    client = StubClient(lambda path: SCENARIO_PAYLOAD)
    query = QueryData(table=table_jira_epic(), quals={"id": 10})

    epic = get_epic(make_context(client), query)

    assert client.paths == ["/rest/agile/1.0/epic/10"]
    assert epic.id == 10


def test_get_epic_without_qualifiers_targets_id_zero(make_context):
    client = StubClient(lambda path: NotFoundError("HTTP 404", status_code=404))
    query = QueryData(table=table_jira_epic(), quals={})

    assert get_epic(make_context(client), query) is None
    assert client.paths == ["/rest/agile/1.0/epic/0"]


@pytest.mark.parametrize(
    "error",
    [
        NotFoundError("HTTP 404 error", status_code=404),
        APIError("HTTP 400 error", status_code=400),
    ],
)
def test_get_epic_soft_miss(make_context, error):
    client = StubClient(lambda path: error)
    query = QueryData(table=table_jira_epic(), quals={"key": "NOPE-1"})

    assert get_epic(make_context(client), query) is None


@pytest.mark.parametrize("status_code", [401, 403, 500])
def test_get_epic_propagates_other_errors(make_context, status_code):
    client = StubClient(lambda path: APIError(f"HTTP {status_code} error", status_code=status_code))
    query = QueryData(table=table_jira_epic(), quals={"key": "PROJ-1"})

    with pytest.raises(APIError) as excinfo:
        get_epic(make_context(client), query)

    assert excinfo.value.status_code == status_code


def test_get_epic_propagates_transport_failure(make_context):
    client = StubClient(lambda path: APIError("connection refused"))
    query = QueryData(table=table_jira_epic(), quals={"id": 5})

    with pytest.raises(APIError):
        get_epic(make_context(client), query)


def test_get_epic_respects_cancellation(make_context):
    client = StubClient(lambda path: SCENARIO_PAYLOAD)
    context = make_context(client)
    context.cancel()

    with pytest.raises(QueryCancelledError):
        get_epic(context, QueryData(table=table_jira_epic(), quals={"key": "PROJ-1"}))

    assert client.requests == []


def test_get_epic_scenario_row(make_context):
    client = StubClient(lambda path: SCENARIO_PAYLOAD)

    rows = collect(table_jira_epic(), make_context(client), {"key": "PROJ-1"})

    assert rows == [
        {
            "id": 10,
            "name": "Launch",
            "key": "PROJ-1",
            "done": False,
            "self": "https://x/epic/10",
            "summary": "s",
            "color": {"key": "blue"},
            "title": "Launch",
        }
    ]


def test_get_miss_yields_no_rows(make_context):
    client = StubClient(lambda path: NotFoundError("HTTP 404", status_code=404))

    assert collect(table_jira_epic(), make_context(client), {"id": 999}) == []


def test_title_mirrors_name():
    epic = Epic.from_payload({"id": 1, "name": "Foo"})
    row = table_jira_epic().project(epic)

    assert epic.title == "Foo"
    assert row["title"] == "Foo"
    assert row["name"] == "Foo"


def test_epic_from_payload_fills_missing_fields():
    epic = Epic.from_payload({"id": 3})

    assert epic.key == ""
    assert epic.done is False
    assert epic.color.key == ""


def test_list_result_from_payload_reads_wire_names():
    page = ListEpicResult.from_payload(
        {"maxResults": 50, "startAt": 10, "total": 12, "isLast": True, "values": [make_epic_payload(1)]}
    )

    assert (page.max_results, page.start_at, page.total, page.is_last) == (50, 10, 12, True)
    assert page.values[0].self_url.endswith("/101")


def test_is_soft_miss_classification():
    assert is_soft_miss(NotFoundError("missing", status_code=404))
    assert is_soft_miss(APIError("bad request", status_code=400))
    assert not is_soft_miss(APIError("server", status_code=500))
    assert not is_soft_miss(DecodeError("garbled", status_code=200))
    assert not is_soft_miss(APIError("message mentions 400 but has no status"))


def test_table_declaration():
    table = table_jira_epic()
    table.validate()

    assert table.column_names() == ["id", "name", "key", "done", "self", "summary", "color", "title"]
    assert table.get_config.key_columns.columns == ("id", "key")
    assert table.get_config.key_columns.mode == "any"
    assert table.list_config is not None
