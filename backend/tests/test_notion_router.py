# backend/tests/test_notion_router.py

from zoneinfo import ZoneInfo

from fastapi.testclient import TestClient

from notion_charts.charts.config import ChartSettings, get_chart_settings
from notion_charts.charts.schemas import CalendarMode, ContributionEntry
from notion_charts.main import create_app
from notion_charts.notion.client import NotionAuthError, NotionNotFoundError
from notion_charts.notion.router import get_notion_service
from notion_charts.notion.schemas import PropertySchema

DATABASE_ID = "0123456789abcdef0123456789abcdef"


def _page(category=None, amount=None, when=None):
    properties = {}
    if category is not None:
        properties["Category"] = {"type": "select", "select": {"name": category}}
    if amount is not None:
        properties["Amount"] = {"type": "number", "number": amount}
    if when is not None:
        properties["Date"] = {"type": "date", "date": {"start": when}}
    return {"id": "page", "properties": properties}


class DummyNotionService:
    """
    ルーター用のダミーサービス。固定のレコードを返し、呼び出しを記録する。
    """

    def __init__(self, records=None, entries=None, schema=None, error=None) -> None:
        self.records = records or []
        self.entries = entries or []
        self.schema = schema or []
        self.error = error
        self.calls: list[tuple] = []

    def fetch_all_records(self, database_id):
        self.calls.append(("records", database_id))
        if self.error:
            raise self.error
        return self.records

    def fetch_schema(self, database_id):
        self.calls.append(("schema", database_id))
        if self.error:
            raise self.error
        return self.schema

    def fetch_contribution_entries(self, database_id, date_property, subject_property, description_property):
        self.calls.append(("contribution", database_id, date_property))
        if self.error:
            raise self.error
        return self.entries


def _create_client_with_dummy_service(service: DummyNotionService) -> TestClient:
    app = create_app()
    app.dependency_overrides[get_notion_service] = lambda: service
    return TestClient(app)


def test_chart_data_aggregates_with_y_property():
    records = [_page("a", 1), _page("b", 5), _page("a", 2)]
    client = _create_client_with_dummy_service(DummyNotionService(records=records))

    resp = client.get(f"/api/notion/{DATABASE_ID}", params={"x": "Category", "y": "Amount", "agg": "average"})

    assert resp.status_code == 200
    body = resp.json()
    assert body["count"] == 3
    assert body["data"] == [{"name": "a", "value": 1.5}, {"name": "b", "value": 5}]


def test_chart_data_counts_without_y_property():
    records = [_page("a"), _page("b"), _page("a"), _page()]
    client = _create_client_with_dummy_service(DummyNotionService(records=records))

    resp = client.get(f"/api/notion/{DATABASE_ID}", params={"x": "Category"})

    assert resp.status_code == 200
    assert resp.json()["data"] == [{"name": "a", "value": 2}, {"name": "b", "value": 1}]


def test_chart_data_applies_post_processing_and_colors():
    records = [_page("a", 3), _page("b", 1), _page("c", 2)]
    client = _create_client_with_dummy_service(DummyNotionService(records=records))

    resp = client.get(
        f"/api/notion/{DATABASE_ID}",
        params={
            "x": "Category",
            "y": "Amount",
            "sortBy": "y",
            "sortOrder": "asc",
            "excluded": "b",
            "palette": "custom",
            "colors": "#000000,#ffffff",
            "catColors": '{"a": "#ff0000"}',
        },
    )

    assert resp.status_code == 200
    assert resp.json()["data"] == [
        {"name": "c", "value": 2, "color": "#000000"},
        {"name": "a", "value": 3, "color": "#ff0000"},
    ]


def test_chart_data_empty_database():
    client = _create_client_with_dummy_service(DummyNotionService(records=[]))

    resp = client.get(f"/api/notion/{DATABASE_ID}", params={"x": "Category"})

    assert resp.status_code == 200
    assert resp.json() == {"data": [], "count": 0, "title": "No data found"}


def test_chart_data_missing_x_returns_400():
    service = DummyNotionService()
    client = _create_client_with_dummy_service(service)

    resp = client.get(f"/api/notion/{DATABASE_ID}")

    assert resp.status_code == 400
    assert resp.json()["detail"] == "Missing required parameter: x"
    assert service.calls == []


def test_chart_data_invalid_database_id_returns_400():
    client = _create_client_with_dummy_service(DummyNotionService())

    resp = client.get("/api/notion/short-id", params={"x": "Category"})

    assert resp.status_code == 400
    assert resp.json()["detail"] == "Invalid database ID format"


def test_chart_data_invalid_sort_options_return_400():
    client = _create_client_with_dummy_service(DummyNotionService(records=[_page("a")]))

    resp = client.get(f"/api/notion/{DATABASE_ID}", params={"x": "Category", "sortBy": "sideways"})
    assert resp.status_code == 400

    resp = client.get(f"/api/notion/{DATABASE_ID}", params={"x": "Category", "catColors": "[1]"})
    assert resp.status_code == 400


def test_chart_data_limit_must_be_an_integer():
    records = [_page("a"), _page("b"), _page("b")]
    client = _create_client_with_dummy_service(DummyNotionService(records=records))

    resp = client.get(f"/api/notion/{DATABASE_ID}", params={"x": "Category", "limit": "many"})
    assert resp.status_code == 400
    assert resp.json()["detail"].startswith("Invalid post-processing options")

    resp = client.get(
        f"/api/notion/{DATABASE_ID}",
        params={"x": "Category", "sortBy": "y", "limit": "1"},
    )
    assert resp.status_code == 200
    assert resp.json()["data"] == [{"name": "b", "value": 2}]


def test_chart_data_not_found_returns_404():
    service = DummyNotionService(error=NotionNotFoundError("Could not find database"))
    client = _create_client_with_dummy_service(service)

    resp = client.get(f"/api/notion/{DATABASE_ID}", params={"x": "Category"})

    assert resp.status_code == 404
    assert "Database not found" in resp.json()["detail"]


def test_chart_data_upstream_errors_return_500():
    for error in (NotionAuthError("Unauthorized"), RuntimeError("boom")):
        client = _create_client_with_dummy_service(DummyNotionService(error=error))

        resp = client.get(f"/api/notion/{DATABASE_ID}", params={"x": "Category"})

        assert resp.status_code == 500
        assert resp.json()["detail"] == "Failed to fetch data from Notion"


def test_missing_token_returns_not_configured(monkeypatch):
    monkeypatch.delenv("NOTION_TOKEN", raising=False)
    client = TestClient(create_app())

    resp = client.get(f"/api/notion/{DATABASE_ID}", params={"x": "Category"})

    assert resp.status_code == 500
    assert resp.json()["detail"] == "Notion token not configured"


def test_time_series_endpoint_buckets_by_week():
    records = [_page(when="2024-07-02", amount=2), _page(when="2024-07-08"), _page(when="2024-07-06")]
    client = _create_client_with_dummy_service(DummyNotionService(records=records))

    resp = client.get(
        f"/api/notion/timeseries/{DATABASE_ID}",
        params={"date": "Date", "value": "Amount", "granularity": "week"},
    )

    assert resp.status_code == 200
    assert resp.json()["data"] == [
        {"name": "2024-06-30", "value": 3},
        {"name": "2024-07-07", "value": 1},
    ]


def test_schema_endpoint():
    schema = [PropertySchema(name="Amount", type="number", is_numeric=True)]
    client = _create_client_with_dummy_service(DummyNotionService(schema=schema))

    resp = client.get(f"/api/notion/schema/{DATABASE_ID}")

    assert resp.status_code == 200
    body = resp.json()
    assert body["count"] == 1
    assert body["properties"][0]["name"] == "Amount"
    assert body["properties"][0]["is_numeric"] is True


def test_contribution_entries_require_all_params():
    client = _create_client_with_dummy_service(DummyNotionService())

    resp = client.get(f"/api/notion/contribution/{DATABASE_ID}", params={"date": "Date"})

    assert resp.status_code == 400
    assert resp.json()["detail"] == "Missing required parameters: subject, description"


def test_contribution_entries_and_calendar():
    entries = [ContributionEntry(date="2024-07-04", subject="Ship", description="release")]
    app = create_app()
    app.dependency_overrides[get_notion_service] = lambda: DummyNotionService(entries=entries)
    app.dependency_overrides[get_chart_settings] = lambda: ChartSettings(
        timezone=ZoneInfo("UTC"),
        calendar_mode=CalendarMode.CALENDAR_YEAR,
    )
    client = TestClient(app)
    params = {"date": "Date", "subject": "Name", "description": "Notes"}

    resp = client.get(f"/api/notion/contribution/{DATABASE_ID}", params=params)
    assert resp.status_code == 200
    assert resp.json() == {
        "entries": [{"date": "2024-07-04", "subject": "Ship", "description": "release"}]
    }

    resp = client.get(f"/api/notion/contribution/{DATABASE_ID}/calendar", params=params)
    assert resp.status_code == 200
    body = resp.json()
    assert body["mode"] == "calendarYear"
    assert all(len(week) == 7 for week in body["weeks"])

    resp = client.get(
        f"/api/notion/contribution/{DATABASE_ID}/calendar",
        params={**params, "mode": "trailing52"},
    )
    assert resp.json()["mode"] == "trailing52"
    assert resp.json()["total_contributions"] == 1
