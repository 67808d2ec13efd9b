"""Integration tests for list page API endpoints.

These tests verify list configuration, the preset filter form round trip
and list rendering against stubbed list sources.
"""

from uuid import uuid4

from fastapi import status

from list_pages_api.models.preset_filters import (
    ADD_NEW_FILTER,
    FORM_KEY_MARKER,
    PRESET_FILTERS_WRAPPER,
    REMOVE_DEFAULT_FILTER,
    SET_DEFAULT_FILTER,
)
from list_pages_api.services.facets import FacetDefinition
from list_pages_api.services.list_source import ListResultSet
from list_pages_shared.db.models import BundleSettings

from list_pages_fakes import TICKET_SEARCH_ID, make_content, make_list_page


def page_url(page, suffix: str = "") -> str:
    return f"/api/v1/list-pages/{page.list_page_id}{suffix}"


def wrapper_of(element: dict) -> dict:
    return element["children"][PRESET_FILTERS_WRAPPER]["children"]


# ============================================================================
# Configuration Tests
# ============================================================================


class TestListSources:
    """Tests for GET /api/v1/list-pages/sources."""

    def test_list_sources(self, client, stub_factory):
        stub_factory.available_lists = [
            BundleSettings(entity_type="node", bundle="ticket", label="Ticket", list_pages_enabled=True),
        ]

        response = client.get("/api/v1/list-pages/sources")

        assert response.status_code == status.HTTP_200_OK
        sources = response.json()["sources"]
        assert sources == [
            {
                "entity_type": "node",
                "bundle": "ticket",
                "label": "Ticket",
                "search_id": TICKET_SEARCH_ID,
                "available_filters": {"status": "Status", "tags": "Tags", "created": "Created"},
            }
        ]


class TestCreateAndGet:
    """Tests for creating and reading list pages."""

    def test_create_list_page(self, client, mock_session):
        response = client.post(
            "/api/v1/list-pages",
            json={"title": "Open tickets", "source_entity_type": "node", "source_bundle": "ticket"},
        )

        assert response.status_code == status.HTTP_201_CREATED
        data = response.json()
        assert data["title"] == "Open tickets"
        assert data["preset_filters"] == {}
        assert data["available_filters"] == {"status": "Status", "tags": "Tags", "created": "Created"}
        mock_session.add.assert_called_once()

    def test_create_requires_title(self, client):
        response = client.post("/api/v1/list-pages", json={})
        assert response.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY

    def test_get_list_page(self, client, stored_page):
        response = client.get(page_url(stored_page))

        assert response.status_code == status.HTTP_200_OK
        data = response.json()
        assert data["list_page_id"] == str(stored_page.list_page_id)
        assert data["source_bundle"] == "ticket"

    def test_get_missing_list_page(self, client):
        list_page_id = uuid4()

        response = client.get(f"/api/v1/list-pages/{list_page_id}")

        assert response.status_code == status.HTTP_404_NOT_FOUND
        error = response.json()["error"]
        assert error["code"] == 404
        assert error["message"] == f"List page {list_page_id} not found"


class TestUpdateConfiguration:
    """Tests for PUT /api/v1/list-pages/{id}/config."""

    def test_commit_preset_filters(self, client, stored_page):
        response = client.put(
            page_url(stored_page, "/config"),
            json={"source_entity_type": "node", "source_bundle": "ticket", "preset_filters": {"status": "open"}},
        )

        assert response.status_code == status.HTTP_200_OK
        assert response.json()["preset_filters"] == {"status": ["open"]}
        assert stored_page.preset_filters == {"status": ["open"]}

    def test_omitted_presets_are_kept(self, client, mock_session):
        page = make_list_page(preset_filters={"tags": ["urgent"]})
        mock_session.execute.return_value.scalar_one_or_none.return_value = page

        response = client.put(
            page_url(page, "/config"),
            json={"source_entity_type": "node", "source_bundle": "ticket"},
        )

        assert response.json()["preset_filters"] == {"tags": ["urgent"]}

    def test_unknown_filter_rejected(self, client, stored_page):
        response = client.put(
            page_url(stored_page, "/config"),
            json={"source_entity_type": "node", "source_bundle": "ticket", "preset_filters": {"ghost": ["x"]}},
        )

        assert response.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY
        assert response.json()["error"]["message"] == (
            f"Filter 'ghost' is not available on {TICKET_SEARCH_ID}"
        )
        assert stored_page.preset_filters == {}

    def test_partial_source_rejected(self, client, stored_page):
        response = client.put(page_url(stored_page, "/config"), json={"source_entity_type": "node"})

        assert response.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY

    def test_unavailable_source_rejected(self, client, stored_page):
        response = client.put(
            page_url(stored_page, "/config"),
            json={"source_entity_type": "node", "source_bundle": "unknown"},
        )

        assert response.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY
        assert "node:unknown" in response.json()["error"]["message"]


# ============================================================================
# Preset Filter Form Tests
# ============================================================================


class TestPresetFiltersForm:
    """Tests for POST /api/v1/list-pages/{id}/preset-filters/form."""

    def test_summary(self, client, mock_session):
        page = make_list_page(preset_filters={"status": ["open"]})
        mock_session.execute.return_value.scalar_one_or_none.return_value = page

        response = client.post(page_url(page, "/preset-filters/form"), json={})

        assert response.status_code == status.HTTP_200_OK
        data = response.json()
        assert data["mode"] == "summary"
        assert data["current_filters"] == {"status": ["open"]}
        table = wrapper_of(data["element"])["summary"]["children"]["table"]
        assert table["rows"] == [["Status", "Open"]]

    def test_pick_filter_to_edit(self, client, stored_page):
        response = client.post(
            page_url(stored_page, "/preset-filters/form"),
            json={
                "triggering_element": ADD_NEW_FILTER,
                "values": {PRESET_FILTERS_WRAPPER: {"summary": {"add_new": "status"}}},
            },
        )

        data = response.json()
        assert data["mode"] == "editing"
        edit = wrapper_of(data["element"])["edit"]
        assert edit["title"] == "Set default value for Status"
        assert edit["children"]["status"]["options"] == {"": "- Any -", "open": "Open", "closed": "Closed"}

    def test_set_value(self, client, stored_page):
        response = client.post(
            page_url(stored_page, "/preset-filters/form"),
            json={
                "triggering_element": SET_DEFAULT_FILTER,
                "values": {
                    PRESET_FILTERS_WRAPPER: {
                        "current_filters": {},
                        "edit": {"filter_key": "status", "status": "closed"},
                    }
                },
            },
        )

        data = response.json()
        assert data["mode"] == "summary"
        assert data["current_filters"] == {"status": ["closed"]}
        # Nothing is committed until the configuration is saved
        assert stored_page.preset_filters == {}

    def test_remove_value(self, client, stored_page):
        response = client.post(
            page_url(stored_page, "/preset-filters/form"),
            json={
                "triggering_element": REMOVE_DEFAULT_FILTER,
                "values": {
                    PRESET_FILTERS_WRAPPER: {
                        "current_filters": {"status": ["open"], "tags": ["urgent"]},
                        "edit": {"filter_key": "status"},
                    }
                },
            },
        )

        assert response.json()["current_filters"] == {"tags": ["urgent"]}

    def test_foreign_form_key_marker(self, client, stored_page):
        """Test that a marker naming another form refreshes this form's container."""
        response = client.post(
            page_url(stored_page, "/preset-filters/form"),
            json={
                "form_key": "list_config",
                "triggering_element": SET_DEFAULT_FILTER,
                "values": {
                    FORM_KEY_MARKER: "other_instance",
                    PRESET_FILTERS_WRAPPER: {"edit": {"filter_key": "status", "status": "open"}},
                },
            },
        )

        assert response.status_code == status.HTTP_200_OK
        data = response.json()
        assert data["form_key"] == "list_config"
        assert data["element"]["attributes"]["id"] == "list_config-wrapper"
        assert PRESET_FILTERS_WRAPPER in data["element"]["children"]
        assert data["current_filters"] == {"status": ["open"]}

    def test_malformed_current_filters_rejected(self, client, stored_page):
        response = client.post(
            page_url(stored_page, "/preset-filters/form"),
            json={"values": {PRESET_FILTERS_WRAPPER: {"current_filters": ["status"]}}},
        )

        assert response.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY
        assert response.json()["error"]["message"] == "current_filters must map filter keys to values"

    def test_page_without_list(self, client, mock_session):
        page = make_list_page(None, None)
        mock_session.execute.return_value.scalar_one_or_none.return_value = page

        response = client.post(page_url(page, "/preset-filters/form"), json={})

        data = response.json()
        assert data["mode"] is None
        assert data["current_filters"] == {}
        assert PRESET_FILTERS_WRAPPER not in data["element"]["children"]

    def test_invalid_date_rejected(self, client, stored_page):
        response = client.post(
            page_url(stored_page, "/preset-filters/form"),
            json={
                "triggering_element": SET_DEFAULT_FILTER,
                "values": {
                    PRESET_FILTERS_WRAPPER: {
                        "edit": {"filter_key": "created", "created": {"from": "yesterday", "to": ""}},
                    }
                },
            },
        )

        assert response.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY

    def test_broken_facet_configuration(self, app, client, stored_page):
        """Test that unknown widgets surface as configuration errors."""
        app.state.facet_definitions = [
            FacetDefinition(
                id="status",
                name="Status",
                facet_source_id=TICKET_SEARCH_ID,
                field="status",
                widget="slider",
            )
        ]

        response = client.post(
            page_url(stored_page, "/preset-filters/form"),
            json={
                "triggering_element": ADD_NEW_FILTER,
                "values": {PRESET_FILTERS_WRAPPER: {"summary": {"add_new": "status"}}},
            },
        )

        assert response.status_code == status.HTTP_500_INTERNAL_SERVER_ERROR
        assert response.json()["error"]["message"].startswith("Configuration Error:")


# ============================================================================
# List Results Tests
# ============================================================================


class TestListResults:
    """Tests for GET /api/v1/list-pages/{id}/results."""

    def test_results(self, client, stored_page, list_source):
        list_source.result_set = ListResultSet(
            items=[make_content("Printer on fire"), make_content("Coffee machine")],
            total_count=25,
        )

        response = client.get(page_url(stored_page, "/results"), params={"page": 1, "f": "tags:urgent"})

        assert response.status_code == status.HTTP_200_OK
        data = response.json()
        assert data["has_list"] is True
        assert [item["title"] for item in data["items"]] == ["Printer on fire", "Coffee machine"]
        assert data["pager"] == {
            "current_page": 1,
            "items_per_page": 10,
            "total": 25,
            "total_pages": 3,
            "has_next": True,
            "has_prev": True,
        }
        assert data["sort"] == {"created": "DESC"}
        assert data["applied_filters"] == {"tags": ["urgent"]}

    def test_list_executes_once_per_request(self, client, stored_page, list_source):
        """Test that the items, pager and summary share one execution."""
        client.get(page_url(stored_page, "/results"))

        assert list_source.execution_count == 1

    def test_presets_applied(self, client, mock_session, list_source):
        page = make_list_page(preset_filters={"status": ["open"]})
        mock_session.execute.return_value.scalar_one_or_none.return_value = page

        response = client.get(page_url(page, "/results"), params={"f": "status:closed"})

        assert response.json()["applied_filters"] == {"status": ["open"]}

    def test_page_without_list(self, client, mock_session, list_source):
        page = make_list_page(None, None)
        mock_session.execute.return_value.scalar_one_or_none.return_value = page

        response = client.get(page_url(page, "/results"))

        data = response.json()
        assert data["has_list"] is False
        assert data["items"] == []
        assert data["pager"] is None
        assert list_source.execution_count == 0
