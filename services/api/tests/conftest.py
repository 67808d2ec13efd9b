"""Pytest configuration and fixtures for API tests."""

from collections.abc import Generator
from contextlib import asynccontextmanager
from unittest.mock import AsyncMock, MagicMock

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from list_pages_api.services.entity_metadata import SortSetting
from list_pages_api.services.facets import FacetDefinition
from list_pages_api.services.facets_manager import FacetsManager
from list_pages_api.services.list_source import ListResultSet
from list_pages_shared.db.models import ListPage

from list_pages_fakes import (
    TICKET_SEARCH_ID,
    StubEntityMetadata,
    StubListSource,
    StubListSourceFactory,
    make_list_page,
)


# ============================================================================
# Facet Fixtures
# ============================================================================


@pytest.fixture
def facet_definitions() -> list[FacetDefinition]:
    """Facets of the ticket list: a labeled select, a multiselect and a date range."""
    return [
        FacetDefinition(
            id="status",
            name="Status",
            facet_source_id=TICKET_SEARCH_ID,
            field="status",
            widget="select",
            processors=[
                {"id": "active_items", "weight": -10},
                {"id": "value_labels", "settings": {"labels": {"open": "Open", "closed": "Closed"}}},
                {"id": "count_sort", "weight": 10},
            ],
        ),
        FacetDefinition(
            id="tags",
            name="Tags",
            facet_source_id=TICKET_SEARCH_ID,
            field="tags",
            widget="multiselect",
            processors=[{"id": "active_items"}],
        ),
        FacetDefinition(
            id="created",
            name="Created",
            facet_source_id=TICKET_SEARCH_ID,
            field="created",
            widget="date_range",
        ),
    ]


@pytest.fixture
def facets_manager(facet_definitions) -> FacetsManager:
    return FacetsManager(facet_definitions)


@pytest.fixture
def ticket_result_set() -> ListResultSet:
    return ListResultSet(
        items=[],
        total_count=3,
        facet_counts={
            "status": {"closed": 1, "open": 2},
            "tags": {"billing": 2, "urgent": 1},
        },
    )


@pytest.fixture
def list_source(ticket_result_set) -> StubListSource:
    return StubListSource(result_set=ticket_result_set)


@pytest.fixture
def list_page() -> ListPage:
    return make_list_page()


# ============================================================================
# Application Fixtures
# ============================================================================


@pytest.fixture
def mock_session():
    """Create a mock database session for testing.

    Sets up a mock that returns SQLAlchemy-like result objects for common
    query patterns.
    """
    session = AsyncMock()

    mock_result = MagicMock()
    mock_scalars = MagicMock()
    mock_scalars.all.return_value = []
    mock_scalars.first.return_value = None
    mock_result.scalars.return_value = mock_scalars
    mock_result.scalar.return_value = 0
    mock_result.scalar_one_or_none.return_value = None
    mock_result.all.return_value = []

    session.execute = AsyncMock(return_value=mock_result)
    session.add = MagicMock()
    session.flush = AsyncMock()
    session.commit = AsyncMock()
    session.rollback = AsyncMock()
    session.close = AsyncMock()
    return session


@pytest.fixture
def stub_factory(list_source) -> StubListSourceFactory:
    return StubListSourceFactory({("node", "ticket"): list_source})


@pytest.fixture
def stub_metadata() -> StubEntityMetadata:
    return StubEntityMetadata(SortSetting(name="created", direction="DESC"))


@pytest.fixture
def app(mock_session, facet_definitions, stub_factory, stub_metadata):
    """Create a FastAPI test application with mocked dependencies.

    Skips the lifespan database initialization and serves list sources from
    the stub factory.
    """
    from list_pages_api.dependencies.list_pages import (
        get_entity_metadata,
        get_list_source_factory,
    )
    from list_pages_api.main import register_exception_handlers
    from list_pages_api.middleware import CorrelationIdMiddleware
    from list_pages_api.routes import health, list_pages
    from list_pages_shared.db.connection import get_session

    @asynccontextmanager
    async def mock_lifespan(app: FastAPI):
        app.state.db_initialized = False
        yield

    application = FastAPI(title="List Pages API", version="0.1.0", lifespan=mock_lifespan)
    application.state.facet_definitions = facet_definitions
    application.add_middleware(CorrelationIdMiddleware)
    register_exception_handlers(application)

    application.include_router(health.router)
    application.include_router(list_pages.router)

    async def mock_get_session():
        yield mock_session

    application.dependency_overrides[get_session] = mock_get_session
    application.dependency_overrides[get_list_source_factory] = lambda: stub_factory
    application.dependency_overrides[get_entity_metadata] = lambda: stub_metadata
    return application


@pytest.fixture
def client(app) -> Generator[TestClient, None, None]:
    """Create a synchronous test client."""
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def stored_page(mock_session, list_page) -> ListPage:
    """Make the mocked session return ``list_page`` for page lookups."""
    mock_session.execute.return_value.scalar_one_or_none.return_value = list_page
    return list_page
