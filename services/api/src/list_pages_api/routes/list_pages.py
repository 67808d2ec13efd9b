"""List page API routes: configuration, preset filter form and list results."""

from fastapi import APIRouter, Depends, HTTPException, status

from list_pages_shared.db.models import ListPage

from ..dependencies.list_pages import (
    get_facets_manager,
    get_list_execution_manager,
    get_list_page_or_404,
    get_list_page_service,
    get_list_source_factory,
    get_preset_filters_builder,
)
from ..models.base import PagerMeta
from ..models.form import FormElement, FormState
from ..models.list_page import (
    ContentCard,
    ListPageConfigRequest,
    ListPageCreateRequest,
    ListPageResponse,
    ListResultsResponse,
    ListSourceInfo,
    ListSourceListResponse,
    PresetFiltersFormRequest,
    PresetFiltersFormResponse,
)
from ..models.preset_filters import PRESET_FILTERS_WRAPPER, PresetFilterSet, SessionMode
from ..services.facets_manager import FacetsManager
from ..services.list_execution_manager import (
    ListExecutionManager,
    ListExecutionResult,
    ListPageWrapper,
)
from ..services.list_page_service import ListPageService
from ..services.list_source import ListSource, ListSourceFactory, build_search_id
from ..services.preset_filters_builder import ListPresetFiltersBuilder

router = APIRouter(prefix="/api/v1/list-pages", tags=["List Pages"])


async def _resolve_list_source(page: ListPage, factory: ListSourceFactory) -> ListSource | None:
    configuration = ListPageWrapper.from_list_page(page)
    if not configuration.is_configured:
        return None
    return await factory.get(configuration.source_entity_type, configuration.source_bundle)


def _to_list_page_response(page: ListPage, list_source: ListSource | None) -> ListPageResponse:
    return ListPageResponse(
        list_page_id=page.list_page_id,
        title=page.title,
        source_entity_type=page.source_entity_type,
        source_bundle=page.source_bundle,
        preset_filters=PresetFilterSet(page.preset_filters or {}).as_dict(),
        available_filters=list_source.get_available_filters() if list_source else {},
        created_at=page.created_at,
        updated_at=page.updated_at,
    )


async def get_list_execution(
    page: ListPage = Depends(get_list_page_or_404),
    manager: ListExecutionManager = Depends(get_list_execution_manager),
) -> ListExecutionResult | None:
    """Executed list of the page in the path."""
    return await manager.execute_list(page)


async def get_list_items(
    page: ListPage = Depends(get_list_page_or_404),
    manager: ListExecutionManager = Depends(get_list_execution_manager),
) -> list[ContentCard]:
    """Items of the executed list."""
    executed = await manager.execute_list(page)
    if executed is None:
        return []
    return [ContentCard.model_validate(item) for item in executed.result.items]


async def get_list_pager(
    page: ListPage = Depends(get_list_page_or_404),
    manager: ListExecutionManager = Depends(get_list_execution_manager),
) -> PagerMeta | None:
    """Pager of the executed list."""
    executed = await manager.execute_list(page)
    if executed is None or not executed.query.limit:
        return None
    return PagerMeta.create(
        current_page=executed.query.page,
        items_per_page=executed.query.limit,
        total=executed.result.total_count,
    )


@router.get(
    "/sources",
    response_model=ListSourceListResponse,
    summary="List Sources",
    description="List the collections list pages can list",
)
async def list_sources(
    factory: ListSourceFactory = Depends(get_list_source_factory),
    facets_manager: FacetsManager = Depends(get_facets_manager),
) -> ListSourceListResponse:
    sources = []
    for settings in await factory.get_available_lists():
        search_id = build_search_id(settings.entity_type, settings.bundle)
        sources.append(
            ListSourceInfo(
                entity_type=settings.entity_type,
                bundle=settings.bundle,
                label=settings.label,
                search_id=search_id,
                available_filters=facets_manager.get_available_filters(search_id),
            )
        )
    return ListSourceListResponse(sources=sources)


@router.post(
    "",
    response_model=ListPageResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create List Page",
    description="Create a list page, optionally with a list source",
)
async def create_list_page(
    request: ListPageCreateRequest,
    service: ListPageService = Depends(get_list_page_service),
    factory: ListSourceFactory = Depends(get_list_source_factory),
) -> ListPageResponse:
    page = await service.create_list_page(request)
    list_source = await _resolve_list_source(page, factory)
    return _to_list_page_response(page, list_source)


@router.get(
    "/{list_page_id}",
    response_model=ListPageResponse,
    summary="Get List Page",
    description="Get a list page and its list configuration",
)
async def get_list_page(
    page: ListPage = Depends(get_list_page_or_404),
    factory: ListSourceFactory = Depends(get_list_source_factory),
) -> ListPageResponse:
    list_source = await _resolve_list_source(page, factory)
    return _to_list_page_response(page, list_source)


@router.put(
    "/{list_page_id}/config",
    response_model=ListPageResponse,
    summary="Update List Configuration",
    description="Commit the list source and preset filters of a list page",
)
async def update_list_config(
    request: ListPageConfigRequest,
    page: ListPage = Depends(get_list_page_or_404),
    service: ListPageService = Depends(get_list_page_service),
    factory: ListSourceFactory = Depends(get_list_source_factory),
) -> ListPageResponse:
    if bool(request.source_entity_type) != bool(request.source_bundle):
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail="source_entity_type and source_bundle must be set together",
        )

    list_source = None
    if request.source_entity_type and request.source_bundle:
        list_source = await factory.get(request.source_entity_type, request.source_bundle)
        if list_source is None:
            raise HTTPException(
                status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
                detail=f"No list available for {request.source_entity_type}:{request.source_bundle}",
            )

    preset_filters = (
        PresetFilterSet(request.preset_filters) if request.preset_filters is not None else None
    )
    page = await service.update_configuration(
        page,
        request.source_entity_type,
        request.source_bundle,
        preset_filters,
        list_source,
    )
    return _to_list_page_response(page, list_source)


@router.post(
    "/{list_page_id}/preset-filters/form",
    response_model=PresetFiltersFormResponse,
    summary="Preset Filters Form",
    description="Run one round trip of the preset filter form",
)
async def preset_filters_form(
    request: PresetFiltersFormRequest,
    page: ListPage = Depends(get_list_page_or_404),
    factory: ListSourceFactory = Depends(get_list_source_factory),
    builder: ListPresetFiltersBuilder = Depends(get_preset_filters_builder),
) -> PresetFiltersFormResponse:
    configuration = ListPageWrapper.from_list_page(page)
    list_source = await _resolve_list_source(page, factory)
    form_state = FormState(values=request.values, triggering_element=request.triggering_element)

    form = FormElement()
    form[request.form_key] = FormElement(attributes={"id": f"{request.form_key}-wrapper"})
    form = await builder.build_default_filters(
        form,
        form_state,
        request.form_key,
        list_source,
        list_source.get_available_filters() if list_source else {},
        configuration.preset_filters,
    )

    wrapper = form[request.form_key].get(PRESET_FILTERS_WRAPPER)
    if wrapper is None:
        return PresetFiltersFormResponse(
            form_key=request.form_key,
            current_filters=configuration.preset_filters.as_dict(),
            element=form[request.form_key],
        )

    callback = builder.ajax_callback_for(request.triggering_element)
    element = callback(form, form_state) if callback else form[request.form_key]
    return PresetFiltersFormResponse(
        form_key=request.form_key,
        mode=SessionMode.EDITING if "edit" in wrapper else SessionMode.SUMMARY,
        current_filters=wrapper["current_filters"].value,
        element=element,
    )


@router.get(
    "/{list_page_id}/results",
    response_model=ListResultsResponse,
    summary="List Results",
    description=(
        "Execute the list of a list page. Use `page` (0-indexed) to paginate and "
        "repeat `f=facet:value` to filter"
    ),
)
async def list_results(
    page: ListPage = Depends(get_list_page_or_404),
    items: list[ContentCard] = Depends(get_list_items),
    pager: PagerMeta | None = Depends(get_list_pager),
    executed: ListExecutionResult | None = Depends(get_list_execution),
) -> ListResultsResponse:
    if executed is None:
        return ListResultsResponse(list_page_id=page.list_page_id, has_list=False)

    return ListResultsResponse(
        list_page_id=page.list_page_id,
        has_list=True,
        items=items,
        pager=pager,
        sort=executed.query.sort,
        applied_filters=executed.query.filters.as_dict(),
    )
