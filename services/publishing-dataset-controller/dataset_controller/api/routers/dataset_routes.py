# services/publishing-dataset-controller/dataset_controller/api/routers/dataset_routes.py
from __future__ import annotations

import logging
from typing import List, Type, TypeVar

from fastapi import APIRouter, Depends, Request
from pydantic import BaseModel, ValidationError

from dataset_controller.api.deps import (
    RequestContext,
    get_catalogue_service,
    get_metadata_service,
    request_context,
)
from dataset_controller.core.errors import BadRequest
from dataset_controller.core.guard import check_access_token_and_collection_headers
from dataset_controller.models import (
    DatasetListItem,
    EditionsPage,
    EditMetadata,
    PutMetadataRequest,
    TopicRow,
    VersionsPage,
    WriteResult,
)
from dataset_controller.services import DatasetCatalogueService, MetadataService

router = APIRouter(prefix="/datasets", tags=["datasets"])
logger = logging.getLogger("dataset_controller.api.datasets")

M = TypeVar("M", bound=BaseModel)


async def _decode_body(request: Request, model: Type[M]) -> M:
    raw = await request.body()
    try:
        return model.model_validate_json(raw)
    except ValidationError as e:
        logger.error("error decoding request body: %s", e)
        raise BadRequest("error decoding request body", cause=e)


# ─────────────────────────────────────────────────────────────
# Browse
# ─────────────────────────────────────────────────────────────
@router.get("", response_model=List[DatasetListItem])
async def get_all_datasets(
    ctx: RequestContext = Depends(request_context),
    svc: DatasetCatalogueService = Depends(get_catalogue_service),
) -> List[DatasetListItem]:
    return await svc.list_all(access_token=ctx.access_token, collection_id=ctx.collection_id)


@router.get("/{dataset_id}/create", response_model=List[TopicRow])
async def get_topics(
    dataset_id: str,
    ctx: RequestContext = Depends(request_context),
    svc: DatasetCatalogueService = Depends(get_catalogue_service),
) -> List[TopicRow]:
    return await svc.get_topics(access_token=ctx.access_token, collection_id=ctx.collection_id)


@router.get("/{dataset_id}/editions", response_model=EditionsPage)
async def get_editions(
    dataset_id: str,
    ctx: RequestContext = Depends(request_context),
    svc: DatasetCatalogueService = Depends(get_catalogue_service),
) -> EditionsPage:
    return await svc.get_editions(dataset_id, access_token=ctx.access_token, collection_id=ctx.collection_id)


@router.get("/{dataset_id}/editions/{edition_id}/versions", response_model=VersionsPage)
async def get_versions(
    dataset_id: str,
    edition_id: str,
    ctx: RequestContext = Depends(request_context),
    svc: DatasetCatalogueService = Depends(get_catalogue_service),
) -> VersionsPage:
    return await svc.get_versions(
        dataset_id, edition_id, access_token=ctx.access_token, collection_id=ctx.collection_id
    )


# ─────────────────────────────────────────────────────────────
# Edit metadata
# ─────────────────────────────────────────────────────────────
@router.get(
    "/{dataset_id}/editions/{edition_id}/versions/{version_id}",
    response_model=EditMetadata,
    # unset upstream fields are omitted rather than sent as null
    response_model_exclude_none=True,
)
async def get_edit_metadata(
    dataset_id: str,
    edition_id: str,
    version_id: str,
    ctx: RequestContext = Depends(request_context),
    svc: MetadataService = Depends(get_metadata_service),
) -> EditMetadata:
    return await svc.get_edit_metadata(
        dataset_id, edition_id, version_id, access_token=ctx.access_token, collection_id=ctx.collection_id
    )


@router.put("/{dataset_id}/editions/{edition_id}/versions/{version_id}", response_model=WriteResult)
async def put_metadata(
    dataset_id: str,
    edition_id: str,
    version_id: str,
    request: Request,
    ctx: RequestContext = Depends(request_context),
    svc: MetadataService = Depends(get_metadata_service),
) -> WriteResult:
    # header problems take priority over a malformed body
    check_access_token_and_collection_headers(ctx.access_token, ctx.collection_id)
    body = await _decode_body(request, PutMetadataRequest)
    return await svc.put_metadata(
        dataset_id, edition_id, version_id, body,
        access_token=ctx.access_token, collection_id=ctx.collection_id, lang=ctx.lang,
    )


@router.put("/{dataset_id}/editions/{edition_id}/versions/{version_id}/metadata", response_model=WriteResult)
async def put_editable_metadata(
    dataset_id: str,
    edition_id: str,
    version_id: str,
    request: Request,
    ctx: RequestContext = Depends(request_context),
    svc: MetadataService = Depends(get_metadata_service),
) -> WriteResult:
    check_access_token_and_collection_headers(ctx.access_token, ctx.collection_id)
    view = await _decode_body(request, EditMetadata)
    return await svc.put_editable_metadata(
        dataset_id, edition_id, version_id, view,
        access_token=ctx.access_token, collection_id=ctx.collection_id, lang=ctx.lang,
    )
