from __future__ import annotations

from typing import List, Optional

from fastapi import APIRouter, Depends, Query, Request, status
from fastapi.exceptions import RequestValidationError

from ..client import ComicsClient
from ..schemas import ComicCreate, ComicOut, ComicUpdate, CoverUrlOut, DescriptionOut, DescriptionRequest

router = APIRouter(
    prefix="/api/v1/comics",
    tags=["comics"],
)


# PUBLIC_INTERFACE
def get_client(request: Request) -> ComicsClient:
    """Dependency returning the façade created at application startup."""
    return request.app.state.client


# PUBLIC_INTERFACE
@router.get(
    "/",
    response_model=List[ComicOut],
    summary="List Comics",
    description="List every comic in the collection, in the store's order.",
    responses={
        200: {"description": "Comics retrieved"},
        504: {"description": "Document store timed out"},
    },
)
async def list_comics(client: ComicsClient = Depends(get_client)) -> List[ComicOut]:
    items = await client.records.list()
    return [ComicOut(**it) for it in items]  # type: ignore[arg-type]


# PUBLIC_INTERFACE
@router.post(
    "/",
    response_model=ComicOut,
    status_code=status.HTTP_201_CREATED,
    summary="Create Comic",
    description="Catalogue a new comic and return the stored record.",
    responses={
        201: {"description": "Comic created"},
        422: {"description": "Validation error"},
    },
)
async def create_comic(payload: ComicCreate, client: ComicsClient = Depends(get_client)) -> ComicOut:
    created = await client.records.create(payload.to_payload())
    return ComicOut(**created)  # type: ignore[arg-type]


# PUBLIC_INTERFACE
@router.post(
    "/descriptions",
    response_model=DescriptionOut,
    summary="Generate Description",
    description="Ask the description function for a blurb about the given comic.",
    responses={
        200: {"description": "Description generated"},
        400: {"description": "Missing title or status"},
        502: {"description": "Function returned an unusable or error response"},
        503: {"description": "Function endpoint unreachable"},
    },
)
async def generate_description(
    payload: DescriptionRequest, client: ComicsClient = Depends(get_client)
) -> DescriptionOut:
    description = await client.descriptions.generate(payload.title, payload.status, payload.rating)
    return DescriptionOut(description=description)


# PUBLIC_INTERFACE
@router.get(
    "/covers/url",
    response_model=CoverUrlOut,
    summary="Cover URL",
    description="Derive the delivery URL of a resized cover variant. No network call is made.",
)
def cover_url(
    reference: Optional[str] = Query(None, description="Opaque cover reference"),
    width: Optional[int] = Query(None, ge=0, description="Requested width in pixels"),
    height: Optional[int] = Query(None, ge=0, description="Requested height in pixels"),
    client: ComicsClient = Depends(get_client),
) -> CoverUrlOut:
    return CoverUrlOut(url=client.media.derive_url(reference, width, height))


# PUBLIC_INTERFACE
@router.get(
    "/{comic_id}",
    response_model=ComicOut,
    summary="Get Comic",
    responses={
        200: {"description": "Comic found"},
        404: {"description": "Comic not found"},
    },
)
async def get_comic(comic_id: str, client: ComicsClient = Depends(get_client)) -> ComicOut:
    item = await client.records.get(comic_id)
    return ComicOut(**item)  # type: ignore[arg-type]


# PUBLIC_INTERFACE
@router.patch(
    "/{comic_id}",
    response_model=ComicOut,
    summary="Update Comic",
    description="Update the provided fields of a comic; omitted fields keep their stored value.",
    responses={
        200: {"description": "Comic updated"},
        404: {"description": "Comic not found"},
        422: {"description": "Update would break the status/rating rule"},
    },
)
async def update_comic(
    comic_id: str, payload: ComicUpdate, client: ComicsClient = Depends(get_client)
) -> ComicOut:
    if payload.changes_rating:
        current = await client.records.get(comic_id)
        try:
            payload.check_against(current)
        except ValueError as exc:
            raise RequestValidationError(
                [
                    {
                        "type": "value_error",
                        "loc": ("body",),
                        "msg": str(exc),
                        "input": payload.model_dump(mode="json", exclude_unset=True),
                    }
                ]
            )
    updated = await client.records.update(comic_id, payload.to_payload())
    return ComicOut(**updated)  # type: ignore[arg-type]


# PUBLIC_INTERFACE
@router.delete(
    "/{comic_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete Comic",
    responses={
        204: {"description": "Comic deleted"},
        404: {"description": "Comic not found"},
    },
)
async def delete_comic(comic_id: str, client: ComicsClient = Depends(get_client)) -> None:
    await client.records.delete(comic_id)
    return None
