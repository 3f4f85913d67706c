from typing import Literal, Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse

from catalog.adapter.input.web.dependencies import get_edit_usecase, get_query_usecase
from catalog.adapter.input.web.request.video_requests import VideoLabelUpdateRequest
from catalog.application.usecase.catalog_query_usecase import CatalogQueryUseCase
from catalog.application.usecase.video_edit_usecase import VideoEditUseCase
from catalog.domain.video_query import VideoQuery

video_router = APIRouter(tags=["videos"])


@video_router.get("")
def list_videos(
    type: Optional[Literal["longform", "short"]] = Query(default=None, description="longform | short"),
    topic: Optional[str] = None,
    brand: Optional[str] = None,
    search: Optional[str] = None,
    sort_by: str = Query(default="view_count"),
    sort_order: Literal["asc", "desc"] = Query(default="desc"),
    page: int = Query(default=1, ge=1),
    limit: int = Query(default=50, ge=1, le=200),
    evergreen: bool = False,
    usecase: CatalogQueryUseCase = Depends(get_query_usecase),
):
    """
    카탈로그 영상 목록. evergreen=true 면 90일 이상 된 영상을 에버그린 점수순으로 반환한다.
    """
    query = VideoQuery(
        video_type=type,
        topic=topic,
        brand=brand,
        search=search,
        sort_by=sort_by,
        sort_order=sort_order,
        page=page,
        limit=limit,
        evergreen=evergreen,
    )
    return JSONResponse(jsonable_encoder(usecase.list_videos(query)))


@video_router.patch("/{video_id}")
def update_video_labels(
    video_id: str,
    request: VideoLabelUpdateRequest,
    usecase: VideoEditUseCase = Depends(get_edit_usecase),
):
    """
    topic/brand 를 수동으로 지정한다. 지정된 필드는 이후 동기화에서 자동 분류로 덮어쓰지 않는다.
    """
    if not usecase.update_labels(video_id, request.model_dump(exclude_unset=True)):
        raise HTTPException(status_code=404, detail="Video not found")
    return {"success": True}
