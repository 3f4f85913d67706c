from fastapi import APIRouter, Depends
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse

from catalog.adapter.input.web.dependencies import get_query_usecase
from catalog.application.usecase.catalog_query_usecase import CatalogQueryUseCase

stats_router = APIRouter(tags=["stats"])


@stats_router.get("")
def get_stats(usecase: CatalogQueryUseCase = Depends(get_query_usecase)):
    """
    전체 요약, 주제/브랜드별 집계, 마지막 동기화 결과, 계정 연결 여부를 반환한다.
    """
    return JSONResponse(jsonable_encoder(usecase.stats()))
