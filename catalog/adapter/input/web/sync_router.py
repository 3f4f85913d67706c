from fastapi import APIRouter
from fastapi.responses import JSONResponse

from app.batch.sync_batch import run_sync_once

sync_router = APIRouter(tags=["sync"])


@sync_router.post("")
async def trigger_sync():
    """
    수동 동기화 실행용 엔드포인트. 실패 사유의 상세 내용은 sync_log 에 남는다.
    """
    result = await run_sync_once()
    if not result.success:
        return JSONResponse({"error": result.message, "run_id": result.run_id}, status_code=500)
    return {"success": True, "run_id": result.run_id, "videos_synced": result.videos_synced}
