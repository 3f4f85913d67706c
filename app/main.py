import asyncio
import os
from contextlib import asynccontextmanager

from dotenv import load_dotenv
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from app.batch.sync_batch import start_sync_scheduler
from catalog.adapter.input.web.stats_router import stats_router
from catalog.adapter.input.web.sync_router import sync_router
from catalog.adapter.input.web.video_router import video_router
from config.database.session import init_db_schema
from config.logging_config import configure_logging

load_dotenv()
configure_logging()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    FastAPI lifespan 훅을 활용해 스키마 생성과 동기화 배치 태스크를 관리합니다.
    """
    init_db_schema()
    app.state.sync_task = asyncio.create_task(start_sync_scheduler())
    try:
        yield
    finally:
        task = getattr(app.state, "sync_task", None)
        if task:
            task.cancel()


app = FastAPI(title="Creator Catalog Sync", version="0.1.0", lifespan=lifespan)

origins_env = os.getenv("CORS_ORIGINS")
origins = [origin for origin in origins_env.split(",") if origin] if origins_env else ["http://localhost:3000"]

app.add_middleware(
    CORSMiddleware,
    allow_origins=origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(sync_router, prefix="/sync")
app.include_router(video_router, prefix="/videos")
app.include_router(stats_router, prefix="/stats")


@app.get("/health")
def health_check() -> dict[str, str]:
    """
    헬스체크 엔드포인트입니다.
    """
    return {"status": "ok"}


if __name__ == "__main__":
    import uvicorn

    host = os.getenv("APP_HOST", "0.0.0.0")
    port = int(os.getenv("APP_PORT", "8000"))
    uvicorn.run(app, host=host, port=port)
