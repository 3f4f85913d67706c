import logging
import os

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


def configure_logging(level: str | None = None) -> None:
    """
    LOG_LEVEL 환경변수 기준으로 루트 로거를 한 번만 설정합니다.
    """
    level_name = (level or os.getenv("LOG_LEVEL", "INFO")).upper()
    logging.basicConfig(level=getattr(logging, level_name, logging.INFO), format=LOG_FORMAT)
    # googleapiclient 의 discovery 로그는 너무 장황하다.
    logging.getLogger("googleapiclient.discovery_cache").setLevel(logging.ERROR)
