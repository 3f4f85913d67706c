import os
import urllib.parse

from dotenv import load_dotenv
from sqlalchemy import create_engine
from sqlalchemy.orm import declarative_base, sessionmaker

load_dotenv()

# SQL_USER, SQL_PASSWORD, SQL_HOST, SQL_PORT, SQL_DATABASE 로 PostgreSQL 접속 정보를 구성합니다.
# DATABASE_URL 이 주어지면 그대로 사용합니다 (로컬 SQLite 등).
password = urllib.parse.quote_plus(os.getenv("SQL_PASSWORD", ""))

DATABASE_URL = os.getenv("DATABASE_URL") or (
    f"postgresql+psycopg2://{os.getenv('SQL_USER','postgres')}:{password}"
    f"@{os.getenv('SQL_HOST','localhost')}:{os.getenv('SQL_PORT','5432')}/{os.getenv('SQL_DATABASE','creator_catalog')}"
)

engine_kwargs: dict = {"echo": os.getenv("SQL_ECHO", "false").lower() == "true"}
if DATABASE_URL.startswith("sqlite"):
    engine_kwargs["connect_args"] = {"check_same_thread": False}
else:
    engine_kwargs["pool_pre_ping"] = True

engine = create_engine(DATABASE_URL, **engine_kwargs)

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

Base = declarative_base()


def init_db_schema():
    """
    애플리케이션 기동 시 테이블이 없을 경우를 대비해 스키마를 생성합니다.
    """
    # 매퍼 등록을 위해 모델 모듈을 먼저 import 한다.
    import catalog.infrastructure.orm.models  # noqa: F401

    Base.metadata.create_all(bind=engine)
