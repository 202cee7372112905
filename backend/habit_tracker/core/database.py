"""
DB 엔진·세션 팩토리 및 스키마 보정(habits.active 컬럼 추가).
각 연산은 `with get_session_factory()() as session:` 단위로 세션을 연다.
"""
import logging
from dataclasses import dataclass

from sqlalchemy import create_engine, event, inspect, text
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import declarative_base, sessionmaker

from habit_tracker.core.config import get_settings

logger = logging.getLogger(__name__)

Base = declarative_base()

_engine: Engine | None = None
_session_factory: sessionmaker | None = None


def _enable_sqlite_foreign_keys(dbapi_connection, connection_record) -> None:
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys = ON")
    cursor.close()


def get_engine() -> Engine:
    global _engine
    if _engine is None:
        url = get_settings().database_url
        connect_args = {}
        if url.startswith("sqlite"):
            connect_args["check_same_thread"] = False
        _engine = create_engine(url, connect_args=connect_args)
        if _engine.dialect.name == "sqlite":
            event.listen(_engine, "connect", _enable_sqlite_foreign_keys)
    return _engine


def get_session_factory() -> sessionmaker:
    global _session_factory
    if _session_factory is None:
        _session_factory = sessionmaker(
            bind=get_engine(), autoflush=False, expire_on_commit=False
        )
    return _session_factory


def init_db() -> None:
    """모델 테이블 생성(없을 때만). 기존 테이블의 누락 컬럼은 ensure_active_column()이 담당."""
    # 모델 모듈을 import해야 Base.metadata에 테이블이 등록된다
    from habit_tracker.domains.habit import models as _habit_models  # noqa: F401
    from habit_tracker.domains.profile import models as _profile_models  # noqa: F401

    Base.metadata.create_all(bind=get_engine())


def dispose_engine() -> None:
    """엔진·세션 팩토리 초기화. DATABASE_URL 변경 후(테스트 등) 재연결용."""
    global _engine, _session_factory
    if _engine is not None:
        _engine.dispose()
    _engine = None
    _session_factory = None


# ── 스키마 보정 ───────────────────────────────────────────────────────────────

REPAIR_SUCCESS = "success"
REPAIR_INCOMPLETE = "incomplete"
REPAIR_FAILED = "failed"


@dataclass
class SchemaRepairResult:
    status: str
    message: str


def is_missing_column_error(exc: Exception) -> bool:
    """DB 오류 메시지에 'column'이 포함되면 컬럼 누락으로 간주한다."""
    return "column" in str(exc).lower()


def _has_column(engine: Engine, table: str, column: str) -> bool:
    return any(c["name"] == column for c in inspect(engine).get_columns(table))


def ensure_active_column(engine: Engine | None = None) -> SchemaRepairResult:
    """
    habits.active 컬럼이 없으면 추가한다(기본값 TRUE + 인덱스).
    - success: 이미 있거나 추가 후 확인됨
    - incomplete: ALTER는 실행됐으나 재확인 시 컬럼이 보이지 않음
    - failed: 테이블 조회 또는 ALTER 실패
    """
    engine = engine or get_engine()
    try:
        if _has_column(engine, "habits", "active"):
            return SchemaRepairResult(REPAIR_SUCCESS, "Column already present")
    except SQLAlchemyError as e:
        logger.error("schema repair: cannot inspect habits table: %s", e)
        return SchemaRepairResult(REPAIR_FAILED, str(e))

    default = "1" if engine.dialect.name == "sqlite" else "TRUE"
    try:
        with engine.begin() as conn:
            conn.execute(text(f"ALTER TABLE habits ADD COLUMN active BOOLEAN DEFAULT {default}"))
            conn.execute(text("CREATE INDEX IF NOT EXISTS habits_active_idx ON habits (active)"))
    except SQLAlchemyError as e:
        logger.error("schema repair: failed to add habits.active: %s", e)
        return SchemaRepairResult(REPAIR_FAILED, str(e))

    try:
        present = _has_column(engine, "habits", "active")
    except SQLAlchemyError as e:
        logger.warning("schema repair: re-inspection failed: %s", e)
        present = False
    if not present:
        logger.warning("schema repair: habits.active still missing after ALTER")
        return SchemaRepairResult(
            REPAIR_INCOMPLETE, "Column addition attempted but may not have succeeded"
        )
    logger.info("schema repair: habits.active added")
    return SchemaRepairResult(REPAIR_SUCCESS, "Column added successfully")
