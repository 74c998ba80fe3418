from sqlalchemy import event
from sqlalchemy.ext.asyncio import create_async_engine,AsyncSession,AsyncEngine
from sqlmodel import SQLModel
from sqlalchemy.orm import sessionmaker
from course_admin.config import db_settings,app_settings


def enable_sqlite_savepoints(engine:AsyncEngine):
    """
    pysqlite/aiosqlite start transactions lazily and break SAVEPOINT,
    so BEGIN is emitted by SQLAlchemy instead of the driver.
    """
    @event.listens_for(engine.sync_engine, "connect")
    def do_connect(dbapi_connection, connection_record):
        dbapi_connection.isolation_level = None

    @event.listens_for(engine.sync_engine, "begin")
    def do_begin(conn):
        conn.exec_driver_sql("BEGIN")

    return engine


def build_engine(url:str,echo:bool = False) -> AsyncEngine:
    engine = create_async_engine(url=url,echo=echo)
    if engine.dialect.name == "sqlite":
        enable_sqlite_savepoints(engine)
    return engine


engine = build_engine(db_settings.ASYNC_DB_URL,echo=app_settings.SQL_ECHO)

async_session = sessionmaker(
    bind=engine,class_=AsyncSession,expire_on_commit=False
)


async def create_db_tables(bind:AsyncEngine = engine):
    async with bind.begin() as connection:
        from course_admin.database import models
        await connection.run_sync(SQLModel.metadata.create_all)


async def get_session():
    async with async_session() as session:
        yield session
