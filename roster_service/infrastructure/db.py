from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from ..config import settings


def create_db_engine(url: str):
    # Добавляем параметры кодировки для PostgreSQL
    connect_args = {}
    pool_args = {}
    if url.startswith("postgresql"):
        connect_args = {"client_encoding": "utf8"}
    if url.startswith("sqlite"):
        # хендлеры FastAPI выполняются в пуле потоков
        connect_args = {"check_same_thread": False}
    else:
        pool_args = {"pool_size": 10, "max_overflow": 20, "pool_recycle": 3600}
    return create_engine(
        url,
        pool_pre_ping=True,
        connect_args=connect_args,
        echo=False,
        **pool_args,
    )


engine = create_db_engine(settings.DATABASE_URL)
SessionLocal = sessionmaker(bind=engine, autocommit=False, autoflush=False)
