from sqlmodel import SQLModel, create_engine
from pos_pricing.core.config import settings


connect_args = {}
if settings.DATABASE_URL.startswith("sqlite"):
    connect_args["check_same_thread"] = False

engine = create_engine(settings.DATABASE_URL, connect_args=connect_args)


def init_db() -> None:
    # Регистрируем таблицы в metadata
    import pos_pricing.models  # noqa: F401

    SQLModel.metadata.create_all(engine)
