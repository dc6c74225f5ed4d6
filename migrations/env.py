"""
Alembic ortamı: sadece kullanıcı tablosu SQL'de; ürün ve sipariş JSON koleksiyonları migration dışında.
URL her zaman storefront ayarlarından gelir (alembic.ini'deki değer yok sayılır).
"""
import sys
from logging.config import fileConfig
from pathlib import Path

from alembic import context
from sqlalchemy import create_engine, pool
from sqlmodel import SQLModel

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.append(str(ROOT))

from storefront import models  # noqa: E402,F401
from storefront.core.database import DATABASE_URL  # noqa: E402

config = context.config
if config.config_file_name is not None:
    fileConfig(config.config_file_name)

target_metadata = SQLModel.metadata

# SQLite ALTER TABLE desteği sınırlı: batch modu tabloyu kopyalayarak değiştirir
_BATCH = DATABASE_URL.startswith("sqlite")


def _configure(**kwargs) -> None:
    context.configure(
        target_metadata=target_metadata,
        compare_type=True,
        render_as_batch=_BATCH,
        **kwargs,
    )


if context.is_offline_mode():
    _configure(url=DATABASE_URL, literal_binds=True, dialect_opts={"paramstyle": "named"})
    with context.begin_transaction():
        context.run_migrations()
else:
    engine = create_engine(DATABASE_URL, poolclass=pool.NullPool)
    with engine.connect() as connection:
        _configure(connection=connection)
        with context.begin_transaction():
            context.run_migrations()
