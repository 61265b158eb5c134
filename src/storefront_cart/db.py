from contextlib import contextmanager

from sqlalchemy import create_engine, text
from sqlalchemy.engine import Engine

from storefront_cart.core.config import DatabaseConfig

STORAGE_TABLE = "cart_storage"


def create_db_engine(database: DatabaseConfig) -> Engine:
    """Build the engine backing durable cart storage"""
    connect_args = {}
    if database.url.startswith("sqlite"):
        # Request threads share the engine
        connect_args["check_same_thread"] = False
    return create_engine(
        database.url,
        echo=database.echo,
        pool_pre_ping=True,
        connect_args=connect_args,
    )


def init_storage_schema(engine: Engine) -> None:
    """Create the key-value table if it does not exist yet"""
    with engine.begin() as conn:
        conn.execute(text(f"""
            CREATE TABLE IF NOT EXISTS {STORAGE_TABLE} (
                namespace   VARCHAR(255) NOT NULL,
                storage_key VARCHAR(512) NOT NULL,
                payload     TEXT         NOT NULL,
                updated_at  TIMESTAMP    DEFAULT CURRENT_TIMESTAMP,
                PRIMARY KEY (namespace, storage_key)
            )
        """))


@contextmanager
def get_connection(engine: Engine):
    with engine.connect() as conn:
        yield conn
