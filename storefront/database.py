# storefront/database.py
from sqlalchemy import create_engine, CheckConstraint
from sqlalchemy.orm import declarative_base, sessionmaker

from storefront.config import settings

SQLALCHEMY_DATABASE_URL = settings.DATABASE_URL

# Hosted Postgres providers still hand out postgres:// URLs, SQLAlchemy needs postgresql://
if SQLALCHEMY_DATABASE_URL.startswith("postgres://"):
    SQLALCHEMY_DATABASE_URL = SQLALCHEMY_DATABASE_URL.replace("postgres://", "postgresql://", 1)

if "sqlite" in SQLALCHEMY_DATABASE_URL:
    connect_args = {"check_same_thread": False} # Only for SQLite
else:
    connect_args = {}

engine = create_engine(
    SQLALCHEMY_DATABASE_URL, connect_args=connect_args
)

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

Base = declarative_base()

# CHECK constraint restricting a string column to a fixed set of values
def check_in(column_name, values):
    quoted = ", ".join(f"'{v}'" for v in values)
    return CheckConstraint(f"{column_name} IN ({quoted})")

def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()

def init_db(bind=None):
    # Register every model on the metadata before creating tables
    import storefront.models  # noqa: F401
    Base.metadata.create_all(bind=bind or engine)
