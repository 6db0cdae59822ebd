from contextlib import contextmanager

from sqlalchemy import create_engine
from sqlalchemy.orm import DeclarativeBase, Session, sessionmaker

from pharmacy.config import settings

connect_args = {}
if settings.DATABASE_URL.startswith("sqlite"):
    connect_args["check_same_thread"] = False

engine = create_engine(settings.DATABASE_URL, connect_args=connect_args)
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


class Base(DeclarativeBase):
    pass


def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


@contextmanager
def atomic(db: Session):
    """Run a unit of work: commit on success, roll back everything on any error."""
    try:
        yield db
        db.commit()
    except Exception:
        db.rollback()
        raise


def init_db(bind=None):
    # Import all models so Base.metadata knows about them
    import pharmacy.models.medicine  # noqa: F401
    import pharmacy.models.sale  # noqa: F401
    import pharmacy.models.setting  # noqa: F401
    import pharmacy.models.transfer  # noqa: F401
    import pharmacy.models.user  # noqa: F401

    bind = bind or engine
    Base.metadata.create_all(bind=bind)
