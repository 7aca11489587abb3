from sqlalchemy.orm import DeclarativeBase


class Base(DeclarativeBase):
    """
    Base class for all SQLAlchemy ORM models.

    All models in this application inherit from this base class so that
    Alembic and the test fixtures can see one shared metadata object.
    """

    pass
