"""SQLAlchemy base metadata and model registration utilities."""

from importlib import import_module

from sqlalchemy.orm import DeclarativeBase


class Base(DeclarativeBase):
    """Base class for ORM models."""


def import_orm_models() -> None:
    """Import ORM models so metadata is fully populated."""

    modules = (
        "giros.db.models.exchange_rate",
        "giros.db.models.bank",
        "giros.db.models.transferencista",
        "giros.db.models.bank_account",
        "giros.db.models.bank_assignment",
        "giros.db.models.minorista",
        "giros.db.models.giro",
        "giros.db.models.minorista_transaction",
        "giros.db.models.bank_account_transaction",
        "giros.db.models.bank_transaction",
    )
    for module_name in modules:
        import_module(module_name)
