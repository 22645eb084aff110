"""Base class for SQLAlchemy models"""
from sqlalchemy import String, TypeDecorator
from sqlalchemy.orm import declarative_base

Base = declarative_base()


class EnumValue(TypeDecorator):
    """
    Stores a Python Enum by its value in a plain string column.

    Tables are built with ``create_all`` on every dialect, so no native
    ENUM type has to exist beforehand.
    """

    impl = String
    cache_ok = True

    def __init__(self, enum_class, *args, **kwargs):
        self.enum_class = enum_class
        kwargs.setdefault("length", max(len(item.value) for item in enum_class))
        super().__init__(*args, **kwargs)

    def process_bind_param(self, value, dialect):
        if value is None:
            return None
        return self.enum_class(value).value

    def process_result_value(self, value, dialect):
        if value is None:
            return None
        return self.enum_class(value)
