"""Utility functions for converting database models to API models."""

from collections.abc import Iterable
from typing import TypeVar

from pydantic import BaseModel
from sqlmodel import SQLModel

T = TypeVar("T", bound=SQLModel)  # Database model type
R = TypeVar("R", bound=BaseModel)  # API response model type


def to_response_model(db_model: T | None, response_model_class: type[R], **extra) -> R | None:
    """Convert a database model to an API response model.

    Attributes are read directly from the database model, nested JSON columns
    are validated by the response model's own field types.

    Args:
        db_model: The database model instance to convert
        response_model_class: The API response model class to convert to
        **extra: Additional fields not present on the database model

    Returns:
        An instance of the API response model, or None if db_model is None
    """
    if db_model is None:
        return None
    data = {name: getattr(db_model, name) for name in response_model_class.model_fields if hasattr(db_model, name)}
    data.update(extra)
    return response_model_class.model_validate(data)


def to_response_list(db_models: Iterable[T], response_model_class: type[R]) -> list[R]:
    """Convert a collection of database models, skipping None entries."""
    return [to_response_model(item, response_model_class) for item in db_models if item is not None]
