"""Shared schema building blocks."""

from datetime import datetime
from typing import Annotated, ClassVar

from libs.common.datetime_utils import ensure_utc
from pydantic import AfterValidator, BaseModel, model_validator

# Naive datetimes from clients are taken as UTC.
UTCDatetime = Annotated[datetime, AfterValidator(ensure_utc)]


class PartialUpdate(BaseModel):
    """Body for a partial update: omitted fields stay untouched.

    Fields listed in ``required_columns`` back NOT NULL columns, so an
    explicit ``null`` for them is refused.
    """

    required_columns: ClassVar[frozenset[str]] = frozenset()

    @model_validator(mode="after")
    def reject_null_required_columns(self):
        nulls = sorted(
            name
            for name in self.model_fields_set & self.required_columns
            if getattr(self, name) is None
        )
        if nulls:
            raise ValueError(f"{', '.join(nulls)} cannot be null")
        return self


class MessageResponse(BaseModel):
    message: str


class CountResponse(BaseModel):
    count: int
