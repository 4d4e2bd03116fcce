from __future__ import annotations

import json
from datetime import date, datetime, timezone, tzinfo
from typing import Annotated, Any, Optional
from zoneinfo import ZoneInfo

from pydantic import (
    AliasChoices,
    AliasGenerator,
    BaseModel,
    BeforeValidator,
    AfterValidator,
    ConfigDict,
)
from pydantic.alias_generators import to_camel

from elbuenmenu_admin.config import get_config


def as_utc(value: Optional[datetime]) -> Optional[datetime]:
    """Return value as an aware UTC datetime; naive values are taken to be UTC."""
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def store_tz() -> tzinfo:
    return ZoneInfo(get_config().store_timezone)


def store_date(value: datetime) -> date:
    """Calendar day of an instant as seen from the store."""
    return as_utc(value).astimezone(store_tz()).date()


def _none_to_zero(value: Any) -> Any:
    return 0 if value is None or value == "" else value


def _to_str_id(value: Any) -> Any:
    if value is None or isinstance(value, str):
        return value
    return str(value)


def _to_date(value: Any) -> Any:
    # The backend sends dates either as YYYY-MM-DD or as full ISO timestamps
    if isinstance(value, str) and len(value) > 10:
        return value[:10]
    if isinstance(value, datetime):
        return value.date()
    return value


def _to_text(value: Any) -> Any:
    if isinstance(value, (dict, list)):
        return json.dumps(value, ensure_ascii=False)
    return value


Money = Annotated[float, BeforeValidator(_none_to_zero)]
Count = Annotated[int, BeforeValidator(_none_to_zero)]
Id = Annotated[str, BeforeValidator(_to_str_id)]
UtcDatetime = Annotated[datetime, AfterValidator(as_utc)]
DateOnly = Annotated[date, BeforeValidator(_to_date)]
Text = Annotated[str, BeforeValidator(_to_text)]


def _both_spellings(field_name: str) -> AliasChoices:
    return AliasChoices(field_name, to_camel(field_name))


class ApiModel(BaseModel):
    """Base for backend records.

    Accepts snake_case and camelCase keys on input and dumps snake_case.
    """
    model_config = ConfigDict(
        populate_by_name=True,
        alias_generator=AliasGenerator(validation_alias=_both_spellings),
        extra="ignore",
    )

    def to_payload(self, exclude: Optional[set[str]] = None) -> dict:
        """JSON-ready dict for POST/PUT bodies."""
        return self.model_dump(mode="json", by_alias=True, exclude=exclude or {"id"})


class CamelApiModel(ApiModel):
    """Base for records the backend exchanges in camelCase."""
    model_config = ConfigDict(
        populate_by_name=True,
        alias_generator=AliasGenerator(
            validation_alias=_both_spellings,
            serialization_alias=to_camel,
        ),
        extra="ignore",
    )
