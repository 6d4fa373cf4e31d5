# wandernav/transport/schemas.py
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator


class SearchApiRequest(BaseModel):
    query: str = Field(min_length=1)
    type: Literal["places", "users", "hazards"]
    latitude: float | None = None
    longitude: float | None = None


class SearchApiResponseItem(BaseModel):
    """One raw row returned by POST /api/search"""
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    id: str
    name: str
    description: str | None = None
    latitude: float | None = None
    longitude: float | None = None
    username: str | None = None
    hazard_type: str | None = Field(default=None, alias="hazardType")

    @field_validator("id", mode="before")
    @classmethod
    def _id_as_str(cls, value):
        # The backend serializes ids as strings but older builds sent numbers.
        if isinstance(value, (int, float)) and not isinstance(value, bool):
            return str(value)
        return value


RawResult = SearchApiResponseItem


class WeatherApiResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    temp: float
    description: str
    icon: str
    location_name: str | None = Field(default=None, alias="locationName")
    humidity: float | None = None
    wind_speed: float | None = Field(default=None, alias="windSpeed")


class AuthRequest(BaseModel):
    username: str = Field(min_length=1, max_length=64)
    password: str = Field(min_length=1, max_length=256)
