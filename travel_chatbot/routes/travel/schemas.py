from pydantic import BaseModel, Field
from typing import Optional, List


class CityResponse(BaseModel):
    id: int
    name: str
    slug: str
    description: str
    image_url: str


class BudgetRangeResponse(BaseModel):
    """Nightly hotel price bands for a city; the high band has no ceiling"""
    id: int
    city_id: int
    low_min: int
    low_max: int
    medium_min: int
    medium_max: int
    high_min: int
    currency: str


class CityDetailResponse(CityResponse):
    budget_ranges: Optional[BudgetRangeResponse] = None


class TransportCostResponse(BaseModel):
    id: int
    hotel_id: int
    from_location: str
    min_price: int
    max_price: int
    currency: str
    method: str
    warning: Optional[str] = None


class HotelResponse(BaseModel):
    id: int
    city_id: int
    name: str
    area: str
    avg_price: int
    safety_score: int = Field(..., ge=1, le=10)
    value_score: int = Field(..., ge=1, le=10)
    description: str
    image_url: str
    tags: List[str] = Field(default_factory=list)
    transport_costs: List[TransportCostResponse] = Field(default_factory=list)
