import logging
from typing import List, Optional

from fastapi import APIRouter, HTTPException, Query, status

from travel_chatbot.db import catalog
from travel_chatbot.db.catalog import BudgetLevel
from travel_chatbot.routes.travel.schemas import (
    CityDetailResponse,
    CityResponse,
    HotelResponse,
)

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/cities", response_model=List[CityResponse], summary="List cities")
def list_cities():
    return catalog.get_cities()


@router.get(
    "/cities/{slug}",
    response_model=CityDetailResponse,
    summary="Get a city with its budget ranges",
)
def get_city(slug: str):
    city = catalog.get_city_by_slug(slug)
    if not city:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="City not found")
    return {**city, "budget_ranges": catalog.get_budget_range(city["id"])}


@router.get(
    "/hotels",
    response_model=List[HotelResponse],
    summary="List hotels in a city",
    description="Optionally filtered to the price band of a budget level",
)
def list_hotels(
    city_id: Optional[int] = Query(None, alias="cityId"),
    budget_level: Optional[BudgetLevel] = Query(None, alias="budgetLevel"),
):
    if not city_id:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="cityId is required")
    budget = catalog.get_budget_range(city_id) if budget_level else None
    min_price, max_price = catalog.price_band(budget, budget_level)
    return catalog.get_hotels(city_id, min_price, max_price)
