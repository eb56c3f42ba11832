import logging
from typing import Any, Literal

from travel_chatbot.db.crud_helper import (
    budget_range_crud,
    city_crud,
    hotel_crud,
    transport_cost_crud,
)
from travel_chatbot.models.travel import BudgetRange, City, Hotel, TransportCost

logger = logging.getLogger(__name__)

BudgetLevel = Literal["low", "medium", "high"]


def get_cities() -> list[dict[str, Any]]:
    return city_crud.list_resource(order_by=["id"])


def get_city_by_slug(slug: str) -> dict[str, Any] | None:
    return city_crud.get_resource(resource_id=None, where=[City.slug == slug])


def get_budget_range(city_id: int) -> dict[str, Any] | None:
    return budget_range_crud.get_resource(
        resource_id=None, where=[BudgetRange.city_id == city_id]
    )


def price_band(
    budget: dict[str, Any] | None, level: BudgetLevel | None
) -> tuple[int | None, int | None]:
    """Min/max nightly price for a budget level; ``None`` means unbounded."""
    if budget is None or level is None:
        return None, None
    if level == "low":
        return budget["low_min"], budget["low_max"]
    if level == "medium":
        return budget["medium_min"], budget["medium_max"]
    return budget["high_min"], None


def get_hotels(
    city_id: int, min_price: int | None = None, max_price: int | None = None
) -> list[dict[str, Any]]:
    where = [Hotel.city_id == city_id]
    if min_price is not None:
        where.append(Hotel.avg_price >= min_price)
    if max_price is not None:
        where.append(Hotel.avg_price <= max_price)
    hotels = hotel_crud.list_resource(where=where, order_by=["avg_price", "id"])

    for hotel in hotels:
        hotel["transport_costs"] = transport_cost_crud.list_resource(
            where=[TransportCost.hotel_id == hotel["id"]], order_by=["id"]
        )
    return hotels


def seed_data() -> None:
    """Insert the starter catalog unless some city already exists."""
    if get_cities():
        return

    logger.info("🌱 Seeding travel catalog")
    paris = city_crud.create_resource(
        {
            "name": "Paris",
            "slug": "paris",
            "description": "The City of Light, known for its cafes, culture, and iconic landmarks.",
            "image_url": "https://images.unsplash.com/photo-1502602898657-3e91760cbb34?auto=format&fit=crop&q=80",
        }
    )

    budget_range_crud.create_resource(
        {
            "city_id": paris["id"],
            "low_min": 50,
            "low_max": 120,
            "medium_min": 121,
            "medium_max": 250,
            "high_min": 251,
            "currency": "EUR",
        }
    )

    hotel1 = hotel_crud.create_resource(
        {
            "city_id": paris["id"],
            "name": "Hôtel de la Paix",
            "area": "Montmartre",
            "avg_price": 90,
            "safety_score": 8,
            "value_score": 9,
            "description": "Charming budget hotel near Sacré-Cœur.",
            "image_url": "https://images.unsplash.com/photo-1551882547-ff40c63fe5fa?auto=format&fit=crop&q=80",
            "tags": ["budget", "romantic"],
        }
    )
    transport_cost_crud.create_resource(
        {
            "hotel_id": hotel1["id"],
            "from_location": "CDG Airport",
            "min_price": 55,
            "max_price": 65,
            "currency": "EUR",
            "method": "Taxi",
            "warning": "Only take official taxis from the stand",
        }
    )

    hotel2 = hotel_crud.create_resource(
        {
            "city_id": paris["id"],
            "name": "Le Marais Boutique",
            "area": "Le Marais",
            "avg_price": 180,
            "safety_score": 9,
            "value_score": 8,
            "description": "Stylish boutique hotel in the heart of the historic district.",
            "image_url": "https://images.unsplash.com/photo-1566073771259-6a8506099945?auto=format&fit=crop&q=80",
            "tags": ["boutique", "central"],
        }
    )
    transport_cost_crud.create_resource(
        {
            "hotel_id": hotel2["id"],
            "from_location": "CDG Airport",
            "min_price": 60,
            "max_price": 70,
            "currency": "EUR",
            "method": "Taxi",
        }
    )
