from sqlalchemy import (
    Column,
    Integer,
    String,
    Text,
    JSON,
    ForeignKey,
)

from .base import Base


class City(Base):
    __tablename__ = "cities"

    id = Column(Integer, primary_key=True)
    name = Column(Text, nullable=False)
    slug = Column(String(255), nullable=False, unique=True, index=True)
    description = Column(Text, nullable=False)
    image_url = Column(Text, nullable=False)


class BudgetRange(Base):
    __tablename__ = "budget_ranges"

    id = Column(Integer, primary_key=True)
    city_id = Column(Integer, ForeignKey("cities.id"), nullable=False, index=True)
    low_min = Column(Integer, nullable=False)
    low_max = Column(Integer, nullable=False)
    medium_min = Column(Integer, nullable=False)
    medium_max = Column(Integer, nullable=False)
    high_min = Column(Integer, nullable=False)  # open ended upwards
    currency = Column(String(8), nullable=False, default="USD")


class Hotel(Base):
    __tablename__ = "hotels"

    id = Column(Integer, primary_key=True)
    city_id = Column(Integer, ForeignKey("cities.id"), nullable=False, index=True)
    name = Column(Text, nullable=False)
    area = Column(Text, nullable=False)
    avg_price = Column(Integer, nullable=False)  # per night, in the city's budget currency
    safety_score = Column(Integer, nullable=False)  # 1-10
    value_score = Column(Integer, nullable=False)  # 1-10
    description = Column(Text, nullable=False)
    image_url = Column(Text, nullable=False)
    tags = Column(JSON, nullable=False, default=list)  # e.g. ["budget", "safe", "central"]


class TransportCost(Base):
    __tablename__ = "transport_costs"

    id = Column(Integer, primary_key=True)
    hotel_id = Column(Integer, ForeignKey("hotels.id"), nullable=False, index=True)
    from_location = Column(Text, nullable=False)  # "CDG Airport", "Gare du Nord"
    min_price = Column(Integer, nullable=False)
    max_price = Column(Integer, nullable=False)
    currency = Column(String(8), nullable=False, default="USD")
    method = Column(String(64), nullable=False)  # "Taxi", "Bus", "Train"
    warning = Column(Text)
