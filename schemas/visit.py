from pydantic import BaseModel
from typing import List, Optional
from datetime import datetime

from models.visit import UNKNOWN


class GeoLocation(BaseModel):
    country: str = UNKNOWN
    city: str = UNKNOWN
    region: str = UNKNOWN
    isp: str = UNKNOWN

    @classmethod
    def unknown(cls) -> "GeoLocation":
        return cls()


class TrackVisitRequest(BaseModel):
    user_agent: Optional[str] = None
    origin: Optional[str] = None
    real_client_ip: Optional[str] = None  # Client IP as seen by the frontend, wins over headers


class VisitRecord(BaseModel):
    id: int
    ip_address: str
    user_agent: Optional[str] = None
    origin: Optional[str] = None
    country: str = UNKNOWN
    city: str = UNKNOWN
    region: str = UNKNOWN
    isp: str = UNKNOWN
    visit_count: int
    first_seen: datetime
    last_seen: datetime

    class Config:
        from_attributes = True

    @property
    def geo(self) -> GeoLocation:
        return GeoLocation(country=self.country, city=self.city, region=self.region, isp=self.isp)


class TrackVisitResponse(BaseModel):
    address: str
    visit_count: int
    origin: Optional[str] = None
    geo: GeoLocation


class VisitEntry(BaseModel):
    origin: str
    country: str
    region: str
    city: str
    count: int = 1
    last_visit: datetime


class CityNode(BaseModel):
    city: str
    count: int = 0


class RegionNode(BaseModel):
    region: str
    count: int = 0
    cities: List[CityNode] = []


class CountryNode(BaseModel):
    country: str
    count: int = 0
    regions: List[RegionNode] = []


class VisitReport(BaseModel):
    visits: List[VisitEntry] = []
    origins: List[str] = []
    countries: List[CountryNode] = []
