"""
Country -> region -> city rollup of visit records.

Pure functions over a snapshot from visit_service.list_all. Entries with any
"Unknown" location part (or no origin) are left out of the report but stay in
the table. Each node counts distinct visit rows, not visit_count totals.
"""
from typing import Iterable, List

from models.visit import UNKNOWN
from schemas.visit import CityNode, CountryNode, RegionNode, VisitEntry, VisitRecord, VisitReport


def flatten(records: Iterable[VisitRecord]) -> List[VisitEntry]:
    return [
        VisitEntry(
            origin=record.origin or UNKNOWN,
            country=record.country,
            region=record.region,
            city=record.city,
            count=1,
            last_visit=record.last_seen,
        )
        for record in records
    ]


def is_reportable(entry: VisitEntry) -> bool:
    return UNKNOWN not in (entry.origin, entry.country, entry.region, entry.city)


def distinct_origins(entries: Iterable[VisitEntry]) -> List[str]:
    # dict keeps insertion order
    return list(dict.fromkeys(entry.origin for entry in entries))


def rollup(entries: Iterable[VisitEntry]) -> List[CountryNode]:
    countries = {}
    regions = {}
    cities = {}

    for entry in entries:
        country = countries.get(entry.country)
        if country is None:
            country = countries[entry.country] = CountryNode(country=entry.country)

        region_key = (entry.country, entry.region)
        region = regions.get(region_key)
        if region is None:
            region = regions[region_key] = RegionNode(region=entry.region)
            country.regions.append(region)

        city_key = (entry.country, entry.region, entry.city)
        city = cities.get(city_key)
        if city is None:
            city = cities[city_key] = CityNode(city=entry.city)
            region.cities.append(city)

        country.count += entry.count
        region.count += entry.count
        city.count += entry.count

    return list(countries.values())


def build_visit_report(records: Iterable[VisitRecord]) -> VisitReport:
    visits = [entry for entry in flatten(records) if is_reportable(entry)]
    return VisitReport(
        visits=visits,
        origins=distinct_origins(visits),
        countries=rollup(visits),
    )
