import threading
from concurrent.futures import ThreadPoolExecutor
from datetime import datetime, timedelta
from unittest.mock import MagicMock

import pytest
from sqlalchemy.exc import OperationalError

from models.visit import Visit
from schemas.visit import GeoLocation
from services import visit_service
from services.visit_report import build_visit_report
from utils.errors import PersistenceError

MUMBAI = GeoLocation(country="India", city="Mumbai", region="Maharashtra", isp="Example Telecom")
START = datetime(2026, 3, 1, 12, 0, 0)


class CountingResolver:
    def __init__(self, location=MUMBAI):
        self.location = location
        self.calls = []
        self._lock = threading.Lock()

    def __call__(self, address):
        with self._lock:
            self.calls.append(address)
        return self.location


def test_first_visit_creates_record(db):
    resolver = CountingResolver()

    record = visit_service.track_visit(db, "203.0.113.7", "Mozilla/5.0", "https://guddu.example.com",
                                       now=START, resolver=resolver)

    assert record.ip_address == "203.0.113.7"
    assert record.visit_count == 1
    assert record.first_seen == START
    assert record.last_seen == START
    assert record.geo == MUMBAI
    assert record.user_agent == "Mozilla/5.0"
    assert record.origin == "https://guddu.example.com"
    assert resolver.calls == ["203.0.113.7"]


def test_mapped_and_bare_address_share_one_record(db):
    resolver = CountingResolver()

    visit_service.track_visit(db, "::ffff:203.0.113.7", "ua", "https://a.example.com", resolver=resolver)
    record = visit_service.track_visit(db, "203.0.113.7", "ua", "https://a.example.com", resolver=resolver)

    assert record.visit_count == 2
    assert db.query(Visit).count() == 1
    assert db.query(Visit).one().ip_address == "203.0.113.7"


def test_forwarding_chain_uses_first_hop(db):
    resolver = CountingResolver()

    record = visit_service.track_visit(db, "203.0.113.7, 10.0.0.1", "ua", None, resolver=resolver)

    assert record.ip_address == "203.0.113.7"


def test_counter_is_monotonic_and_timestamps_track_calls(db):
    resolver = CountingResolver()
    n = 5

    for i in range(n):
        record = visit_service.track_visit(db, "203.0.113.7", f"ua-{i}", f"https://o{i}.example.com",
                                           now=START + timedelta(minutes=i), resolver=resolver)
        assert record.visit_count == i + 1

    assert record.visit_count == n
    assert record.first_seen == START
    assert record.last_seen == START + timedelta(minutes=n - 1)
    assert record.last_seen >= record.first_seen


def test_repeat_visit_overwrites_metadata_but_not_geo(db):
    first = CountingResolver(MUMBAI)
    visit_service.track_visit(db, "203.0.113.7", "old-agent", "https://old.example.com", resolver=first)

    second = CountingResolver(GeoLocation(country="France", city="Paris", region="IDF", isp="Other"))
    record = visit_service.track_visit(db, "203.0.113.7", "new-agent", "https://new.example.com", resolver=second)

    assert record.user_agent == "new-agent"
    assert record.origin == "https://new.example.com"
    assert record.geo == MUMBAI
    assert second.calls == []


def test_geo_failure_still_records_visit_and_is_hidden_from_report(db):
    resolver = CountingResolver(GeoLocation.unknown())

    record = visit_service.track_visit(db, "203.0.113.9", "ua", "https://guddu.example.com", resolver=resolver)

    assert record.visit_count == 1
    assert record.geo == GeoLocation(country="Unknown", city="Unknown", region="Unknown", isp="Unknown")

    records = visit_service.list_all(db)
    assert len(records) == 1
    assert build_visit_report(records).visits == []


def test_list_all_returns_insertion_order(db):
    resolver = CountingResolver()
    for address in ["203.0.113.3", "203.0.113.1", "203.0.113.2"]:
        visit_service.track_visit(db, address, "ua", None, resolver=resolver)
    visit_service.track_visit(db, "203.0.113.1", "ua", None, resolver=resolver)

    assert [r.ip_address for r in visit_service.list_all(db)] == ["203.0.113.3", "203.0.113.1", "203.0.113.2"]


def test_concurrent_first_visits_create_one_record(session_factory):
    resolver = CountingResolver()
    workers = 12

    def visit(i):
        session = session_factory()
        try:
            return visit_service.track_visit(session, "198.51.100.77", f"ua-{i}", "https://x.example.com",
                                             resolver=resolver)
        finally:
            session.close()

    with ThreadPoolExecutor(max_workers=workers) as pool:
        results = list(pool.map(visit, range(workers)))

    session = session_factory()
    try:
        rows = session.query(Visit).filter(Visit.ip_address == "198.51.100.77").all()
    finally:
        session.close()

    assert len(rows) == 1
    assert rows[0].visit_count == workers
    assert sorted(r.visit_count for r in results) == list(range(1, workers + 1))
    assert rows[0].country == "India"


def test_increment_failure_raises_persistence_error():
    db = MagicMock()
    db.execute.side_effect = OperationalError("UPDATE visits", {}, Exception("database is down"))

    with pytest.raises(PersistenceError):
        visit_service.track_visit(db, "203.0.113.7", "ua", None, resolver=CountingResolver())

    db.rollback.assert_called_once()


def test_list_all_failure_raises_persistence_error():
    db = MagicMock()
    db.query.side_effect = OperationalError("SELECT", {}, Exception("database is down"))

    with pytest.raises(PersistenceError):
        visit_service.list_all(db)


def test_unsupported_dialect_raises_persistence_error():
    db = MagicMock()
    db.execute.return_value.mappings.return_value.first.return_value = None
    db.get_bind.return_value.dialect.name = "mssql"

    with pytest.raises(PersistenceError):
        visit_service.track_visit(db, "203.0.113.7", "ua", None, resolver=CountingResolver())


def test_list_all_snapshot_carries_every_column(db):
    visit_service.track_visit(db, "203.0.113.7", "Mozilla/5.0", "https://guddu.example.com",
                              now=START, resolver=CountingResolver())

    record = visit_service.list_all(db)[0]

    assert record.model_dump(exclude={"id"}) == {
        "ip_address": "203.0.113.7",
        "user_agent": "Mozilla/5.0",
        "origin": "https://guddu.example.com",
        "country": "India",
        "city": "Mumbai",
        "region": "Maharashtra",
        "isp": "Example Telecom",
        "visit_count": 1,
        "first_seen": START,
        "last_seen": START,
    }
