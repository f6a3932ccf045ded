"""Integration tests for the projection plan store"""

from datetime import datetime, timedelta, timezone

from cashflow_gateway.domain.planning import build_projection_plan
from cashflow_gateway.domain.scenarios import derive_scenario_factors
from cashflow_gateway.infrastructure.database.models import ProjectionPlanRecord
from cashflow_gateway.infrastructure.database.repositories import PlanRepository

FIXED_NOW = datetime(2026, 3, 16, 12, 0, tzinfo=timezone.utc)


def make_plan(stats, country="Peru", now=FIXED_NOW, weeks=4):
    return build_projection_plan(country, stats, derive_scenario_factors(stats, country), now, weeks=weeks)


def test_save_and_load_plan(db, flat_stats):
    plan = make_plan(flat_stats)
    repo = PlanRepository(db)

    repo.save("Peru", plan)
    db.commit()

    loaded = repo.load("Peru")
    assert loaded == plan
    assert repo.load("Mexico") is None


def test_save_replaces_previous_plan(db, flat_stats):
    repo = PlanRepository(db)
    first = make_plan(flat_stats)
    second = make_plan(flat_stats, now=FIXED_NOW + timedelta(days=1), weeks=2)

    repo.save("Peru", first)
    repo.save("Peru", second)
    db.commit()

    assert db.query(ProjectionPlanRecord).count() == 1
    loaded = repo.load("Peru")
    assert loaded.id == second.id
    assert len(loaded.scenarios["base"]) == 2


def test_plans_are_keyed_by_country(db, flat_stats):
    repo = PlanRepository(db)
    repo.save("Peru", make_plan(flat_stats, "Peru"))
    repo.save("Global", make_plan(flat_stats, "Global"))
    db.commit()

    assert repo.load("Peru").country == "Peru"
    assert repo.load("Global").country == "Global"


def test_load_unreadable_payload_returns_none(db, flat_stats):
    repo = PlanRepository(db)
    record = repo.save("Peru", make_plan(flat_stats))
    record.payload = {"id": "broken"}
    db.commit()

    assert repo.load("Peru") is None
