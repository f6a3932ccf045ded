"""Data access layer for projection plans"""

import logging
from typing import Optional

from sqlalchemy.orm import Session

from cashflow_gateway.domain.models import ProjectionPlan
from cashflow_gateway.domain.serialization import plan_from_dict, plan_to_dict
from cashflow_gateway.infrastructure.database.models import ProjectionPlanRecord


class PlanRepository:
    """Key-value store of projection plans keyed by country"""

    def __init__(self, db: Session):
        self.db = db

    def save(self, country: str, plan: ProjectionPlan) -> ProjectionPlanRecord:
        """Store `plan` as the current plan for `country`, replacing any previous one"""
        record = self.db.get(ProjectionPlanRecord, country)
        if record is None:
            record = ProjectionPlanRecord(country=country)
            self.db.add(record)

        record.plan_id = plan.id
        record.created_at = plan.created_at
        record.expires_at = plan.expires_at
        record.payload = plan_to_dict(plan)

        self.db.flush()
        return record

    def load(self, country: str) -> Optional[ProjectionPlan]:
        """Current plan for `country`, or None when missing or unreadable"""
        record = self.db.get(ProjectionPlanRecord, country)
        if record is None:
            return None

        try:
            return plan_from_dict(record.payload)
        except (KeyError, TypeError, ValueError) as e:
            logging.error(f"Stored plan for {country} is unreadable: {e}", extra={"plan_id": record.plan_id})
            return None
