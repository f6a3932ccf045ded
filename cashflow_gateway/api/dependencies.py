"""Dependency injection for FastAPI endpoints"""

from datetime import datetime, timezone

from fastapi import Request

from cashflow_gateway.infrastructure.clients.sheets import SheetsClient
from cashflow_gateway.infrastructure.clients.weekly_model import WeeklyModelClient


def get_request_id(request: Request) -> str:
    """Extract request ID from request state"""
    return getattr(request.state, "request_id", "unknown")


def get_now() -> datetime:
    """Clock used for windows, anchors and plan expiry"""
    return datetime.now(timezone.utc)


def get_sheets_client() -> SheetsClient:
    """Provide spreadsheet API client instance"""
    return SheetsClient()


def get_weekly_model_client() -> WeeklyModelClient:
    """Provide weekly financial model client instance"""
    return WeeklyModelClient()
