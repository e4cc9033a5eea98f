"""Shared scope resolution for insights services."""

from __future__ import annotations

import logging

from sqlalchemy.orm import Session

from ledgerview.core.config import Settings, get_settings
from ledgerview.core.errors import (
    BusinessNotFoundError,
    BusinessOwnershipError,
    ProjectNotFoundError,
    ProjectOwnershipError,
    UserNotFoundError,
)
from ledgerview.models.entities import Business, Project, User
from ledgerview.repositories.insights_repository import InsightsRepository
from ledgerview.services.aggregation import Clock, utc_now

logger = logging.getLogger(__name__)


class InsightsService:
    """Base class wiring the repository, settings and clock.

    Scope checks raise domain errors that callers must not catch; an
    unknown or foreign scope always fails the whole call.
    """

    def __init__(
        self,
        db: Session,
        *,
        clock: Clock = utc_now,
        settings: Settings | None = None,
    ) -> None:
        self.db = db
        self.repo = InsightsRepository(db)
        self.settings = settings or get_settings()
        self.clock = clock

    # ---------- Access / scope ----------
    def _ensure_user(self, user_id: int) -> User:
        user = self.repo.get_user(user_id)
        if user is None:
            raise UserNotFoundError()
        return user

    def _ensure_business_owned(self, *, user_id: int, business_id: int) -> Business:
        self._ensure_user(user_id)
        business = self.repo.get_business(business_id)
        if business is None:
            raise BusinessNotFoundError()
        if business.user_id != user_id:
            logger.info("business ownership mismatch business_id=%s user_id=%s", business_id, user_id)
            raise BusinessOwnershipError()
        return business

    def _ensure_project_owned(self, *, user_id: int, project_id: int) -> Project:
        self._ensure_user(user_id)
        project = self.repo.get_project(project_id)
        if project is None:
            raise ProjectNotFoundError()
        if project.user_id != user_id:
            logger.info("project ownership mismatch project_id=%s user_id=%s", project_id, user_id)
            raise ProjectOwnershipError()
        return project

    # ---------- Currency ----------
    def _business_currency(self, business: Business) -> str:
        return business.currency or self.settings.default_currency

    def _user_currency(self, user_id: int) -> str:
        return self.repo.get_user_currency(user_id) or self.settings.default_currency
