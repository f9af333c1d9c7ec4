# ============================================================================
# app/repositories/availability_repository.py
# Persistence for recurring availability rules and per-date overrides
# ============================================================================
from datetime import date
from typing import List, Optional
from uuid import UUID

from sqlalchemy.orm import Session

from app.core.exceptions import NotFoundError
from app.models.availability import AvailabilityRule, AvailabilityOverride


class RuleStore:
    """Reads and writes AvailabilityRule rows, always scoped to one organization."""

    @staticmethod
    def create(db: Session, rule: AvailabilityRule) -> AvailabilityRule:
        db.add(rule)
        db.commit()
        db.refresh(rule)
        return rule

    @staticmethod
    def get_by_id(db: Session, rule_id: UUID, organization_id: UUID) -> AvailabilityRule:
        rule = db.query(AvailabilityRule).filter(
            AvailabilityRule.id == rule_id,
            AvailabilityRule.organization_id == organization_id
        ).first()

        if not rule:
            raise NotFoundError("availability rule not found")
        return rule

    @staticmethod
    def list_for_user(db: Session, organization_id: UUID, user_id: UUID) -> List[AvailabilityRule]:
        return db.query(AvailabilityRule).filter(
            AvailabilityRule.organization_id == organization_id,
            AvailabilityRule.user_id == user_id
        ).order_by(AvailabilityRule.weekday.asc(), AvailabilityRule.start_time.asc()).all()

    @staticmethod
    def list_user_ids(db: Session, organization_id: UUID) -> List[UUID]:
        rows = db.query(AvailabilityRule.user_id).filter(
            AvailabilityRule.organization_id == organization_id
        ).distinct().order_by(AvailabilityRule.user_id.asc()).all()
        return [row[0] for row in rows]

    @staticmethod
    def save(db: Session, rule: AvailabilityRule) -> AvailabilityRule:
        db.commit()
        db.refresh(rule)
        return rule

    @staticmethod
    def delete(db: Session, rule: AvailabilityRule) -> None:
        db.delete(rule)
        db.commit()


class OverrideStore:
    """Reads and writes AvailabilityOverride rows, always scoped to one organization."""

    @staticmethod
    def create(db: Session, override: AvailabilityOverride) -> AvailabilityOverride:
        db.add(override)
        db.commit()
        db.refresh(override)
        return override

    @staticmethod
    def get_by_id(db: Session, override_id: UUID, organization_id: UUID) -> AvailabilityOverride:
        override = db.query(AvailabilityOverride).filter(
            AvailabilityOverride.id == override_id,
            AvailabilityOverride.organization_id == organization_id
        ).first()

        if not override:
            raise NotFoundError("availability override not found")
        return override

    @staticmethod
    def list_for_user(
            db: Session,
            organization_id: UUID,
            user_id: UUID,
            start_date: Optional[date] = None,
            end_date: Optional[date] = None
    ) -> List[AvailabilityOverride]:
        query = db.query(AvailabilityOverride).filter(
            AvailabilityOverride.organization_id == organization_id,
            AvailabilityOverride.user_id == user_id
        )

        if start_date:
            query = query.filter(AvailabilityOverride.date >= start_date)
        if end_date:
            query = query.filter(AvailabilityOverride.date <= end_date)

        return query.order_by(AvailabilityOverride.date.asc(), AvailabilityOverride.created_at.asc()).all()

    @staticmethod
    def save(db: Session, override: AvailabilityOverride) -> AvailabilityOverride:
        db.commit()
        db.refresh(override)
        return override

    @staticmethod
    def delete(db: Session, override: AvailabilityOverride) -> None:
        db.delete(override)
        db.commit()
