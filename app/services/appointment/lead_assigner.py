# ============================================================================
# app/services/appointment/lead_assigner.py
# Lead ownership lookups used when booking a lead visit
# ============================================================================
from typing import Optional, Protocol
from uuid import UUID
import logging

from sqlalchemy import update
from sqlalchemy.orm import Session

from app.core.exceptions import NotFoundError
from app.models.lead import Lead

logger = logging.getLogger(__name__)


class LeadAssigner(Protocol):
    def get_assigned_agent_id(self, lead_id: UUID, organization_id: UUID) -> Optional[UUID]:
        ...

    def assign_lead(self, lead_id: UUID, agent_id: UUID, organization_id: UUID) -> None:
        ...


class DatabaseLeadAssigner:
    """LeadAssigner backed by the shared leads table."""

    def __init__(self, db: Session):
        self.db = db

    def get_assigned_agent_id(self, lead_id: UUID, organization_id: UUID) -> Optional[UUID]:
        lead = self.db.query(Lead).filter(
            Lead.id == lead_id,
            Lead.organization_id == organization_id
        ).first()

        if not lead:
            raise NotFoundError("lead not found")
        return lead.assigned_agent_id

    def assign_lead(self, lead_id: UUID, agent_id: UUID, organization_id: UUID) -> None:
        # Only claims leads nobody owns yet; a concurrent claim wins silently.
        result = self.db.execute(
            update(Lead)
            .where(
                Lead.id == lead_id,
                Lead.organization_id == organization_id,
                Lead.assigned_agent_id.is_(None)
            )
            .values(assigned_agent_id=agent_id)
        )
        self.db.commit()

        if result.rowcount == 0:
            logger.warning(f"Lead {lead_id} was already claimed before agent {agent_id} could take it")
        else:
            logger.info(f"Assigned lead {lead_id} to agent {agent_id}")
