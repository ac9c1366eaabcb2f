"""
Custom Agent Service

Create, edit, list and delete user-authored agents. Creation is gated by
the plan's agent limit and provider access; edits and deletes by ownership.
"""

import logging
from typing import List, Tuple
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from app.domain.agents import (
    AgentCreateRequest,
    AgentUpdateRequest,
    can_be_modified_by,
    can_be_used_by,
)
from app.domain.clock import Clock, system_clock
from app.infrastructure.db.models import AIService, CustomAgent
from app.infrastructure.db.models.base import utcnow
from app.infrastructure.db.repositories import (
    AIServiceRepository,
    CustomAgentRepository,
)
from app.infrastructure.exceptions import (
    NotFoundError,
    ProviderNotAllowedError,
    UnauthorizedError,
)
from app.infrastructure.services.entitlement_service import EntitlementService


logger = logging.getLogger(__name__)


class AgentService:
    """Custom agent management."""
    
    def __init__(self, session: AsyncSession, clock: Clock = system_clock):
        self._entitlements = EntitlementService(session, clock)
        self._services = AIServiceRepository(session)
        self._agents = CustomAgentRepository(session)
    
    async def list_agents(self, user_id: UUID) -> Tuple[List[CustomAgent], List[CustomAgent]]:
        """The user's own agents, and the most used public agents of others."""
        own = await self._agents.list_for_user(user_id)
        public = await self._agents.list_public(exclude_user_id=user_id)
        return own, public
    
    async def get_agent(self, user_id: UUID, agent_id: UUID) -> CustomAgent:
        agent = await self._get(agent_id)
        if not can_be_used_by(agent, user_id):
            raise UnauthorizedError("You are not allowed to view this agent")
        return agent
    
    async def create_agent(self, user_id: UUID, data: AgentCreateRequest) -> CustomAgent:
        service = await self._get_service(data.ai_service_id)
        await self._entitlements.ensure_can_create_agent(user_id, service.provider)
        
        agent = CustomAgent(
            user_id=user_id,
            ai_service_id=service.id,
            name=data.name,
            description=data.description,
            instructions=data.instructions,
            knowledge_base=data.knowledge_base,
            parameters=data.parameters.model_dump(),
            is_public=data.is_public,
            is_active=True,
            usage_count=0,
        )
        agent = await self._agents.add(agent)
        logger.info(f"User {user_id} created agent {agent.id}")
        return agent
    
    async def update_agent(
        self,
        user_id: UUID,
        agent_id: UUID,
        data: AgentUpdateRequest,
    ) -> CustomAgent:
        agent = await self._get(agent_id)
        if not can_be_modified_by(agent, user_id):
            raise UnauthorizedError("You are not allowed to edit this agent")
        
        service = await self._get_service(data.ai_service_id)
        if not await self._entitlements.can_use_provider(user_id, service.provider):
            raise ProviderNotAllowedError(service.provider)
        
        agent.ai_service_id = service.id
        agent.name = data.name
        agent.description = data.description
        agent.instructions = data.instructions
        agent.knowledge_base = data.knowledge_base
        agent.parameters = data.parameters.model_dump()
        agent.is_public = data.is_public
        agent.is_active = data.is_active
        agent.updated_at = utcnow()
        
        return await self._agents.save(agent)
    
    async def delete_agent(self, user_id: UUID, agent_id: UUID) -> None:
        agent = await self._get(agent_id)
        if not can_be_modified_by(agent, user_id):
            raise UnauthorizedError("You are not allowed to delete this agent")
        await self._agents.delete(agent.id)
        logger.info(f"User {user_id} deleted agent {agent_id}")
    
    async def _get(self, agent_id: UUID) -> CustomAgent:
        agent = await self._agents.get_by_id(agent_id)
        if agent is None:
            raise NotFoundError(f"Custom agent {agent_id} not found", table="custom_agents")
        return agent
    
    async def _get_service(self, ai_service_id: UUID) -> AIService:
        service = await self._services.get_by_id(ai_service_id)
        if service is None or not service.is_active:
            raise NotFoundError(f"AI service {ai_service_id} not found", table="ai_services")
        return service
