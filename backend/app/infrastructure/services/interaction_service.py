"""
Interaction Service

Runs one AI call end to end: entitlement and quota gate, audit placeholder,
provider dispatch, and exactly one completion of the audit record.

Provider failures never escape as errors. They are logged and returned to
the caller as a failed interaction.
"""

import logging
from typing import List, Optional
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from app.domain.agents import can_be_used_by, compose_agent_prompt, merge_parameters
from app.domain.clock import Clock, system_clock
from app.infrastructure.ai.provider_client import ProviderClient, get_provider_client
from app.infrastructure.db.models import AIInteraction, AIService, CustomAgent
from app.infrastructure.db.repositories import (
    AIInteractionRepository,
    AIServiceRepository,
    CustomAgentRepository,
)
from app.infrastructure.exceptions import (
    NotFoundError,
    ProviderError,
    UnauthorizedError,
)
from app.infrastructure.services.entitlement_service import EntitlementService


logger = logging.getLogger(__name__)

UNEXPECTED_FAILURE_MESSAGE = "Unexpected error while contacting the AI provider"


class InteractionService:
    """
    Orchestrates direct prompts and custom-agent runs.
    
    Args:
        session: Async database session
        provider_client: Dispatcher for provider HTTP calls
        clock: Time source shared with the entitlement checks
    """
    
    def __init__(
        self,
        session: AsyncSession,
        provider_client: Optional[ProviderClient] = None,
        clock: Clock = system_clock,
    ):
        self._session = session
        self._client = provider_client or get_provider_client()
        self._entitlements = EntitlementService(session, clock)
        self._services = AIServiceRepository(session)
        self._agents = CustomAgentRepository(session)
        self._interactions = AIInteractionRepository(session)
    
    # =========================================================================
    # Dispatch
    # =========================================================================
    
    async def interact(
        self,
        user_id: UUID,
        ai_service_id: UUID,
        prompt: str,
    ) -> AIInteraction:
        """
        Send a prompt straight to an AI service.
        
        Access denials (no subscription, provider not in plan, quota reached)
        are raised before anything is recorded.
        """
        service = await self._get_active_service(ai_service_id)
        await self._entitlements.ensure_can_dispatch(user_id, service.provider)
        
        interaction = await self._interactions.record_attempt(
            user_id=user_id,
            ai_service_id=service.id,
            prompt=prompt,
            created_at=self._entitlements.now(),
        )
        return await self._dispatch(interaction, service, prompt, service.parameters)
    
    async def interact_with_agent(
        self,
        user_id: UUID,
        agent_id: UUID,
        user_input: str,
    ) -> AIInteraction:
        """
        Run a custom agent on ``user_input``.
        
        The agent's parameters override its service's defaults. usage_count
        grows only when the provider call succeeds.
        """
        agent = await self._agents.get_by_id(agent_id)
        if agent is None:
            raise NotFoundError(f"Custom agent {agent_id} not found", table="custom_agents")
        if not can_be_used_by(agent, user_id):
            raise UnauthorizedError("You are not allowed to use this agent")
        
        service = await self._get_active_service(agent.ai_service_id)
        await self._entitlements.ensure_can_dispatch(user_id, service.provider)
        
        prompt = compose_agent_prompt(agent, user_input)
        interaction = await self._interactions.record_attempt(
            user_id=user_id,
            ai_service_id=service.id,
            prompt=prompt,
            custom_agent_id=agent.id,
            created_at=self._entitlements.now(),
        )
        parameters = merge_parameters(service.parameters, agent.parameters)
        interaction = await self._dispatch(interaction, service, prompt, parameters)
        
        if interaction.is_successful:
            await self._agents.increment_usage(agent.id)
            await self._session.commit()
        
        return interaction
    
    async def _dispatch(
        self,
        interaction: AIInteraction,
        service: AIService,
        prompt: str,
        parameters: Optional[dict],
    ) -> AIInteraction:
        try:
            result = await self._client.call(service, prompt, parameters)
        except ProviderError as e:
            logger.error(
                f"[AI] Interaction {interaction.id} failed on {service.provider}/{service.model}: "
                f"{e.message} {e.details}",
                exc_info=e.original_error is not None,
            )
            interaction = await self._interactions.complete_failure(interaction, e.message)
            await self._session.commit()
            return interaction
        except Exception:
            logger.exception(f"[AI] Interaction {interaction.id} hit an unexpected error")
            await self._interactions.complete_failure(interaction, UNEXPECTED_FAILURE_MESSAGE)
            await self._session.commit()
            raise
        
        interaction = await self._interactions.complete_success(interaction, result)
        await self._session.commit()
        logger.info(
            f"[AI] Interaction {interaction.id} succeeded: "
            f"{interaction.tokens_used} tokens, cost {interaction.cost}"
        )
        return interaction
    
    async def _get_active_service(self, ai_service_id: UUID) -> AIService:
        service = await self._services.get_by_id(ai_service_id)
        if service is None or not service.is_active:
            raise NotFoundError(f"AI service {ai_service_id} not found", table="ai_services")
        return service
    
    # =========================================================================
    # History
    # =========================================================================
    
    async def list_interactions(
        self,
        user_id: UUID,
        skip: int = 0,
        limit: int = 20,
    ) -> List[AIInteraction]:
        return await self._interactions.list_for_user(user_id, skip, limit)
    
    async def get_interaction(self, user_id: UUID, interaction_id: UUID) -> AIInteraction:
        """A user may read only their own interactions."""
        interaction = await self._interactions.get_by_id(interaction_id)
        if interaction is None:
            raise NotFoundError(f"Interaction {interaction_id} not found", table="ai_interactions")
        if interaction.user_id != user_id:
            raise UnauthorizedError("You are not allowed to view this interaction")
        return interaction
