"""
Custom Agent Routes

CRUD for user-authored agents and running an agent on user input.
"""

from uuid import UUID

from fastapi import APIRouter, status

from app.api.dependencies import (
    AgentServiceDep,
    CurrentUser,
    InteractionServiceDep,
)
from app.domain.agents import (
    AgentCreateRequest,
    AgentInteractRequest,
    AgentListResponse,
    AgentResponse,
    AgentUpdateRequest,
)
from app.domain.interactions import InteractionResponse


router = APIRouter()


@router.get("/agents", response_model=AgentListResponse)
async def list_agents(user: CurrentUser, agents: AgentServiceDep):
    """Own agents plus the ten most used public agents of other users."""
    own, public = await agents.list_agents(user.id)
    return AgentListResponse(
        own=[AgentResponse.model_validate(agent) for agent in own],
        public=[AgentResponse.model_validate(agent) for agent in public],
    )


@router.post("/agents", response_model=AgentResponse, status_code=status.HTTP_201_CREATED)
async def create_agent(
    request: AgentCreateRequest,
    user: CurrentUser,
    agents: AgentServiceDep,
):
    return await agents.create_agent(user.id, request)


@router.get("/agents/{agent_id}", response_model=AgentResponse)
async def get_agent(agent_id: UUID, user: CurrentUser, agents: AgentServiceDep):
    return await agents.get_agent(user.id, agent_id)


@router.put("/agents/{agent_id}", response_model=AgentResponse)
async def update_agent(
    agent_id: UUID,
    request: AgentUpdateRequest,
    user: CurrentUser,
    agents: AgentServiceDep,
):
    return await agents.update_agent(user.id, agent_id, request)


@router.delete("/agents/{agent_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_agent(agent_id: UUID, user: CurrentUser, agents: AgentServiceDep):
    await agents.delete_agent(user.id, agent_id)


@router.post(
    "/agents/{agent_id}/interact",
    response_model=InteractionResponse,
    status_code=status.HTTP_201_CREATED,
)
async def interact_with_agent(
    agent_id: UUID,
    request: AgentInteractRequest,
    user: CurrentUser,
    interactions: InteractionServiceDep,
):
    return await interactions.interact_with_agent(user.id, agent_id, request.prompt)
