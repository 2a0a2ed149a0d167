"""Unified exception hierarchy for campaign-clients."""


class CampaignClientError(Exception):
    """Base exception for all campaign-client errors."""


class OperationTimeoutError(CampaignClientError):
    """An awaited operation did not finish within its time limit."""


# Research
class ResearchError(CampaignClientError):
    """Base exception for Exa research and search operations."""

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.status_code = status_code


class ResearchTaskFailedError(ResearchError):
    """The research task finished in a failed or canceled state."""


class ResearchTimeoutError(ResearchError):
    """The research task did not complete before the deadline."""


# Agent
class AgentError(CampaignClientError):
    """Base exception for stateful agent operations."""

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.status_code = status_code


class AgentStreamError(AgentError):
    """Failed while streaming messages from the agent."""


class MemoryBlockError(AgentError):
    """Failed to list, create, attach or modify an agent memory block."""
