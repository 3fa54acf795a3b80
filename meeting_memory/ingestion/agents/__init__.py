"""Chat agents used by the ingestion pipeline."""

from meeting_memory.ingestion.agents.actions import (
    ACTIONS_TOOL_NAME,
    ActionItemsPayload,
    action_items_agent,
)
from meeting_memory.ingestion.agents.summary import NO_SUMMARY, summary_agent

__all__ = [
    "ACTIONS_TOOL_NAME",
    "ActionItemsPayload",
    "NO_SUMMARY",
    "action_items_agent",
    "summary_agent",
]
