"""Action item extraction agent - structured output through a single tool call."""

from pydantic import BaseModel, Field
from pydantic_ai import Agent, ToolOutput
import structlog

from meeting_memory.config import settings
from meeting_memory.store.models import ActionItem
from meeting_memory.utils.model_settings import build_model_settings

logger = structlog.get_logger(__name__)


class ActionItemsPayload(BaseModel):
    """Arguments of the `set_action_items` output tool."""

    items: list[ActionItem] = Field(
        description="Action items in the order they were discussed"
    )


ACTIONS_TOOL_NAME = "set_action_items"

ACTIONS_INSTRUCTIONS = """Extract action items with owner names and optional due dates from this transcript.

Rules:
- Only include commitments that are stated in the transcript
- owner is the person's name as spoken; never invent one
- due is the date or timeframe as spoken, omit it when none was given
- Keep items in the order they come up
- Return an empty list when there are no action items"""

action_items_agent = Agent(
    f"openai:{settings.extraction_model}",
    output_type=ToolOutput(
        ActionItemsPayload,
        name=ACTIONS_TOOL_NAME,
        description="Record the action items found in the transcript",
    ),
    instructions=ACTIONS_INSTRUCTIONS,
    # One validation retry, then malformed output is a hard failure
    retries=1,
    model_settings=build_model_settings(settings.extraction_model, temperature=0.0),
    defer_model_check=True,
)
logger.debug("Action item agent configured", extraction_model=settings.extraction_model)
