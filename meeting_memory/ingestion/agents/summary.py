"""Executive summary agent - stateless and global."""

from pydantic_ai import Agent
import structlog

from meeting_memory.config import settings
from meeting_memory.utils.model_settings import build_model_settings

logger = structlog.get_logger(__name__)

SUMMARY_INSTRUCTIONS = (
    "You are a helpful assistant that writes 2-3-sentence executive summaries "
    "of meeting transcripts."
)

# Placeholder stored when the model returns nothing usable
NO_SUMMARY = "(no summary)"

summary_agent = Agent(
    f"openai:{settings.summary_model}",
    output_type=str,
    instructions=SUMMARY_INSTRUCTIONS,
    model_settings=build_model_settings(settings.summary_model, temperature=0.3),
    defer_model_check=True,
)
logger.debug("Summary agent configured", summary_model=settings.summary_model)
