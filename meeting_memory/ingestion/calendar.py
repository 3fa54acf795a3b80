"""Calendar deep links for action items."""

from urllib.parse import quote

from meeting_memory.store.models import ActionItem

CALENDAR_EVENT_URL = "https://calendar.google.com/calendar/r/eventedit?text={text}"

# Characters encodeURIComponent leaves alone
_URI_COMPONENT_SAFE = "-_.!~*'()"


def create_event_links(items: list[ActionItem]) -> list[str]:
    """One event-creation URL per action item, same order and length."""
    return [
        CALENDAR_EVENT_URL.format(
            text=quote(f"{item.title} – {item.owner}", safe=_URI_COMPONENT_SAFE)
        )
        for item in items
    ]
