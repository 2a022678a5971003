"""Example: use the service layer directly (no Flask).

Controllers are a thin layer; the business rules live in the services.
"""

import importlib

from dotenv import load_dotenv

from config import get_settings_module

from src.community_events.community_events.container import container_from_settings


def main():
    load_dotenv(override=False)
    settings = importlib.import_module(get_settings_module())
    container = container_from_settings(settings)

    page = container.event_service.list_events(is_active=True, limit=5)
    for event in page.items:
        seats = "unlimited" if event.max_attendees is None else f"{event.current_attendees}/{event.max_attendees}"
        print(f"#{event.event_id} {event.start_date:%Y-%m-%d %H:%M} {event.title} ({seats})")


if __name__ == "__main__":
    main()
