from django.apps import AppConfig


class RoomsConfig(AppConfig):
    """Rooms app: one-time-code rendezvous and file chunk relay."""

    name = "rooms"
