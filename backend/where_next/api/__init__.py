"""Where Next HTTP API."""

from .routes import close_services, get_suggestion_handler, router

__all__ = ["close_services", "get_suggestion_handler", "router"]
