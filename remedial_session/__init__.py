"""Client-side session recording and submission."""
from .client import SessionApiClient
from .recorder import SessionDraft, SessionIdentifiers, SessionRecorder, build_deck, slide_payload

__all__ = [
    "SessionApiClient",
    "SessionDraft",
    "SessionIdentifiers",
    "SessionRecorder",
    "build_deck",
    "slide_payload",
]
