"""
Python client for the messaging endpoint: session handling, the blocking
API wrapper, the in-memory conversation cache and the text views built on it.
"""
from .api import MessagingApi
from .controller import Messenger
from .session import Session, SessionStore
from .state import MessagingState

__all__ = ["MessagingApi", "Messenger", "MessagingState", "Session", "SessionStore"]
