"""
Conversation context and reference resolution.

This module provides:
- ReferenceHistory: recency lists of touched files, directories and tasks
- ConversationContext: message buffer, interaction log and working state
- IntentResolver: rule-based corrections of classified intents
- SessionContext: everything one session owns, passed to the router
"""

from devtask.context.entities import (
    ReferenceEntry,
    ReferenceHistory,
    ReferenceKind,
    RecencyRegistry,
)
from devtask.context.conversation import ConversationContext, ConversationState
from devtask.context.resolver import IntentResolver, ResolutionRule
from devtask.context.session import SessionContext

__all__ = [
    "ReferenceEntry",
    "ReferenceHistory",
    "ReferenceKind",
    "RecencyRegistry",
    "ConversationContext",
    "ConversationState",
    "IntentResolver",
    "ResolutionRule",
    "SessionContext",
]
