from __future__ import annotations
from dataclasses import dataclass, field
from typing import Dict, List, Optional

import numpy as np

from domain.active_palette import ActivePalette
from domain.enums import ImageSource

@dataclass
class ChatSession:
    active: ActivePalette
    preview: Optional[np.ndarray] = None
    preview_source: Optional[ImageSource] = None
    swatches: List[str] = field(default_factory=list)
    busy: bool = False

class SessionStore:
    """Per-chat state. Only touched from the event loop, so no locking."""

    def __init__(self, max_active: int = 8) -> None:
        self.max_active = max_active
        self._sessions: Dict[int, ChatSession] = {}

    def get(self, chat_id: int) -> ChatSession:
        sess = self._sessions.get(chat_id)
        if sess is None:
            sess = ChatSession(active=ActivePalette(limit=self.max_active))
            self._sessions[chat_id] = sess
        return sess

    def begin(self, chat_id: int) -> bool:
        """Mark an extraction in flight; False if one already is."""
        sess = self.get(chat_id)
        if sess.busy:
            return False
        sess.busy = True
        return True

    def end(self, chat_id: int) -> None:
        self.get(chat_id).busy = False
