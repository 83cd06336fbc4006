import uuid
from collections import OrderedDict
from typing import Callable, Optional

from wishmaker.config import MAX_WIZARD_SESSIONS
from wishmaker.flows.wizard import WishWizard


class WizardSessions:
    """Wizards in progress for this process, oldest evicted first."""

    def __init__(self, max_sessions: int = MAX_WIZARD_SESSIONS,
                 factory: Optional[Callable[[], WishWizard]] = None):
        self.max_sessions = max_sessions
        self.factory = factory or WishWizard
        self._sessions: "OrderedDict[str, WishWizard]" = OrderedDict()

    def create(self) -> tuple[str, WishWizard]:
        session_id = uuid.uuid4().hex
        wizard = self.factory()
        self._sessions[session_id] = wizard
        while len(self._sessions) > self.max_sessions:
            self._sessions.popitem(last=False)
        return session_id, wizard

    def get(self, session_id: str) -> Optional[WishWizard]:
        wizard = self._sessions.get(session_id)
        if wizard is not None:
            self._sessions.move_to_end(session_id)
        return wizard

    def discard(self, session_id: str) -> None:
        self._sessions.pop(session_id, None)

    def __len__(self) -> int:
        return len(self._sessions)


# Singleton
wizard_sessions = WizardSessions()
