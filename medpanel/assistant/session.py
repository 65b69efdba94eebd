"""
Per-user dashboard state that lives only in memory.

Each signed-in doctor gets a SessionState on first use: the assistant
conversation and the pane layout. Logging out drops it.
"""
import logging
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Dict, List, Optional

from medpanel.assistant.generator import TextGenerator, get_generator
from medpanel.assistant.prompts import build_chat_prompt, build_patient_report_prompt
from medpanel.assistant.report import gather_patient_data
from medpanel.layout.resizable import PaneLayout
from medpanel.repositories.message_repository import MessageRepository
from medpanel.schemas.assistant import AssistantMessage, AssistantState
from medpanel.schemas.patient import PatientSummary
from medpanel.services.health_service import HealthService


logger = logging.getLogger(__name__)

CHAT_ERROR_REPLY = "Sorry, something went wrong. Please try again."
REPORT_ERROR_REPLY = "An error occurred while generating the patient report. Please try again."


def _new_message(content: str, role: str) -> AssistantMessage:
    return AssistantMessage(
        id=uuid.uuid4().hex,
        content=content,
        role=role,
        timestamp=datetime.now(timezone.utc),
    )


class AssistantSession:

    def __init__(self, generator: Optional[TextGenerator] = None) -> None:
        self._generator = generator
        self.messages: List[AssistantMessage] = []
        self.is_loading = False
        self.is_generating_report = False

    def state(self) -> AssistantState:
        return AssistantState(
            messages=list(self.messages),
            is_loading=self.is_loading,
            is_generating_report=self.is_generating_report,
        )

    def clear_messages(self) -> None:
        self.messages = []

    async def _generate(self, prompt: str) -> str:
        if self._generator is None:
            raise RuntimeError("No text generator configured")
        return await self._generator.generate(prompt)

    async def send_message(self, content: str) -> AssistantMessage:
        """Append the user's turn and the model's reply; a failed call yields a placeholder reply."""
        history = list(self.messages)
        self.messages.append(_new_message(content, "user"))
        self.is_loading = True
        try:
            text = await self._generate(build_chat_prompt(history, content))
        except Exception:
            logger.error("Assistant reply failed", exc_info=True)
            text = CHAT_ERROR_REPLY
        finally:
            self.is_loading = False
        reply = _new_message(text, "assistant")
        self.messages.append(reply)
        return reply

    async def generate_patient_report(
        self,
        patient: PatientSummary,
        health_service: HealthService,
        message_repo: MessageRepository,
    ) -> AssistantMessage:
        self.is_generating_report = True
        try:
            data = await gather_patient_data(patient, health_service, message_repo)
            self.messages.append(_new_message(f"Medical report requested for {patient.name} {patient.surname}.", "user"))
            try:
                text = await self._generate(build_patient_report_prompt(data))
            except Exception:
                logger.error("Report generation for patient %s failed", patient.id, exc_info=True)
                text = REPORT_ERROR_REPLY
        finally:
            self.is_generating_report = False
        reply = _new_message(text, "assistant")
        self.messages.append(reply)
        return reply


@dataclass
class SessionState:
    assistant: AssistantSession
    layout: PaneLayout = field(default_factory=PaneLayout)

    def close(self) -> None:
        self.layout.close()


class SessionRegistry:
    """user id -> SessionState, created on demand."""

    def __init__(self, generator: Optional[TextGenerator] = None) -> None:
        self._generator = generator
        self._sessions: Dict[str, SessionState] = {}

    def __contains__(self, user_id: str) -> bool:
        return user_id in self._sessions

    def __len__(self) -> int:
        return len(self._sessions)

    def get(self, user_id: str) -> SessionState:
        state = self._sessions.get(user_id)
        if state is None:
            state = SessionState(assistant=AssistantSession(self._generator))
            self._sessions[user_id] = state
        return state

    def drop(self, user_id: str) -> bool:
        state = self._sessions.pop(user_id, None)
        if state is None:
            return False
        state.close()
        return True


_registry: Optional[SessionRegistry] = None


def get_session_registry() -> SessionRegistry:
    global _registry
    if _registry is None:
        _registry = SessionRegistry(get_generator())
    return _registry
