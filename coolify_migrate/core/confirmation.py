"""Confirmation providers for the interactive questions of a run.

The migration asks two questions (stop the local service, remove the local
archive). Answers come from a provider so the procedure can run from a
terminal, from command-line flags, or unattended in tests.
"""

from abc import ABC, abstractmethod

import questionary

from ..models.enums import ConfirmationKey


class ConfirmationProvider(ABC):
    """Answers yes/no questions identified by a ``ConfirmationKey``."""

    @abstractmethod
    async def confirm(self, key: ConfirmationKey, question: str) -> bool:
        """Return True for an affirmative answer."""


class InteractiveConfirmation(ConfirmationProvider):
    """Asks the operator on the terminal. Blocks until answered."""

    async def confirm(self, key: ConfirmationKey, question: str) -> bool:
        answer = await questionary.confirm(question, default=False, qmark="?").ask_async()
        if answer is None:
            # questionary returns None when the prompt is interrupted
            raise KeyboardInterrupt
        return bool(answer)


class PresetConfirmation(ConfirmationProvider):
    """Answers from pre-supplied values, deferring unknown keys to a fallback.

    Without a fallback, unanswered questions are treated as "no".
    """

    def __init__(
        self,
        answers: dict[ConfirmationKey, bool] | None = None,
        fallback: ConfirmationProvider | None = None,
    ):
        self.answers = dict(answers or {})
        self.fallback = fallback

    async def confirm(self, key: ConfirmationKey, question: str) -> bool:
        if key in self.answers:
            return self.answers[key]
        if self.fallback is not None:
            return await self.fallback.confirm(key, question)
        return False


class AlwaysYes(PresetConfirmation):
    """Affirms every question."""

    def __init__(self):
        super().__init__({key: True for key in ConfirmationKey})
