"""Compensation bookkeeping for the signup saga."""

from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field

from loguru import logger

from src.onboarding.core.models.saga import SagaState

CompensatingAction = Callable[[], Awaitable[None]]


class CompensationStack:
    """Undo actions registered as saga steps commit, run newest-first."""

    def __init__(self) -> None:
        self._actions: list[tuple[str, CompensatingAction]] = []

    def __len__(self) -> int:
        return len(self._actions)

    @property
    def pending(self) -> list[str]:
        return [name for name, _ in self._actions]

    def push(self, name: str, action: CompensatingAction) -> None:
        self._actions.append((name, action))

    async def unwind(self) -> list[tuple[str, Exception]]:
        """Run every action once, in reverse order of registration.

        A failing action is logged and skipped; the remaining actions still
        run.

        Returns:
            (name, error) for each action that failed
        """
        failures: list[tuple[str, Exception]] = []
        while self._actions:
            name, action = self._actions.pop()
            try:
                await action()
                logger.info(f"Compensation '{name}' completed")
            except Exception as exc:
                logger.error(f"Compensation '{name}' failed: {exc!r}")
                failures.append((name, exc))
        return failures


@dataclass
class SagaRun:
    """State of one signup saga invocation. Never outlives the call."""

    natural_key: str
    state: SagaState = SagaState.STARTED
    history: list[SagaState] = field(default_factory=lambda: [SagaState.STARTED])
    compensations: CompensationStack = field(default_factory=CompensationStack)

    def advance(self, state: SagaState) -> None:
        logger.debug(f"Saga {self.natural_key}: {self.state.value} -> {state.value}")
        self.state = state
        self.history.append(state)
