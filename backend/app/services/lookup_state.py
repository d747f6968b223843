"""
Observable state for lookup and import calls.

    Idle -> Loading -> Success | Error

A terminal state is left again as soon as the next call starts. Subscribers
are called with every new state, in transition order.
"""

import logging
from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum
from typing import Any

from app.schemas.parts import Failed, Found, ImportFailed, ImportResult, ImportSucceeded, ResolutionResult
from app.services.part_importer import PartImporter
from app.services.part_resolver import PartResolver

logger = logging.getLogger(__name__)


class Phase(str, Enum):
    IDLE = "idle"
    LOADING = "loading"
    SUCCESS = "success"
    ERROR = "error"


@dataclass(frozen=True)
class LookupState:
    phase: Phase
    result: Any = None  # Success payload
    message: str | None = None  # Error payload

    @classmethod
    def idle(cls) -> "LookupState":
        return cls(Phase.IDLE)

    @classmethod
    def loading(cls) -> "LookupState":
        return cls(Phase.LOADING)

    @classmethod
    def success(cls, result: Any) -> "LookupState":
        return cls(Phase.SUCCESS, result=result)

    @classmethod
    def error(cls, message: str) -> "LookupState":
        return cls(Phase.ERROR, message=message)

    def to_dict(self) -> dict:
        result = self.result.model_dump() if hasattr(self.result, "model_dump") else self.result
        return {"phase": self.phase.value, "result": result, "message": self.message}


Listener = Callable[[LookupState], None]


class LookupStateMachine:
    """
    Holds the current LookupState.

    start() hands out a ticket; only the most recent ticket may finish the
    call, so a newer call supersedes whatever an older one reports later.
    """

    def __init__(self):
        self._state = LookupState.idle()
        self._listeners: list[Listener] = []
        self._ticket = 0

    @property
    def state(self) -> LookupState:
        return self._state

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Register a listener; returns a function that unregisters it."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def start(self) -> int:
        self._ticket += 1
        self._set(LookupState.loading())
        return self._ticket

    def succeed(self, ticket: int, result: Any) -> None:
        self._finish(ticket, LookupState.success(result))

    def fail(self, ticket: int, message: str) -> None:
        self._finish(ticket, LookupState.error(message))

    def _finish(self, ticket: int, state: LookupState) -> None:
        if ticket != self._ticket:
            logger.debug(f"Dropping result of superseded call {ticket}")
            return
        self._set(state)

    def _set(self, state: LookupState) -> None:
        self._state = state
        for listener in list(self._listeners):
            listener(state)


class LookupSession:
    """Runs resolver and importer calls through one state machine."""

    def __init__(self, resolver: PartResolver, importer: PartImporter, machine: LookupStateMachine | None = None):
        self.resolver = resolver
        self.importer = importer
        self.machine = machine or LookupStateMachine()

    @property
    def state(self) -> LookupState:
        return self.machine.state

    async def search(self, raw: str) -> ResolutionResult:
        ticket = self.machine.start()
        try:
            result = await self.resolver.resolve(raw)
        except Exception as e:
            logger.exception(f"Error looking up part {raw}")
            result = Failed(message=str(e) or "Unknown error occurred")
        if isinstance(result, Found):
            self.machine.succeed(ticket, result)
        else:
            self.machine.fail(ticket, result.message)
        return result

    async def import_file(self, content: bytes, kind: str | None) -> ImportResult:
        ticket = self.machine.start()
        try:
            result = await self.importer.import_file(content, kind)
        except Exception as e:
            label = (kind or "file").upper()
            logger.exception(f"Failed to import {label}")
            result = ImportFailed(kind="io_error", message=f"Failed to import {label}: {e}")
        if isinstance(result, ImportSucceeded):
            self.machine.succeed(ticket, result)
        else:
            self.machine.fail(ticket, result.message)
        return result
