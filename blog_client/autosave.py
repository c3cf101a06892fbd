"""Background draft persistence for an open editor.

The coordinator keeps the editor's working copy of a post and decides when it
is worth sending to the API:

* every edit restarts a quiet period; when it expires a save is attempted,
  after which attempts repeat on a fixed interval,
* an attempt is skipped when the draft is blank, unchanged since the last
  successful save, or when the previous attempt was too recent,
* the first successful save creates the draft and every later one updates
  that same draft,
* ``close()`` flushes pending changes one last time, ignoring the cooldown.

Time is read from an injected :class:`~blog_client.clock.Clock` and the
caller drives the machine through :meth:`AutosaveCoordinator.poll` (or lets
:meth:`AutosaveCoordinator.run` do it), so the timing rules can be exercised
without waiting on a real clock.
"""
import asyncio
from enum import Enum
from typing import Any, Callable, Literal, Protocol

import pendulum
from aws_lambda_powertools import Logger
from pydantic import BaseModel, field_validator

from blog_client.clock import Clock, MonotonicClock
from blog_client.exceptions import PostsClientException

QUIET_PERIOD = 5.0
SAVE_INTERVAL = 30.0
SAVE_COOLDOWN = 2.0
SAVE_TIMEOUT = 5.0

logger = Logger(utc=True)


def _split_tags(tags: Any) -> list[str]:
    if tags is None:
        return []
    if isinstance(tags, str):
        tags = tags.split(",")
    stripped = (str(tag).strip() for tag in tags if tag is not None)
    return [tag for tag in stripped if tag]


class AutosaveState(str, Enum):
    IDLE = "idle"
    PENDING = "pending"
    SAVING = "saving"


class DraftPayload(BaseModel):
    title: str = ""
    content: str = ""
    tags: list[str] = []

    @field_validator("tags", mode="before")
    @classmethod
    def split_tags(cls, value):
        return _split_tags(value)

    @property
    def is_blank(self) -> bool:
        return not (self.title.strip() or self.content.strip())


class SaveStatus(BaseModel):
    kind: Literal["saving", "success", "error"]
    message: str


class DraftSaver(Protocol):
    async def create_draft(self, payload: dict[str, Any]) -> dict[str, Any]:
        ...

    async def update_draft(
        self, post_id: str, payload: dict[str, Any]
    ) -> dict[str, Any]:
        ...


class AutosaveCoordinator:
    def __init__(
        self,
        saver: DraftSaver,
        clock: Clock | None = None,
        post_id: str | None = None,
        initial: DraftPayload | None = None,
        quiet_period: float = QUIET_PERIOD,
        interval: float = SAVE_INTERVAL,
        cooldown: float = SAVE_COOLDOWN,
        timeout: float = SAVE_TIMEOUT,
        on_status: Callable[[SaveStatus], None] | None = None,
    ):
        self._saver = saver
        self._clock = clock or MonotonicClock()
        self._post_id = post_id
        self._baseline = initial or DraftPayload()
        self._current = self._baseline.model_copy()
        self._quiet_period = quiet_period
        self._interval = interval
        self._cooldown = cooldown
        self._timeout = timeout
        self._on_status = on_status
        self._deadline: float | None = None
        self._last_attempt: float | None = None
        self._in_flight: asyncio.Future | None = None
        self._lock = asyncio.Lock()
        self._wakeup = asyncio.Event()
        self._closed = False
        self.state = AutosaveState.IDLE
        self.status: SaveStatus | None = None

    @property
    def post_id(self) -> str | None:
        return self._post_id

    @property
    def draft(self) -> DraftPayload:
        return self._current

    @property
    def deadline(self) -> float | None:
        return self._deadline

    @property
    def has_unsaved_changes(self) -> bool:
        return not self._current.is_blank and self._current != self._baseline

    def edit(
        self,
        title: str | None = None,
        content: str | None = None,
        tags: str | list[str] | None = None,
    ):
        if self._closed:
            logger.warning(f"Ignoring edit after close {self._post_id=}")
            return
        changes = {
            k: v
            for k, v in {"title": title, "content": content, "tags": tags}.items()
            if v is not None
        }
        self._current = DraftPayload(**{**self._current.model_dump(), **changes})
        self._deadline = self._clock.now() + self._quiet_period
        if self.state != AutosaveState.SAVING:
            self.state = AutosaveState.PENDING
        self._wakeup.set()

    async def poll(self) -> bool:
        """Attempt a save if the current deadline has passed.

        Returns True when the draft was persisted by this call.
        """
        if self._closed or self._deadline is None:
            return False
        if self._clock.now() < self._deadline:
            return False
        async with self._lock:
            scheduled = self._deadline
            saved = await self._attempt(bypass_cooldown=False)
            # an edit during the attempt already restarted the quiet period
            if self._deadline == scheduled and not self._closed:
                self._deadline = self._clock.now() + self._interval
            return saved

    async def close(self) -> bool:
        """Stop the timers and flush unsaved changes one last time."""
        if self._closed:
            return False
        self._closed = True
        self._deadline = None
        self._wakeup.set()
        async with self._lock:
            if self._in_flight is not None and not self._in_flight.done():
                await asyncio.wait([self._in_flight])
            saved = await self._attempt(bypass_cooldown=True)
        self.state = AutosaveState.IDLE
        return saved

    async def run(self):
        """Drive :meth:`poll` from the event loop until :meth:`close` is called."""
        while not self._closed:
            self._wakeup.clear()
            if self._deadline is None:
                await self._wakeup.wait()
                continue
            delay = self._deadline - self._clock.now()
            if delay > 0:
                try:
                    await asyncio.wait_for(self._wakeup.wait(), delay)
                except asyncio.TimeoutError:
                    pass
                continue
            await self.poll()

    async def _attempt(self, bypass_cooldown: bool) -> bool:
        payload = self._current
        if payload.is_blank or payload == self._baseline:
            self._settle()
            return False
        now = self._clock.now()
        if (
            not bypass_cooldown
            and self._last_attempt is not None
            and now - self._last_attempt < self._cooldown
        ):
            logger.debug("Skipping autosave, previous attempt too recent")
            return False
        if self._in_flight is not None:
            if not self._in_flight.done():
                logger.info("Skipping autosave, previous save still in flight")
                return False
            self._collect_in_flight()
        self._last_attempt = now
        self.state = AutosaveState.SAVING
        self._set_status("saving", "Auto-saving draft...")
        creating = self._post_id is None
        task = asyncio.ensure_future(self._send(payload.model_dump()))
        try:
            await asyncio.wait_for(asyncio.shield(task), self._timeout)
        except asyncio.TimeoutError:
            # left running so a late create still records its id
            self._in_flight = task
            logger.warning(f"Autosave timed out after {self._timeout}s")
            self._set_status("error", "Saving the draft timed out")
            self._settle()
            return False
        except PostsClientException as exc:
            logger.warning(f"Autosave failed {exc.status_code=} {exc.message=}")
            self._set_status("error", exc.message)
            self._settle()
            return False
        except Exception:
            logger.exception("Unexpected error while saving the draft")
            self._set_status("error", "Saving the draft failed")
            self._settle()
            return False
        self._baseline = payload
        action = "created" if creating else "updated"
        self._set_status(
            "success", f"Draft {action} at {pendulum.now().format('HH:mm:ss')}"
        )
        self._settle()
        return True

    async def _send(self, payload: dict[str, Any]) -> dict[str, Any]:
        if self._post_id is None:
            post = await self._saver.create_draft(payload)
            self._post_id = post["id"]
            logger.info(f"Draft created {self._post_id=}")
            return post
        return await self._saver.update_draft(self._post_id, payload)

    def _collect_in_flight(self):
        task, self._in_flight = self._in_flight, None
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None:
            logger.info(f"Late autosave failed {exc=}")

    def _settle(self):
        self.state = (
            AutosaveState.PENDING if self.has_unsaved_changes else AutosaveState.IDLE
        )

    def _set_status(self, kind: str, message: str):
        self.status = SaveStatus(kind=kind, message=message)
        if self._on_status is not None:
            self._on_status(self.status)
