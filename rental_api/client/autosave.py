# This project was developed with assistance from AI tools.
"""Client-side autosave coordinator for the multi-step intake form.

Turns form events (field blur, step navigation) into draft writes against
the API and exposes a ``save_status`` observers can render:

    idle -> saving -> saved -> (after ``saved_display`` s) idle
    idle -> saving -> error -> (after ``error_display`` s) idle

A new trigger while a save is in flight cancels that save and sends the
latest snapshot instead. Every save carries a strictly increasing
``revision``; a response that belongs to a superseded save is discarded,
and the server ignores writes at or below the revision it already stored.

The first successful save pins the application id; every later save is a
PATCH to that id, so one form session never creates a second record.
"""

import asyncio
import enum
import logging
import time
from collections.abc import Callable
from dataclasses import dataclass, field

import httpx

logger = logging.getLogger(__name__)

_API_PREFIX = "/api/applications"


class SaveStatus(str, enum.Enum):
    IDLE = "idle"
    SAVING = "saving"
    SAVED = "saved"
    ERROR = "error"


class AutosaveError(Exception):
    """A draft write or submission the server refused or never answered."""

    def __init__(self, message: str, *, status_code: int | None = None, problem: dict | None = None):
        super().__init__(message)
        self.status_code = status_code
        self.problem = problem or {}


@dataclass
class ResumedDraft:
    """What ``resume()`` found on the server."""

    application_id: int
    status: str
    current_step: int
    fields: dict = field(default_factory=dict)


def _error_from_response(response: httpx.Response) -> AutosaveError:
    try:
        problem = response.json()
    except ValueError:
        problem = {}
    if not isinstance(problem, dict):
        problem = {}
    detail = problem.get("detail") or response.reason_phrase or "Request failed"
    return AutosaveError(detail, status_code=response.status_code, problem=problem)


class AutosaveCoordinator:
    """Debounce-free, cancel-and-replace autosave for one applicant and property.

    Args:
        client: An ``httpx.AsyncClient`` with ``base_url`` and auth configured.
        property_id: Property the application is for.
        saved_display: Seconds ``saved`` is shown before returning to ``idle``.
        error_display: Seconds ``error`` is shown before returning to ``idle``.
        timeout: Per-request timeout in seconds.
        max_retries: Extra attempts after a request times out. Other
            failures are never retried.
    """

    def __init__(
        self,
        client: httpx.AsyncClient,
        property_id: str,
        *,
        saved_display: float = 2.0,
        error_display: float = 3.0,
        timeout: float = 10.0,
        max_retries: int = 2,
    ):
        self._client = client
        self.property_id = property_id
        self._saved_display = saved_display
        self._error_display = error_display
        self._timeout = timeout
        self._max_retries = max_retries

        self.application_id: int | None = None
        self.current_step = 1
        self.save_status = SaveStatus.IDLE
        self.last_error: AutosaveError | None = None

        # Wall-clock seed keeps revisions increasing across form sessions
        self._revision = time.time_ns() // 1_000_000
        self._task: asyncio.Task | None = None
        self._reset_handle: asyncio.TimerHandle | None = None
        self._subscribers: list[Callable[[SaveStatus], None]] = []

    # ------------------------------------------------------------------
    # Observers
    # ------------------------------------------------------------------

    def subscribe(self, callback: Callable[[SaveStatus], None]) -> Callable[[], None]:
        """Register ``callback(status)`` for every status change. Returns an unsubscribe function."""
        self._subscribers.append(callback)

        def _unsubscribe() -> None:
            if callback in self._subscribers:
                self._subscribers.remove(callback)

        return _unsubscribe

    def _set_status(self, status: SaveStatus) -> None:
        self.save_status = status
        for callback in list(self._subscribers):
            try:
                callback(status)
            except Exception:
                logger.exception("Autosave status subscriber failed")

    def _schedule_idle(self, delay: float, revision: int) -> None:
        self._cancel_idle()
        loop = asyncio.get_running_loop()
        self._reset_handle = loop.call_later(delay, self._return_to_idle, revision)

    def _cancel_idle(self) -> None:
        if self._reset_handle is not None:
            self._reset_handle.cancel()
            self._reset_handle = None

    def _return_to_idle(self, revision: int) -> None:
        self._reset_handle = None
        if revision == self._revision and self.save_status in (SaveStatus.SAVED, SaveStatus.ERROR):
            self._set_status(SaveStatus.IDLE)

    # ------------------------------------------------------------------
    # Triggers
    # ------------------------------------------------------------------

    def on_field_blur(self, values: dict) -> asyncio.Task:
        """A field lost focus: save the whole form at the current step."""
        return self._trigger(values, self.current_step)

    def on_step_forward(self, values: dict, step: int) -> asyncio.Task:
        """The applicant moved forward to ``step``: save and record the new step."""
        self.current_step = step
        return self._trigger(values, step)

    def on_step_backward(self, values: dict, step: int) -> asyncio.Task:
        """The applicant moved back to ``step``. The server keeps the furthest step."""
        self.current_step = step
        return self._trigger(values, step)

    def _trigger(self, values: dict, step: int) -> asyncio.Task:
        self._cancel_idle()
        self._set_status(SaveStatus.SAVING)
        if self._task is not None and not self._task.done():
            self._task.cancel()
        self._revision += 1
        self._task = asyncio.get_running_loop().create_task(
            self._save(dict(values), step, self._revision)
        )
        return self._task

    # ------------------------------------------------------------------
    # Network
    # ------------------------------------------------------------------

    async def _send_draft(self, values: dict, step: int, revision: int) -> httpx.Response:
        body = {"step": step, "fields": values, "revision": revision}
        if self.application_id is None:
            body["property_id"] = self.property_id
            return await self._client.post(f"{_API_PREFIX}/drafts", json=body, timeout=self._timeout)
        return await self._client.patch(
            f"{_API_PREFIX}/{self.application_id}/draft", json=body, timeout=self._timeout
        )

    async def _save(self, values: dict, step: int, revision: int) -> None:
        attempt = 0
        while True:
            try:
                response = await self._send_draft(values, step, revision)
                break
            except httpx.TimeoutException as exc:
                attempt += 1
                if attempt > self._max_retries:
                    self._fail(AutosaveError(f"Autosave timed out: {exc}"), revision)
                    return
                logger.debug("Autosave revision %d timed out, retry %d", revision, attempt)
            except httpx.HTTPError as exc:
                self._fail(AutosaveError(f"Autosave failed: {exc}"), revision)
                return

        if revision != self._revision:
            # Superseded while the response was in transit
            return
        if response.status_code >= 400:
            self._fail(_error_from_response(response), revision)
            return

        body = response.json()
        if self.application_id is None:
            self.application_id = body["id"]
        self.last_error = None
        self._set_status(SaveStatus.SAVED)
        self._schedule_idle(self._saved_display, revision)

    def _fail(self, error: AutosaveError, revision: int) -> None:
        if revision != self._revision:
            return
        logger.warning("Autosave failed for property %s: %s", self.property_id, error)
        self.last_error = error
        self._set_status(SaveStatus.ERROR)
        self._schedule_idle(self._error_display, revision)

    async def flush(self) -> None:
        """Wait until no save is in flight, including saves triggered meanwhile."""
        while self._task is not None and not self._task.done():
            task = self._task
            await asyncio.wait([task])

    # ------------------------------------------------------------------
    # Resume / submit
    # ------------------------------------------------------------------

    async def resume(self) -> ResumedDraft | None:
        """Load the open application for this property, or None if there is none."""
        response = await self._client.get(
            f"{_API_PREFIX}/drafts",
            params={"property_id": self.property_id},
            timeout=self._timeout,
        )
        if response.status_code == 404:
            return None
        if response.status_code >= 400:
            raise _error_from_response(response)

        body = response.json()
        self.application_id = body["id"]
        self.current_step = body.get("current_step", 1)
        self._revision = max(self._revision, body.get("draft_revision", 0))
        return ResumedDraft(
            application_id=body["id"],
            status=body["status"],
            current_step=self.current_step,
            fields=body.get("fields") or {},
        )

    async def submit(self, legal_acceptance: bool = True) -> dict:
        """Submit the application after the in-flight save settles.

        Submission is always an explicit call; no trigger ever submits.
        """
        await self.flush()
        if self.application_id is None:
            raise AutosaveError("Nothing has been saved yet")

        response = await self._client.post(
            f"{_API_PREFIX}/{self.application_id}/submit",
            json={"legal_acceptance": legal_acceptance},
            timeout=self._timeout,
        )
        if response.status_code >= 400:
            raise _error_from_response(response)
        return response.json()

    async def close(self) -> None:
        """Cancel any in-flight save and pending status reset."""
        self._cancel_idle()
        if self._task is not None and not self._task.done():
            self._task.cancel()
            await asyncio.wait([self._task])
