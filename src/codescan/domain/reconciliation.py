"""Client-side scan history with optimistic updates.

The list is updated in two phases: a successful scan is prepended locally right
away, then the authoritative list is pulled from the server and replaces local
state wholesale. The server view wins, even if it drops or reorders the
optimistic entry.
"""

from __future__ import annotations

import time
from logging import getLogger
from typing import TYPE_CHECKING

from codescan.domain.errors import ScanPipelineError

if TYPE_CHECKING:
    from collections.abc import Callable

    from codescan.domain.model import ScanRecord
    from codescan.domain.ports import ScanApi

    type ScanListener = Callable[[tuple[ScanRecord, ...]], None]

DEFAULT_DEBOUNCE_SECONDS = 2.0

log = getLogger(__name__)


class ScanHistory:
    """Local view of the caller's scans, kept consistent with the server."""

    def __init__(
        self,
        api: ScanApi,
        *,
        debounce_seconds: float = DEFAULT_DEBOUNCE_SECONDS,
        monotonic: Callable[[], float] = time.monotonic,
    ) -> None:
        self._api = api
        self._debounce_seconds = debounce_seconds
        self._monotonic = monotonic
        self._scans: list[ScanRecord] = []
        self._last_accepted: tuple[str, float] | None = None
        self._listeners: list[ScanListener] = []
        self.error: ScanPipelineError | None = None
        self.is_loading = False

    @property
    def scans(self) -> tuple[ScanRecord, ...]:
        return tuple(self._scans)

    def subscribe(self, listener: ScanListener) -> Callable[[], None]:
        """Call ``listener`` with the current list after every change."""

        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def record_scan(self, raw_payload: str) -> ScanRecord | None:
        """Submit a scan; returns ``None`` when it repeats the last one too soon.

        On failure the error is stored on ``error`` and re-raised, and local state
        is left untouched. A failed refresh after a successful submit keeps the
        optimistic entry and is reported through ``error`` only.
        """

        now = self._monotonic()
        if self._is_debounced(raw_payload, now):
            log.debug("Ignoring repeated scan within %ss", self._debounce_seconds)
            return None

        try:
            record = self._api.submit_scan(raw_payload)
        except ScanPipelineError as exc:
            self.error = exc
            raise

        self._last_accepted = (raw_payload, now)
        self.error = None
        self._replace([record, *self._scans])

        try:
            self.refresh()
        except ScanPipelineError:
            log.warning("Refresh after scan failed; keeping optimistic entry", exc_info=True)
        return record

    def refresh(self) -> None:
        """Replace local state with the server's canonical list."""

        self.is_loading = True
        try:
            scans = self._api.list_scans()
        except ScanPipelineError as exc:
            self.error = exc
            raise
        finally:
            self.is_loading = False
        self.error = None
        self._replace(scans)

    def clear(self) -> None:
        """Drop local state; the server history is append-only and unaffected."""

        self._last_accepted = None
        self._replace([])

    def _is_debounced(self, raw_payload: str, now: float) -> bool:
        if self._last_accepted is None:
            return False
        last_payload, accepted_at = self._last_accepted
        return last_payload == raw_payload and now - accepted_at < self._debounce_seconds

    def _replace(self, scans: list[ScanRecord]) -> None:
        self._scans = list(scans)
        snapshot = self.scans
        for listener in list(self._listeners):
            listener(snapshot)
