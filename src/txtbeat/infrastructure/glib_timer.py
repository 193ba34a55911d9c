from collections.abc import Callable
from typing import override

from gi.repository import GLib  # pyright: ignore[reportMissingModuleSource]

from txtbeat.application.ports import CadenceTimer


class GLibTimer(CadenceTimer):
    """Agenda as batidas no laço principal do GLib, o mesmo da interface."""

    @override
    def schedule(self, delay_ms: int, callback: Callable[[], None]) -> int:
        return GLib.timeout_add(delay_ms, self._fire, callback)

    @override
    def cancel(self, handle: int) -> None:
        GLib.source_remove(handle)

    def _fire(self, callback: Callable[[], None]) -> bool:
        callback()
        return GLib.SOURCE_REMOVE
