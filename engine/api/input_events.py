"""Public input event types."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class KeyEvent:
    """Raw key event.

    ``event_type`` is ``"key_down"`` or ``"key_up"``; ``key`` is the backend key
    name (``"Escape"``, ``"a"``, ``"ArrowLeft"``...).
    """

    event_type: str
    key: str
    modifiers: tuple[str, ...] = ()

    @property
    def pressed(self) -> bool:
        return self.event_type == "key_down"


__all__ = ["KeyEvent"]
