"""
Mode Controller.

State machine over the interaction modes. Exactly one mode is active at
any time; transitions stop the old mode and set up the new one inside a
single render batch, so a transition renders once.
"""

import logging
from typing import Optional, Union

from models.draw_mode import DrawMode, ModeOptions
from models.errors import InvalidModeError
from .draw_modes import MODES, BaseMode

logger = logging.getLogger(__name__)


class ModeController:
    """
    Owns the active interaction mode.

    Args:
        store: Feature store the modes edit
        events: Events hub; receives modeChanged on notified transitions
        default_mode: Mode entered on construction
        modes: Mode class registry (defaults to the built-in modes)
    """

    def __init__(
        self,
        store,
        events,
        default_mode: Union[DrawMode, str] = DrawMode.SIMPLE_SELECT,
        modes: Optional[dict] = None,
    ):
        self._store = store
        self._events = events
        self._modes: dict[DrawMode, type[BaseMode]] = dict(modes or MODES)
        self._mode = DrawMode.coerce(default_mode)
        self._current = self._build(self._mode, ModeOptions())
        with self._store.render_batch():
            self._current.setup()

    @property
    def current_mode(self) -> BaseMode:
        """The active mode instance."""
        return self._current

    def get_mode(self) -> DrawMode:
        return self._mode

    def _build(self, mode: DrawMode, options: ModeOptions) -> BaseMode:
        mode_class = self._modes.get(mode)
        if mode_class is None:
            raise InvalidModeError(mode.value)
        return mode_class(self._store, self._events, self, options)

    def change_mode(
        self,
        mode: Union[DrawMode, str],
        options: Union[ModeOptions, dict, None] = None,
        notify: bool = True,
    ):
        """
        Replace the active mode.

        The new mode is constructed (and validated) before the old one is
        stopped, so a rejected transition leaves the current mode intact.

        Args:
            mode: Target mode or its string value
            options: Mode options
            notify: Emit modeChanged after the transition

        Raises:
            InvalidModeError: Unknown mode
        """
        mode = DrawMode.coerce(mode)
        next_mode = self._build(mode, ModeOptions.from_value(options))

        with self._store.render_batch():
            self._current.stop()
            previous = self._mode
            self._mode = mode
            self._current = next_mode
            next_mode.setup()

        logger.debug(f"Mode changed: {previous.value} -> {mode.value}")
        if notify:
            self._events.modeChanged.emit(mode.value)

    def trash(self):
        """Forward a trash request to the active mode."""
        with self._store.render_batch():
            self._current.trash()
