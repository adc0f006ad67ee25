"""Plugin-facing facade over one :class:`OutlineController`.

Host adapters bind their commands (open, close, toggle, refresh, focus) to an
:class:`OutlineApp`. ``setup`` loads the persisted config, applies runtime
overrides, and wires auto-open when enabled.
"""

from __future__ import annotations

import logging
from pathlib import Path

from .config import OutlineConfig, config_from_mapping, load_config, merge_config
from .controller import OutlineController
from .host import LEVEL_WARN, Host, SourceWindow, Subscription
from .types import StructuralNode

logger = logging.getLogger(__name__)

VERSION = "0.1.0"


class OutlineApp:
    def __init__(self, host: Host, config_path: Path | None = None) -> None:
        self.host = host
        self.config_path = config_path
        self.options: dict[str, object] = {}
        self.controller = OutlineController(host)
        self.initialized = False
        self._auto_open_subscription: Subscription | None = None

    @property
    def config(self) -> OutlineConfig:
        return self.controller.config

    def setup(self, overrides: object = None) -> OutlineConfig:
        """Load config, define style groups, and install the auto-open hook."""
        self.options = merge_config(load_config(self.config_path), overrides)
        self.controller.config = config_from_mapping(self.options)
        self.controller.define_styles()
        self._install_auto_open()
        self.initialized = True
        return self.config

    def _ensure_setup(self) -> None:
        if not self.initialized:
            self.setup()

    def _install_auto_open(self) -> None:
        if self._auto_open_subscription is not None:
            self._auto_open_subscription.unsubscribe()
            self._auto_open_subscription = None
        if self.config.auto_open:
            self._auto_open_subscription = self.host.on_window_activated(self._auto_open)

    def _auto_open(self) -> None:
        if self.controller.is_open:
            return
        window = self.host.current_window()
        if window is None or not window.is_valid():
            return
        if self.controller.supports(window.buffer().language):
            self.controller.open(window)

    def open(self, window: SourceWindow | None = None) -> bool:
        self._ensure_setup()
        return self.controller.open(window)

    def close(self) -> None:
        self.controller.close()

    def toggle(self, window: SourceWindow | None = None) -> bool:
        self._ensure_setup()
        return self.controller.toggle(window)

    def refresh(self) -> bool:
        """Force a full re-render when open."""
        if not self.controller.is_open:
            return False
        return self.controller.full_update()

    def refresh_styles(self) -> None:
        """Re-resolve style groups, e.g. after the host's theme changed."""
        self.controller.define_styles()

    def focus(self) -> bool:
        if not self.controller.is_open:
            self.host.notify("Outline is not open", LEVEL_WARN)
            return False
        return self.controller.focus()

    def jump(self) -> int | None:
        return self.controller.jump()

    def current_scope(self) -> StructuralNode | None:
        return self.controller.current_scope()

    def is_open(self) -> bool:
        return self.controller.is_open

    def update_config(self, overrides: object) -> OutlineConfig:
        """Deep-merge ``overrides`` into the current options and apply them."""
        self.options = merge_config(self.options, overrides)
        config = config_from_mapping(self.options)
        logger.debug("Outline config updated: %s", overrides)
        self.controller.update_config(config)
        self._install_auto_open()
        return config
