"""Runtime configuration of the operator, with platform auto-detection."""

from __future__ import annotations

import logging
import threading
from typing import Callable, Iterable, Protocol

from . import version as _version
from .autodetect import Platform

DEFAULT_AUTO_DETECT_FREQUENCY = 5.0
DEFAULT_COLLECTOR_CONFIG_MAP_ENTRY = "collector.yaml"
DEFAULT_TARGET_ALLOCATOR_CONFIG_MAP_ENTRY = "targetallocator.yaml"


class PlatformDetector(Protocol):
    def platform(self) -> Platform: ...


class Config:
    """Static configuration of the operator, plus the detected platform."""

    def __init__(
        self,
        *,
        autodetect: PlatformDetector | None = None,
        auto_detect_frequency: float = DEFAULT_AUTO_DETECT_FREQUENCY,
        collector_image: str = "",
        collector_config_map_entry: str = DEFAULT_COLLECTOR_CONFIG_MAP_ENTRY,
        target_allocator_image: str = "",
        target_allocator_config_map_entry: str = DEFAULT_TARGET_ALLOCATOR_CONFIG_MAP_ENTRY,
        logger: logging.Logger | None = None,
        on_change: Iterable[Callable[[], None]] = (),
        platform: Platform = Platform.UNKNOWN,
        version: _version.Version | None = None,
        auto_instrumentation_java_image: str = "",
        auto_instrumentation_nodejs_image: str = "",
        auto_instrumentation_python_image: str = "",
    ) -> None:
        self._autodetect = autodetect
        self._auto_detect_frequency = auto_detect_frequency
        self._collector_image = collector_image
        self._collector_config_map_entry = collector_config_map_entry
        self._target_allocator_image = target_allocator_image
        self._target_allocator_config_map_entry = target_allocator_config_map_entry
        self._logger = logger or logging.getLogger("oteloperator.config")
        self._on_change = list(on_change)
        self._platform = platform
        self._version = version if version is not None else _version.get()
        self._auto_instrumentation_java_image = auto_instrumentation_java_image
        self._auto_instrumentation_nodejs_image = auto_instrumentation_nodejs_image
        self._auto_instrumentation_python_image = auto_instrumentation_python_image

        self._lock = threading.Lock()
        self._stop = threading.Event()
        self._thread: threading.Thread | None = None

    def add_on_change(self, callback: Callable[[], None]) -> None:
        """Register a callback run whenever the detected configuration changes."""
        self._on_change.append(callback)

    def start_auto_detect(self) -> None:
        """Detect once, blocking, then keep detecting periodically in the background.

        The background detection is scheduled even when the first run fails;
        the failure of the first run is then raised.
        """
        error: Exception | None = None
        try:
            self.auto_detect()
        except Exception as exc:
            error = exc

        if self._thread is None or not self._thread.is_alive():
            self._stop.clear()
            self._thread = threading.Thread(
                target=self._periodic_auto_detect,
                name="oteloperator-autodetect",
                daemon=True,
            )
            self._thread.start()

        if error is not None:
            raise error

    def stop_auto_detect(self) -> None:
        """Stop the periodic auto-detection, if it runs."""
        self._stop.set()
        thread, self._thread = self._thread, None
        if thread is not None and thread is not threading.current_thread():
            thread.join()

    def _periodic_auto_detect(self) -> None:
        while not self._stop.wait(self._auto_detect_frequency):
            try:
                self.auto_detect()
            except Exception as exc:
                self._logger.info("auto-detection failed: %s", exc)

    def auto_detect(self) -> None:
        """Detect the platform when unknown and notify the callbacks on change."""
        self._logger.debug("auto-detecting the configuration based on the environment")
        changed = False
        with self._lock:
            if self._platform is Platform.UNKNOWN:
                if self._autodetect is None:
                    raise RuntimeError("no auto-detection routine is configured")
                detected = self._autodetect.platform()
                if detected != self._platform:
                    self._logger.debug("platform detected: %s", detected)
                    self._platform = detected
                    changed = True

        if changed:
            for callback in list(self._on_change):
                try:
                    callback()
                except Exception:
                    # the detection itself worked, so a failing callback is not fatal
                    self._logger.exception(
                        "configuration change notification failed for callback"
                    )

    @property
    def collector_image(self) -> str:
        return self._collector_image

    @property
    def collector_config_map_entry(self) -> str:
        return self._collector_config_map_entry

    @property
    def target_allocator_image(self) -> str:
        return self._target_allocator_image

    @property
    def target_allocator_config_map_entry(self) -> str:
        return self._target_allocator_config_map_entry

    @property
    def platform(self) -> Platform:
        return self._platform

    @property
    def version(self) -> _version.Version:
        return self._version

    @property
    def auto_detect_frequency(self) -> float:
        return self._auto_detect_frequency

    @property
    def auto_instrumentation_java_image(self) -> str:
        return self._auto_instrumentation_java_image

    @property
    def auto_instrumentation_nodejs_image(self) -> str:
        return self._auto_instrumentation_nodejs_image

    @property
    def auto_instrumentation_python_image(self) -> str:
        return self._auto_instrumentation_python_image