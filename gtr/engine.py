"""Engine interfaces and the registry of translation backends."""

from __future__ import annotations

import threading
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Callable, Optional, Tuple

MAX_READ_BODY = 4 << 20
"""Cap on HTTP response bodies read by any engine."""


class EngineError(Exception):
    """Raised when a translation backend fails."""


@dataclass(frozen=True)
class Capabilities:
    """Optional features an engine offers."""

    supports_tts: bool = False
    supports_dictionary: bool = False


@dataclass
class TranslateInput:
    """A normalized translation request handed to an engine."""

    text: str = ""
    source: str = ""
    target: str = ""
    host_lang: str = ""
    brief: bool = False
    no_autocorrect: bool = False
    debug: bool = False
    dump: bool = False
    dictionary: bool = False


@dataclass(frozen=True)
class TranslateOutput:
    """A normalized translation result."""

    text: str = ""
    dictionary: str = ""
    phonetic: str = ""


class Engine(ABC):
    """A single translation backend."""

    name: str = ""

    @abstractmethod
    def translate(self, request: TranslateInput) -> TranslateOutput:
        """Translate ``request`` and return the result."""


class LanguageIdentifier(ABC):
    """Mixin for engines that can detect the language of text."""

    @abstractmethod
    def identify_language(self, text: str, host_lang: str) -> str:
        """Return the detected language code of ``text``."""


Factory = Callable[[], Engine]


def _normalize(name: str) -> str:
    return name.strip().lower()


class Registry:
    """Thread-safe mapping of engine names to factories and capabilities."""

    def __init__(self) -> None:
        self._lock = threading.RLock()
        self._factories: dict[str, Factory] = {}
        self._capabilities: dict[str, Capabilities] = {}

    def register(
        self, name: str, factory: Factory, capabilities: Optional[Capabilities] = None
    ) -> None:
        """Add ``factory`` under the lower-cased ``name``."""
        key = _normalize(name)
        with self._lock:
            self._factories[key] = factory
            self._capabilities[key] = (
                capabilities if capabilities is not None else Capabilities()
            )

    def capabilities_of(self, name: str) -> Capabilities:
        """Return the capabilities of ``name``; all off when unknown."""
        with self._lock:
            return self._capabilities.get(_normalize(name), Capabilities())

    def lookup(self, name: str) -> Optional[Factory]:
        """Return the factory registered under ``name``, or None."""
        with self._lock:
            return self._factories.get(_normalize(name))

    def lookup_fuzzy(self, name: str) -> Optional[Tuple[str, Factory]]:
        """Resolve ``name`` exactly, then by the shortest registered prefix match."""
        key = _normalize(name)
        if not key:
            return None
        with self._lock:
            if key in self._factories:
                return key, self._factories[key]
            matches = sorted(
                (k for k in self._factories if k.startswith(key)),
                key=lambda k: (len(k), k),
            )
            if not matches:
                return None
            best = matches[0]
            return best, self._factories[best]

    def names(self) -> list[str]:
        """Return registered engine names in sorted order."""
        with self._lock:
            return sorted(self._factories)


REGISTRY = Registry()


def register(name: str, factory: Factory, capabilities: Optional[Capabilities] = None) -> None:
    """Register an engine in the default registry."""
    REGISTRY.register(name, factory, capabilities)


def capabilities_of(name: str) -> Capabilities:
    """Capabilities of an engine in the default registry."""
    return REGISTRY.capabilities_of(name)


def lookup(name: str) -> Optional[Factory]:
    """Exact lookup in the default registry."""
    return REGISTRY.lookup(name)


def lookup_fuzzy(name: str) -> Optional[Tuple[str, Factory]]:
    """Fuzzy lookup in the default registry."""
    return REGISTRY.lookup_fuzzy(name)


def names() -> list[str]:
    """Sorted engine names of the default registry."""
    return REGISTRY.names()