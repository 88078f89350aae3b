"""Loads the SDK backend named in the settings.

The key-management SDK is an external collaborator.  Its adapter is a
factory callable, addressed as ``"package.module:factory"`` through the
``IRONHIDE_BACKEND`` environment variable.  The factory receives the
:class:`~ironhide.config.Settings` and returns a
:class:`~ironhide.core.protocols.Backend`.

This module is the **only** place that imports backend code.  Import
and construction failures are re-raised as
:class:`~ironhide.exceptions.ConfigurationError`.
"""

from __future__ import annotations

import importlib
import logging
from collections.abc import Callable
from typing import Any

from ironhide.config import IRONHIDE_BACKEND, Settings
from ironhide.core.protocols import Backend
from ironhide.exceptions import ConfigurationError, EnvironmentCheckError, IronhideError

logger = logging.getLogger(__name__)

BackendFactory = Callable[[Settings], Backend]


def resolve_factory(import_path: str) -> BackendFactory:
    """Import the factory named by *import_path* (``"module:attribute"``).

    Raises
    ------
    ConfigurationError
        If *import_path* is malformed or the attribute is not callable.
    EnvironmentCheckError
        If the module cannot be imported.
    """
    module_name, sep, attribute = import_path.partition(":")
    if not sep or not module_name or not attribute:
        raise ConfigurationError(
            f"Invalid backend '{import_path}'.",
            hint=f"Set {IRONHIDE_BACKEND} to 'package.module:factory'.",
        )

    try:
        module = importlib.import_module(module_name)
    except ModuleNotFoundError as exc:
        raise EnvironmentCheckError(
            f"Backend module '{module_name}' is not installed.",
            hint="Install the SDK adapter package into this environment.",
        ) from exc

    factory: Any = getattr(module, attribute, None)
    if not callable(factory):
        raise ConfigurationError(f"Backend factory '{import_path}' is missing or not callable.")
    return factory


def load_backend(settings: Settings) -> Backend:
    """Build the backend configured in *settings*.

    Raises
    ------
    ConfigurationError
        If no backend is configured or the factory fails.
    """
    if not settings.backend:
        raise ConfigurationError(
            "No key-management backend is configured.",
            hint=f"Set {IRONHIDE_BACKEND} to the SDK adapter factory, e.g. 'ironhide_sdk:create_backend'.",
        )

    factory = resolve_factory(settings.backend)
    logger.debug("Loading backend %s (keyfile=%s)", settings.backend, settings.keyfile_path)
    try:
        backend = factory(settings)
    except IronhideError:
        raise
    except Exception as exc:
        raise ConfigurationError(
            f"Backend '{settings.backend}' failed to start: {exc}",
            hint="Check that your device keys exist; run 'ironhide login' to create them.",
        ) from exc

    if not isinstance(backend, Backend):
        raise ConfigurationError(
            f"Backend factory '{settings.backend}' returned {type(backend).__name__}, not a Backend.",
        )
    return backend
