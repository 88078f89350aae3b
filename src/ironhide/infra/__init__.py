"""Infrastructure layer — local filesystem and backend loading.

Every raw ``OSError`` or import failure is caught here and re-raised as
an :class:`~ironhide.exceptions.IronhideError` subclass.

Rules
-----
* No imports from ``cli``.
* No user-facing output (no ``print()``, no Rich rendering).
"""

from ironhide.infra.backend_loader import load_backend
from ironhide.infra.local_files import LocalFileStore

__all__: list[str] = [
    "LocalFileStore",
    "load_backend",
]
