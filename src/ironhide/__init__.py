"""ironhide — encrypt files and share them with users and groups.

The cryptography is delegated to an external SDK backend; this package
resolves group references and runs partial-failure batches against it.
"""

from ironhide.version import __version__

__all__: list[str] = ["__version__"]
