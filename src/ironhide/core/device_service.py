"""Device key deletion."""

from __future__ import annotations

from collections.abc import Sequence

from ironhide.core.protocols import DeviceProvider
from ironhide.exceptions import IronhideError, RefusedOperationError, RemoteOperationError


def parse_device_id(device_id: str) -> int:
    """Parse a positive numeric device ID, ignoring surrounding whitespace.

    Raises
    ------
    ValueError
        If *device_id* is not a positive decimal number.
    """
    stripped = device_id.strip()
    if not stripped.isdecimal() or int(stripped) == 0:
        raise ValueError(f"Expected a numerical device ID but got '{device_id}' instead.")
    return int(stripped)


class DeviceService:
    """Deletes device keys other than the one in use.

    Parameters
    ----------
    devices:
        Any object satisfying the :class:`DeviceProvider` protocol.
    """

    def __init__(self, devices: DeviceProvider) -> None:
        self._devices: DeviceProvider = devices

    async def ensure_not_current_device(self, device_ids: Sequence[str]) -> None:
        """Refuse the whole command if it targets the current device.

        IDs are compared as numbers, so ``01`` and `` 1`` both match
        device ``1``.  IDs that do not parse are left to fail on their
        own batch item.

        Raises
        ------
        RemoteOperationError
            If the device list cannot be fetched.
        RefusedOperationError
            If one of *device_ids* is the current device.
        """
        requested: set[int] = set()
        for device_id in device_ids:
            try:
                requested.add(parse_device_id(device_id))
            except ValueError:
                continue

        try:
            devices = await self._devices.list_devices()
        except IronhideError as exc:
            raise RemoteOperationError(
                "Failed to make request to get current device keys.",
                hint=str(exc),
            ) from exc

        current = next((device for device in devices if device.is_current_device), None)
        if current is not None and current.id in requested:
            raise RefusedOperationError(
                "Attempting to delete keys for the current device.",
                hint="Use the 'logout' command instead.",
            )

    async def delete(self, device_id: str) -> int:
        """Delete one device key by its numeric ID."""
        return await self._devices.delete_device(parse_device_id(device_id))
