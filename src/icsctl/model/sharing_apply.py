"""
sharing_apply.py
----------------
Handles changing the sharing role of a connection through its
INetSharingConfiguration object.

These calls require Administrator privileges. Failures are reported as
UnderlyingServiceError with the COM message unchanged and are never retried.
"""

from icsctl.exceptions import UnderlyingServiceError
from icsctl.logging_utility import logger
from icsctl.model.sharing_model import Connection, SharingRole, SharingState


def enable_sharing(connection: Connection, role: SharingRole) -> None:
    """
    Enable sharing on a connection in the given role.

    Args:
        connection (Connection): Connection returned by get_connections()
        role (SharingRole): PUBLIC for the upstream side, PRIVATE for the downstream side
    """
    logger.info(f"Enabling sharing on '{connection.name}' as {role.label.lower()}")
    try:
        connection.config.EnableSharing(role.value)
    except Exception as e:
        raise UnderlyingServiceError(
            f"Failed to enable {role.label.lower()} sharing on '{connection.name}': {e}",
            connection.name,
        ) from e
    connection.sharing = SharingState.for_role(role)


def disable_sharing(connection: Connection) -> None:
    """Disable sharing on a connection, whatever its current role."""
    logger.info(f"Disabling sharing on '{connection.name}'")
    try:
        connection.config.DisableSharing()
    except Exception as e:
        raise UnderlyingServiceError(
            f"Failed to disable sharing on '{connection.name}': {e}",
            connection.name,
        ) from e
    connection.sharing = SharingState.DISABLED
