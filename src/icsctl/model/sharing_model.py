"""
sharing_model.py
----------------
Live view of the connections known to the Windows sharing component.

Connections and their sharing configuration come from the HNetCfg.HNetShare
COM object, adapter state and hardware descriptions from WMI, and IPv4
addresses from psutil. Every call re-reads the OS state; nothing is cached.
"""

import socket
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Optional

import psutil

from icsctl.exceptions import UnderlyingServiceError
from icsctl.logging_utility import logger

HNETSHARE_PROGID = "HNetCfg.HNetShare"

# Win32_NetworkAdapter.NetConnectionStatus
NCS_CONNECTED = 2
NCS_HARDWARE_NOT_PRESENT = 4
NCS_HARDWARE_DISABLED = 5

# Win32_NetworkAdapter.ConfigManagerErrorCode
CM_DEVICE_DISABLED = 22
CM_DEVICE_NOT_PRESENT = 45

# NETCON_MEDIATYPE
MEDIA_TYPES = {
    0: "None",
    1: "Direct",
    2: "ISDN",
    3: "LAN",
    4: "Phone",
    5: "Tunnel",
    6: "PPPoE",
    7: "Bridge",
    8: "SharedAccessHost LAN",
    9: "SharedAccessHost RAS",
}


class SharingRole(Enum):
    """ICSSHARINGTYPE values accepted by EnableSharing"""
    PUBLIC = 0
    PRIVATE = 1

    @property
    def label(self) -> str:
        return self.name.title()


class SharingState(Enum):
    DISABLED = "Disabled"
    ENABLED_AS_PUBLIC = "EnabledAsPublic"
    ENABLED_AS_PRIVATE = "EnabledAsPrivate"

    @property
    def role(self) -> Optional[SharingRole]:
        if self is SharingState.ENABLED_AS_PUBLIC:
            return SharingRole.PUBLIC
        if self is SharingState.ENABLED_AS_PRIVATE:
            return SharingRole.PRIVATE
        return None

    @classmethod
    def for_role(cls, role: SharingRole) -> "SharingState":
        if role is SharingRole.PUBLIC:
            return cls.ENABLED_AS_PUBLIC
        return cls.ENABLED_AS_PRIVATE


class OperationalStatus(Enum):
    ABSENT = "Absent"
    DISABLED = "Disabled"
    DISCONNECTED = "Disconnected"
    UP = "Up"


@dataclass(frozen=True)
class ConnectionStatus:
    """Reported state of one connection"""
    name: str
    enabled: bool
    role: Optional[SharingRole] = None
    status: OperationalStatus = OperationalStatus.ABSENT
    device_name: str = ""
    media_type: str = ""
    addresses: tuple[str, ...] = ()


@dataclass
class Connection:
    """One network connection as seen by the sharing component.

    ``config`` holds the INetSharingConfiguration COM object used to
    change the sharing role of this connection.
    """
    name: str
    guid: str = ""
    device_name: str = ""
    media_type: str = ""
    status: OperationalStatus = OperationalStatus.ABSENT
    sharing: SharingState = SharingState.DISABLED
    description: str = ""
    addresses: list[str] = field(default_factory=list)
    config: Any = field(default=None, repr=False, compare=False)

    @property
    def is_up(self) -> bool:
        return self.status is OperationalStatus.UP

    @property
    def sharing_enabled(self) -> bool:
        return self.sharing is not SharingState.DISABLED

    def to_status(self) -> ConnectionStatus:
        return ConnectionStatus(
            name=self.name,
            enabled=self.sharing_enabled,
            role=self.sharing.role,
            status=self.status,
            device_name=self.device_name,
            media_type=self.media_type,
            addresses=tuple(self.addresses),
        )


# ------------------------------------------------------------
# Helper: Open the HNetCfg.HNetShare automation object
# ------------------------------------------------------------
def open_sharing_manager():
    """Return a dispatch wrapper around HNetCfg.HNetShare."""
    try:
        import win32com.client

        return win32com.client.Dispatch(HNETSHARE_PROGID)
    except Exception as e:
        raise UnderlyingServiceError(f"Cannot open {HNETSHARE_PROGID}: {e}") from e


def _sharing_state(config) -> SharingState:
    if not config.SharingEnabled:
        return SharingState.DISABLED
    if int(config.SharingConnectionType) == SharingRole.PUBLIC.value:
        return SharingState.ENABLED_AS_PUBLIC
    return SharingState.ENABLED_AS_PRIVATE


# ------------------------------------------------------------
# Helper: Adapter state and descriptions via WMI
# ------------------------------------------------------------
def _adapter_status(nic) -> OperationalStatus:
    if nic.ConfigManagerErrorCode == CM_DEVICE_NOT_PRESENT:
        return OperationalStatus.ABSENT
    if nic.NetConnectionStatus == NCS_HARDWARE_NOT_PRESENT:
        return OperationalStatus.ABSENT
    if nic.ConfigManagerErrorCode == CM_DEVICE_DISABLED:
        return OperationalStatus.DISABLED
    if nic.NetEnabled is False or nic.NetConnectionStatus == NCS_HARDWARE_DISABLED:
        return OperationalStatus.DISABLED
    if nic.NetConnectionStatus == NCS_CONNECTED:
        return OperationalStatus.UP
    return OperationalStatus.DISCONNECTED


def _get_adapter_details(wmi_conn=None) -> dict[str, tuple[OperationalStatus, str]]:
    """
    Return {connection_name: (operational_status, description)} using WMI.
    Example: {'Ethernet': (OperationalStatus.UP, 'Intel(R) Ethernet Controller I225-V')}
    """
    details = {}
    try:
        if wmi_conn is None:
            import wmi

            wmi_conn = wmi.WMI()
        for nic in wmi_conn.Win32_NetworkAdapter():
            if nic.NetConnectionID:
                details[nic.NetConnectionID.casefold()] = (_adapter_status(nic), nic.Name or "")
    except Exception as e:
        raise UnderlyingServiceError(f"Cannot query network adapters through WMI: {e}") from e
    return details


def _get_ipv4_addresses() -> dict[str, list[str]]:
    addresses = {}
    for name, addrs in psutil.net_if_addrs().items():
        ipv4 = [a.address for a in addrs if a.family == socket.AF_INET]
        if ipv4:
            addresses[name.casefold()] = ipv4
    return addresses


# ------------------------------------------------------------
# Connection enumeration
# ------------------------------------------------------------
def get_connections(share=None, wmi_conn=None) -> list[Connection]:
    """Enumerate every connection known to the sharing component.

    Args:
        share: HNetCfg.HNetShare dispatch object; opened on demand when omitted.
        wmi_conn: WMI namespace for adapter lookups; opened on demand when omitted.

    Returns:
        list[Connection]: one record per connection, in enumeration order.

    Raises:
        UnderlyingServiceError: if the COM or WMI calls fail.
    """
    if share is None:
        share = open_sharing_manager()

    adapters = _get_adapter_details(wmi_conn)
    addresses = _get_ipv4_addresses()

    connections = []
    try:
        for conn in share.EnumEveryConnection:
            props = share.NetConnectionProps(conn)
            config = share.INetSharingConfigurationForINetConnection(conn)
            name = props.Name
            status, description = adapters.get(name.casefold(), (OperationalStatus.ABSENT, ""))
            connections.append(Connection(
                name=name,
                guid=props.Guid,
                device_name=props.DeviceName,
                media_type=MEDIA_TYPES.get(int(props.MediaType), str(props.MediaType)),
                status=status,
                sharing=_sharing_state(config),
                description=description,
                addresses=addresses.get(name.casefold(), []),
                config=config,
            ))
    except Exception as e:
        raise UnderlyingServiceError(f"Cannot enumerate connections: {e}") from e

    logger.debug(
        "Enumerated connections:\n" +
        "\n".join(f"{c.name}: {c.status.value}, {c.sharing.value}" for c in connections)
    )
    return connections
