"""Error taxonomy for change-input validation.

Errors carry structured fields (kind, interface, VLAN, line) and are only
turned into text by ``str()``, so hosts can either show the message verbatim
or inspect the fields.
"""
from enum import Enum
from typing import Optional


class ErrorKind(str, Enum):
    """Kind of validation failure."""
    EMPTY_INTERFACE_BLOCK = "EmptyInterfaceBlock"
    UNSUPPORTED_SWITCHPORT_MODE = "UnsupportedSwitchportMode"
    MISSING_DESCRIPTION = "MissingDescription"
    INVALID_VLAN_RANGE = "InvalidVlanRange"
    INVALID_VLAN_NUMBER = "InvalidVlanNumber"
    VLAN_LIST_EMPTY = "VlanListEmpty"
    VLAN_NOT_IN_DATABASE = "VlanNotInDatabase"
    VLAN_NOT_PRESENT_IN_BASE = "VlanNotPresentInBase"
    BUNDLED_INTERFACE_REJECTED = "BundledInterfaceRejected"
    VLAN_NAME_REQUIRED = "VlanNameRequired"
    INVALID_INTERFACE_NAME = "InvalidInterfaceName"


# One canonical template per kind. Fields missing from an error render empty.
MESSAGE_TEMPLATES: dict[ErrorKind, str] = {
    ErrorKind.EMPTY_INTERFACE_BLOCK:
        "interface block must contain supported statements: {interface}",
    ErrorKind.UNSUPPORTED_SWITCHPORT_MODE:
        "switchport mode {detail} is not supported",
    ErrorKind.MISSING_DESCRIPTION:
        "interface requires description: {interface}",
    ErrorKind.INVALID_VLAN_RANGE:
        "invalid VLAN range: {detail}",
    ErrorKind.INVALID_VLAN_NUMBER:
        "invalid vlan number: {detail}",
    ErrorKind.VLAN_LIST_EMPTY:
        "vlan list is empty on interface {interface}",
    ErrorKind.VLAN_NOT_IN_DATABASE:
        "VLAN {vlan} is not defined in vlan database",
    ErrorKind.VLAN_NOT_PRESENT_IN_BASE:
        "cannot remove VLAN {vlan} from interface {interface}: "
        "VLAN not present in base config",
    ErrorKind.BUNDLED_INTERFACE_REJECTED:
        "cannot configure VLANs on interface {interface}: member of "
        "Bundle {detail}, configure VLANs on Bundle-Ether{detail} instead",
    ErrorKind.VLAN_NAME_REQUIRED:
        "vlan name is required for VLAN {vlan}",
    ErrorKind.INVALID_INTERFACE_NAME:
        "invalid interface name: {interface}",
}


class ValidationError(Exception):
    """A change input that cannot be turned into device commands.

    Attributes:
        kind: Which rule was violated
        interface: Offending interface name, if any
        vlan: Offending VLAN id, if any
        line: 1-based source line the error points at, if known
        detail: Extra text for the message (mode, range token, bundle id)
    """

    def __init__(
        self,
        kind: ErrorKind,
        interface: Optional[str] = None,
        vlan: Optional[int] = None,
        line: Optional[int] = None,
        detail: Optional[str] = None,
    ):
        self.kind = kind
        self.interface = interface
        self.vlan = vlan
        self.line = line
        self.detail = detail
        super().__init__(self.format())

    @property
    def message(self) -> str:
        """Message without the line suffix."""
        return MESSAGE_TEMPLATES[self.kind].format(
            interface=self.interface or "",
            vlan="" if self.vlan is None else self.vlan,
            detail=self.detail or "",
        )

    def format(self) -> str:
        """Message with a ``(line N)`` suffix when the line is known."""
        if self.line is None:
            return self.message
        return f"{self.message} (line {self.line})"

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        return {
            "kind": self.kind.value,
            "interface": self.interface,
            "vlan": self.vlan,
            "line": self.line,
            "message": self.format(),
        }
