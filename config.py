"""
config.py

Responsibility: Defines the typed, immutable configuration values the address
detection engine operates on, and builds them from already-parsed mappings.
Does NOT: read or merge configuration files, or resolve defaults for
detectors (see detectors/detector_factory.py).
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Mapping, Optional

from exceptions import DetectorConfigError


class NetworkStack(str, Enum):
    """IP address family a detection run targets."""

    IPV4 = "IPv4"
    IPV6 = "IPv6"


class AddressDetectionType(str, Enum):
    """Selects the detector variant."""

    INTERFACE = "Interface"
    THIRD_PARTY = "ThirdParty"


class LocalAddressPolicy(str, Enum):
    """
    How private/local-use addresses are treated.

    IGNORE: local addresses are rejected; detection fails if no public
            address is available.
    ALLOW:  a local address is used, but only when no public one is available.
    PREFER: a local address is used even when a public one is available.
    """

    IGNORE = "Ignore"
    ALLOW = "Allow"
    PREFER = "Prefer"


def _parse_enum(enum_cls, value: Any, field_name: str):
    try:
        return enum_cls(value)
    except ValueError as exc:
        allowed = ", ".join(member.value for member in enum_cls)
        raise DetectorConfigError(
            f"Invalid {field_name} {value!r}; expected one of: {allowed}."
        ) from exc


def _optional_section(data: Mapping[str, Any], key: str) -> Optional[Mapping[str, Any]]:
    section = data.get(key)
    if section is None:
        return None
    if not isinstance(section, Mapping):
        raise DetectorConfigError(f"'{key}' must be a mapping, got {type(section).__name__}.")
    return section


def _optional_str_map(data: Mapping[str, Any], key: str) -> Optional[dict[str, str]]:
    section = _optional_section(data, key)
    if section is None:
        return None
    values: dict[str, str] = {}
    for name, value in section.items():
        if value is None or isinstance(value, (Mapping, list)):
            raise DetectorConfigError(f"'{key}.{name}' must be a string, got {value!r}.")
        values[str(name)] = str(value)
    return values


# ---------------------------------------------------------------------------
# Detection sub-specs
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class NetworkInterfaceDetectionSpec:
    """Reads the address from a local network interface."""

    # Interface name, e.g. "eth0"
    name: str

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> NetworkInterfaceDetectionSpec:
        name = data.get("name")
        if not name:
            raise DetectorConfigError("interface.name is required.")
        return cls(name=str(name))


@dataclass(frozen=True)
class ThirdPartyServiceSpec:
    """
    Describes a third-party HTTP endpoint that reports the caller's address.

    Optional fields are left as None here; detectors resolve them to empty
    strings/mappings when they are constructed.
    """

    # Endpoint URL, e.g. "https://api.ipify.org"
    url: str

    # jq expression locating the address in a JSON response, e.g. ".ip"
    json_path: Optional[str] = None

    # Query-string parameters merged into the URL
    params: Optional[Mapping[str, str]] = None

    # Extra request headers
    headers: Optional[Mapping[str, str]] = None

    # HTTP basic auth credentials
    username: Optional[str] = None
    password: Optional[str] = None

    def __post_init__(self) -> None:
        if not self.url:
            raise DetectorConfigError("api.url is required and must not be empty.")

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> ThirdPartyServiceSpec:
        """
        Builds the spec from the configuration vocabulary.

        Keys: url, jsonPath, params, customHeaders, username, password.

        Raises:
            DetectorConfigError: If url is missing or a map field is not a mapping.
        """
        json_path = data.get("jsonPath")
        username = data.get("username")
        password = data.get("password")
        return cls(
            url=str(data.get("url") or ""),
            json_path=None if json_path is None else str(json_path),
            params=_optional_str_map(data, "params"),
            headers=_optional_str_map(data, "customHeaders"),
            username=None if username is None else str(username),
            password=None if password is None else str(password),
        )


# ---------------------------------------------------------------------------
# Top-level detection spec
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class AddressDetectionSpec:
    """
    Declares how the current address is detected and which addresses are
    acceptable. Exactly one of interface/api is expected, matching type.
    """

    type: AddressDetectionType

    # None means "not configured"; detectors treat it as IGNORE
    local_address_policy: Optional[LocalAddressPolicy] = None

    interface: Optional[NetworkInterfaceDetectionSpec] = None

    api: Optional[ThirdPartyServiceSpec] = None

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> AddressDetectionSpec:
        """
        Builds a detection spec from an already-parsed configuration mapping.

        Args:
            data: Mapping with keys type, localAddressPolicy, interface, api.

        Returns:
            The immutable AddressDetectionSpec.

        Raises:
            DetectorConfigError: On unknown enum values or malformed sections.
        """
        if not isinstance(data, Mapping):
            raise DetectorConfigError("detection must be a mapping.")

        detection_type = _parse_enum(AddressDetectionType, data.get("type"), "detection type")

        policy = None
        if data.get("localAddressPolicy") is not None:
            policy = _parse_enum(LocalAddressPolicy, data["localAddressPolicy"], "localAddressPolicy")

        interface_data = _optional_section(data, "interface")
        api_data = _optional_section(data, "api")

        return cls(
            type=detection_type,
            local_address_policy=policy,
            interface=None if interface_data is None else NetworkInterfaceDetectionSpec.from_dict(interface_data),
            api=None if api_data is None else ThirdPartyServiceSpec.from_dict(api_data),
        )


def parse_stack(value: Any) -> NetworkStack:
    """
    Converts a configured stack value ("IPv4"/"IPv6") into a NetworkStack.

    Raises:
        DetectorConfigError: If the value is not a known stack.
    """
    if isinstance(value, NetworkStack):
        return value
    return _parse_enum(NetworkStack, value, "stack")
