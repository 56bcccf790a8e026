"""Desired configuration of a virtual network switch and the rules it must satisfy."""

from __future__ import annotations

import enum
from collections.abc import Iterable
from dataclasses import dataclass, field

from hypervkit.validators import ValidationError, int_between

_check_flow_weight = int_between(0, 100)


class _CaseInsensitiveEnum(enum.Enum):
    @classmethod
    def parse(cls, text: str):
        """Look up a member by name, ignoring case."""
        for member in cls:
            if member.value.lower() == str(text).lower():
                return member
        names = ", ".join(member.value for member in cls)
        raise ValidationError(f"expected {text} to be one of {names}")

    def __str__(self) -> str:
        return self.value


class SwitchType(_CaseInsensitiveEnum):
    """How a switch connects virtual machines, the host and the physical network."""

    PRIVATE = "Private"
    INTERNAL = "Internal"
    EXTERNAL = "External"


class BandwidthMode(_CaseInsensitiveEnum):
    """How minimum bandwidth is expressed on a switch."""

    DEFAULT = "Default"
    WEIGHT = "Weight"
    ABSOLUTE = "Absolute"
    NONE = "None"


class SwitchConfigError(ValidationError):
    """A switch configuration that breaks one of the switch rules."""

    def __init__(self, operation: str, message: str) -> None:
        self.operation = operation
        self.reason = message
        super().__init__(f"[ERROR][hyperv][{operation}] {message}")


@dataclass(frozen=True)
class SwitchSettings:
    """Desired configuration of a virtual network switch."""

    name: str
    notes: str = ""
    allow_management_os: bool = True
    enable_embedded_teaming: bool = False
    enable_iov: bool = False
    enable_packet_direct: bool = False
    minimum_bandwidth_mode: BandwidthMode = BandwidthMode.NONE
    switch_type: SwitchType = SwitchType.INTERNAL
    net_adapter_names: tuple[str, ...] = field(default_factory=tuple)
    default_flow_minimum_bandwidth_absolute: int = 0
    default_flow_minimum_bandwidth_weight: int = 0
    default_queue_vmmq_enabled: bool = False
    default_queue_vmmq_queue_pairs: int = 16
    default_queue_vrss_enabled: bool = False

    def __post_init__(self) -> None:
        if not isinstance(self.minimum_bandwidth_mode, BandwidthMode):
            object.__setattr__(
                self,
                "minimum_bandwidth_mode",
                BandwidthMode.parse(self.minimum_bandwidth_mode),
            )
        if not isinstance(self.switch_type, SwitchType):
            object.__setattr__(
                self, "switch_type", SwitchType.parse(self.switch_type)
            )
        names: Iterable[str] = self.net_adapter_names or ()
        object.__setattr__(self, "net_adapter_names", tuple(names))


def _check_switch_type(settings: SwitchSettings, operation: str) -> None:
    adapters = settings.net_adapter_names
    if settings.switch_type is SwitchType.PRIVATE:
        if settings.allow_management_os:
            raise SwitchConfigError(
                operation,
                "Unable to set AllowManagementOS to true if switch type is private",
            )
        if adapters:
            raise SwitchConfigError(
                operation,
                "Unable to set NetAdapterNames when switch type is private",
            )
    elif settings.switch_type is SwitchType.INTERNAL:
        if not settings.allow_management_os:
            raise SwitchConfigError(
                operation,
                "Unable to set AllowManagementOS to false if switch type is internal",
            )
        if adapters:
            raise SwitchConfigError(
                operation,
                "Unable to set NetAdapterNames when switch type is internal",
            )
    elif settings.switch_type is SwitchType.EXTERNAL:
        if not adapters:
            raise SwitchConfigError(
                operation,
                "Must specify NetAdapterNames if switch type is external",
            )


def _nonzero(operation: str, field_name: str, mode: str) -> SwitchConfigError:
    if operation == "read":
        return SwitchConfigError(
            operation,
            f"{field_name} should be 0 if bandwidth reservation mode is {mode}",
        )
    return SwitchConfigError(
        operation,
        f"Unable to set {field_name} if bandwidth reservation mode is {mode}",
    )


def _check_bandwidth(settings: SwitchSettings, operation: str) -> None:
    mode = settings.minimum_bandwidth_mode
    weight = settings.default_flow_minimum_bandwidth_weight
    absolute = settings.default_flow_minimum_bandwidth_absolute

    if mode is BandwidthMode.ABSOLUTE:
        if weight != 0:
            raise _nonzero(operation, "DefaultFlowMinimumBandwidthWeight", "absolute")
        if absolute < 0:
            raise SwitchConfigError(
                operation, "Bandwidth absolute must be 0 or greater"
            )
    elif mode is BandwidthMode.WEIGHT or (
        mode is BandwidthMode.DEFAULT and not settings.enable_iov
    ):
        if absolute != 0:
            raise _nonzero(operation, "DefaultFlowMinimumBandwidthAbsolute", "weight")
        if not 1 <= weight <= 100:
            raise SwitchConfigError(
                operation, "Bandwidth weight must be between 1 and 100"
            )
    else:
        if weight != 0:
            raise _nonzero(operation, "DefaultFlowMinimumBandwidthWeight", "none")
        if absolute != 0:
            raise _nonzero(operation, "DefaultFlowMinimumBandwidthAbsolute", "none")


def validate_switch_settings(
    settings: SwitchSettings, operation: str
) -> SwitchSettings:
    """Check ``settings`` for ``operation`` (create, read or update) and return them.

    Raises SwitchConfigError for a combination the host does not allow and
    ValidationError for an attribute value outside its allowed range.
    """
    if operation != "read":
        _check_flow_weight(settings.default_flow_minimum_bandwidth_weight)
    _check_switch_type(settings, operation)
    _check_bandwidth(settings, operation)
    if settings.default_queue_vmmq_queue_pairs < 1:
        raise SwitchConfigError(
            operation, "defaultQueueVmmqQueuePairs must be greater then 0"
        )
    return settings