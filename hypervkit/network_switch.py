"""Lifecycle of virtual network switch resources on a Hyper-V host."""

from __future__ import annotations

import logging
from typing import Any, Optional, Protocol

from hypervkit.switch_settings import SwitchSettings, validate_switch_settings
from hypervkit.validators import ResourceExistsError, ValidationError

log = logging.getLogger(__name__)

RESOURCE_TYPE = "hyperv_network_switch"


class SwitchClient(Protocol):
    """Operations on virtual switches that a host connection provides."""

    def vm_switch_exists(self, name: str) -> bool: ...

    def create_vm_switch(self, settings: SwitchSettings) -> None: ...

    def get_vm_switch(self, name: str) -> Optional[SwitchSettings]: ...

    def update_vm_switch(self, switch_id: str, settings: SwitchSettings) -> None: ...

    def delete_vm_switch(self, name: str) -> None: ...


def _state(switch: SwitchSettings) -> dict[str, Any]:
    return {
        "name": switch.name,
        "notes": switch.notes,
        "allow_management_os": switch.allow_management_os,
        "enable_embedded_teaming": switch.enable_embedded_teaming,
        "enable_iov": switch.enable_iov,
        "enable_packet_direct": switch.enable_packet_direct,
        "minimum_bandwidth_mode": str(switch.minimum_bandwidth_mode),
        "switch_type": str(switch.switch_type),
        "net_adapter_names": list(switch.net_adapter_names),
        "default_flow_minimum_bandwidth_absolute": (
            switch.default_flow_minimum_bandwidth_absolute
        ),
        "default_flow_minimum_bandwidth_weight": (
            switch.default_flow_minimum_bandwidth_weight
        ),
        "default_queue_vmmq_enabled": switch.default_queue_vmmq_enabled,
        "default_queue_vmmq_queue_pairs": switch.default_queue_vmmq_queue_pairs,
        "default_queue_vrss_enabled": switch.default_queue_vrss_enabled,
    }


def read_switch(client: SwitchClient, name: str) -> Optional[dict[str, Any]]:
    """Read a switch and return its resource attributes, or None when it is absent.

    Raises SwitchConfigError when the host reports a configuration that breaks
    the switch rules.
    """
    switch = client.get_vm_switch(name)
    log.info("retrieved network switch: %r", switch)
    if switch is None or switch.name != name:
        log.info("unable to read hyperv switch as it does not exist: %r", name)
        return None
    validate_switch_settings(switch, "read")
    return _state(switch)


def create_switch(
    client: SwitchClient, settings: SwitchSettings, is_new: bool
) -> Optional[dict[str, Any]]:
    """Create a switch and read it back."""
    if not settings.name:
        raise ValidationError("[ERROR][hyperv][create] name argument is required")
    if is_new:
        try:
            exists = client.vm_switch_exists(settings.name)
        except Exception as err:
            raise RuntimeError(
                f"checking for existing {settings.name}: {err}"
            ) from err
        if exists:
            raise ResourceExistsError(settings.name, RESOURCE_TYPE)

    validate_switch_settings(settings, "create")
    client.create_vm_switch(settings)
    log.info("created hyperv switch: %s", settings.name)
    return read_switch(client, settings.name)


def update_switch(
    client: SwitchClient, switch_id: str, settings: SwitchSettings
) -> Optional[dict[str, Any]]:
    """Reconfigure (and possibly rename) switch ``switch_id`` and read it back."""
    validate_switch_settings(settings, "update")
    client.update_vm_switch(switch_id, settings)
    log.info("updated hyperv switch: %s -> %s", switch_id, settings.name)
    return read_switch(client, settings.name)


def delete_switch(client: SwitchClient, name: str) -> None:
    """Remove the switch called ``name``."""
    client.delete_vm_switch(name)
    log.info("deleted hyperv switch: %s", name)