import pytest

from hypervkit.switch_settings import (
    BandwidthMode,
    SwitchConfigError,
    SwitchSettings,
    SwitchType,
    validate_switch_settings,
)
from hypervkit.validators import ValidationError


def test_defaults_are_valid():
    settings = SwitchSettings(name="switch1")
    assert validate_switch_settings(settings, "create") is settings
    assert settings.switch_type is SwitchType.INTERNAL
    assert settings.minimum_bandwidth_mode is BandwidthMode.NONE
    assert settings.default_queue_vmmq_queue_pairs == 16


def test_string_enums_are_parsed_case_insensitively():
    settings = SwitchSettings(
        name="s", switch_type="external", minimum_bandwidth_mode="WEIGHT",
        net_adapter_names=["eth0"], default_flow_minimum_bandwidth_weight=5,
    )
    assert settings.switch_type is SwitchType.EXTERNAL
    assert settings.minimum_bandwidth_mode is BandwidthMode.WEIGHT
    assert settings.net_adapter_names == ("eth0",)


def test_unknown_enum_name_raises():
    with pytest.raises(ValidationError):
        SwitchType.parse("bridged")
    with pytest.raises(ValidationError):
        BandwidthMode.parse("fast")


def test_private_with_management_os_rejected():
    settings = SwitchSettings(name="s", switch_type=SwitchType.PRIVATE)
    with pytest.raises(SwitchConfigError) as info:
        validate_switch_settings(settings, "create")
    assert str(info.value) == (
        "[ERROR][hyperv][create] Unable to set AllowManagementOS to true "
        "if switch type is private"
    )
    assert info.value.operation == "create"


def test_private_with_adapters_rejected():
    settings = SwitchSettings(
        name="s", switch_type=SwitchType.PRIVATE, allow_management_os=False,
        net_adapter_names=("eth0",),
    )
    with pytest.raises(SwitchConfigError, match="NetAdapterNames when switch type is private"):
        validate_switch_settings(settings, "update")


def test_private_without_management_os_accepted():
    settings = SwitchSettings(
        name="s", switch_type=SwitchType.PRIVATE, allow_management_os=False
    )
    assert validate_switch_settings(settings, "create") is settings


def test_internal_rules():
    with pytest.raises(SwitchConfigError, match="AllowManagementOS to false"):
        validate_switch_settings(
            SwitchSettings(name="s", allow_management_os=False), "create"
        )
    with pytest.raises(SwitchConfigError, match="switch type is internal"):
        validate_switch_settings(
            SwitchSettings(name="s", net_adapter_names=("eth0",)), "create"
        )


def test_external_requires_adapters():
    with pytest.raises(SwitchConfigError, match="Must specify NetAdapterNames"):
        validate_switch_settings(
            SwitchSettings(name="s", switch_type=SwitchType.EXTERNAL), "create"
        )
    ok = SwitchSettings(
        name="s", switch_type=SwitchType.EXTERNAL, net_adapter_names=("eth0",),
        allow_management_os=False,
    )
    assert validate_switch_settings(ok, "create") is ok


def test_absolute_mode_rules():
    with pytest.raises(SwitchConfigError, match="DefaultFlowMinimumBandwidthWeight"):
        validate_switch_settings(
            SwitchSettings(
                name="s", minimum_bandwidth_mode=BandwidthMode.ABSOLUTE,
                default_flow_minimum_bandwidth_weight=10,
            ),
            "create",
        )
    with pytest.raises(SwitchConfigError, match="Bandwidth absolute must be 0 or greater"):
        validate_switch_settings(
            SwitchSettings(
                name="s", minimum_bandwidth_mode=BandwidthMode.ABSOLUTE,
                default_flow_minimum_bandwidth_absolute=-8,
            ),
            "create",
        )
    ok = SwitchSettings(
        name="s", minimum_bandwidth_mode=BandwidthMode.ABSOLUTE,
        default_flow_minimum_bandwidth_absolute=1234560,
    )
    assert validate_switch_settings(ok, "create") is ok


@pytest.mark.parametrize("weight", [0, 101])
def test_weight_mode_requires_weight_in_range(weight):
    settings = SwitchSettings(
        name="s", minimum_bandwidth_mode=BandwidthMode.WEIGHT,
        default_flow_minimum_bandwidth_weight=weight,
    )
    with pytest.raises(ValidationError):
        validate_switch_settings(settings, "read")


def test_weight_mode_rejects_absolute():
    settings = SwitchSettings(
        name="s", minimum_bandwidth_mode=BandwidthMode.WEIGHT,
        default_flow_minimum_bandwidth_weight=50,
        default_flow_minimum_bandwidth_absolute=8,
    )
    with pytest.raises(SwitchConfigError, match="Unable to set DefaultFlowMinimumBandwidthAbsolute"):
        validate_switch_settings(settings, "update")


def test_weight_over_hundred_rejected_by_attribute_rule():
    settings = SwitchSettings(
        name="s", minimum_bandwidth_mode=BandwidthMode.WEIGHT,
        default_flow_minimum_bandwidth_weight=101,
    )
    with pytest.raises(ValidationError, match=r"range \(0 - 100\)"):
        validate_switch_settings(settings, "create")


def test_default_mode_without_iov_behaves_as_weight():
    settings = SwitchSettings(name="s", minimum_bandwidth_mode=BandwidthMode.DEFAULT)
    with pytest.raises(SwitchConfigError, match="between 1 and 100"):
        validate_switch_settings(settings, "create")
    weighted = SwitchSettings(
        name="s", minimum_bandwidth_mode=BandwidthMode.DEFAULT,
        default_flow_minimum_bandwidth_weight=1,
    )
    assert validate_switch_settings(weighted, "create") is weighted


def test_default_mode_with_iov_behaves_as_none():
    settings = SwitchSettings(
        name="s", minimum_bandwidth_mode=BandwidthMode.DEFAULT, enable_iov=True
    )
    assert validate_switch_settings(settings, "create") is settings
    weighted = SwitchSettings(
        name="s", minimum_bandwidth_mode=BandwidthMode.DEFAULT, enable_iov=True,
        default_flow_minimum_bandwidth_weight=1,
    )
    with pytest.raises(SwitchConfigError, match="bandwidth reservation mode is none"):
        validate_switch_settings(weighted, "create")


def test_none_mode_rejects_absolute():
    settings = SwitchSettings(
        name="s", default_flow_minimum_bandwidth_absolute=8
    )
    with pytest.raises(SwitchConfigError, match="Unable to set DefaultFlowMinimumBandwidthAbsolute"):
        validate_switch_settings(settings, "create")


def test_read_uses_should_be_wording():
    settings = SwitchSettings(name="s", default_flow_minimum_bandwidth_weight=5)
    with pytest.raises(SwitchConfigError) as info:
        validate_switch_settings(settings, "read")
    assert str(info.value) == (
        "[ERROR][hyperv][read] DefaultFlowMinimumBandwidthWeight should be 0 "
        "if bandwidth reservation mode is none"
    )


def test_queue_pairs_must_be_positive():
    settings = SwitchSettings(name="s", default_queue_vmmq_queue_pairs=0)
    with pytest.raises(SwitchConfigError, match="defaultQueueVmmqQueuePairs must be greater then 0"):
        validate_switch_settings(settings, "create")