# hypervkit

`hypervkit` holds the decision logic for managing Hyper-V resources. It has two parts:

- validators for resource settings, such as ISO volume names, enumeration keys, integer ranges and block-aligned sizes (`hypervkit.validators`);
- the create, read, update and delete steps for virtual hard disks (`hypervkit.vhd`), ISO images (`hypervkit.isofiles`, `hypervkit.isoimage`) and virtual network switches (`hypervkit.switch_settings`, `hypervkit.network_switch`).

Each lifecycle function takes a client object that you provide. The client must implement the matching protocol: `VhdClient`, `RemoteFileClient`, `IsoImageClient` or `SwitchClient`. The functions decide which client calls to make and in what order. Each read returns the resulting resource attributes as a plain `dict`.

## Installation

```
pip install hypervkit
```

To install with the test dependencies:

```
pip install "hypervkit[test]"
```

## Validating settings

Each validator factory returns a callable. The callable returns the value when it is accepted and raises `ValidationError` (a `ValueError`) when it is rejected.

```python
from hypervkit.validators import allowed_iso_volume_name, is_divisible_by, ValidationError

check_volume = allowed_iso_volume_name()
check_volume("UNTITLED")        # accepted

try:
    is_divisible_by(4096)(5000)
except ValidationError as error:
    print(error)                # the message suggests 8192 instead
```

The module also provides `string_key_in_map`, `int_in_slice`, `int_between` and `value_or_int_between`.

## Virtual hard disks

`VhdSettings` describes the disk you want. `validate_vhd_settings` rejects conflicting sources, sizes that are not multiples of 4096, and sector sizes other than 0, 512 or 4096. `create_vhd`, `read_vhd`, `update_vhd` and `delete_vhd` drive a `VhdClient`. A disk is resized after creation when a size is given and there is no parent path.

The helpers `suppress_path_diff`, `suppress_parent_path_diff` and `suppress_sized_diff` report whether a difference between an old value and a new value should be ignored. For example, paths are compared without regard to case, and a size of zero counts as unset.

## ISO images

`hypervkit.isofiles` decides where source files are placed on the host:

```python
from hypervkit.isofiles import default_destination, win_path

default_destination("C:/isos/boot.iso")   # '$env:TEMP\\boot.iso'
win_path("C:/my isos/a.iso")              # "'C:\\my isos\\a.iso'"
```

`ensure_file_state_create` and `ensure_file_state_update` upload or delete a file through a `RemoteFileClient`, based on a `FileFields` value.

`hypervkit.isoimage` builds on this with `IsoImageSettings`, `IsoMediaType` and `IsoFileSystemType`:

- `create_iso_image` uploads the iso, zip and boot files and asks the client to build the image.
- `update_iso_image` re-uploads changed files. It deletes and rebuilds the image when its inputs or layout change.
- `delete_iso_image` removes the image, its `.json` metadata file and any uploaded zip and boot files.

## Virtual network switches

```python
from hypervkit.switch_settings import SwitchSettings, SwitchType, validate_switch_settings
from hypervkit.network_switch import create_switch

settings = SwitchSettings(name="lab", switch_type=SwitchType.INTERNAL)
validate_switch_settings(settings, "create")
state = create_switch(my_client, settings, is_new=True)
```

`validate_switch_settings` raises `SwitchConfigError` for combinations that Hyper-V rejects. Examples are a private switch that allows the management OS, an external switch without adapter names, and a bandwidth weight outside 1–100 when the mode is weight-based.

`read_switch` returns `None` when the switch is absent. `update_switch` can also rename the switch.

A create call raises `ResourceExistsError` when the target already exists on the host and has not been imported. This applies to VHDs, ISO files and switches.

## What the package does not do

`hypervkit` does not connect to a Hyper-V host. It does not produce the PowerShell scripts or commands that would carry out an operation, and it has no command-line tool. Connecting to the host and carrying out each client method, for example over WinRM, is up to the client you supply.

## Running the tests

```
pytest
```