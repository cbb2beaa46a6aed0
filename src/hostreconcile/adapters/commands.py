"""
Command templates and compiled-in desired values.

Every query or corrective action is a fixed template with identifiers
substituted in. Substituted identifiers come from earlier query results and are
escaped for PowerShell double-quoted strings.
"""

# Adapters whose description matches this pattern are reconciled.
MELLANOX_SEARCH_PATTERN = "*Mellanox*"

# Advanced property / registry value name controlling 802.1p/Q tagging.
PRIORITY_VLAN_TAG_KEYWORD = "*PriorityVLANTag"

# 3 = packet priority and VLAN tagging enabled.
DESIRED_PRIORITY_VLAN_TAG = 3

# Network class key; the driver suffix is appended to form a device's key.
REGISTRY_KEY_PREFIX = "HKLM:\\System\\CurrentControlSet\\Control\\Class\\"

# Multitenancy needs ARP replies for VLAN tagged ARP requests from inside the VM.
SDN_REMOTE_ARP_MAC_ADDRESS = "12-34-56-78-9a-bc"
HNS_STATE_REGISTRY_PATH = "HKLM:\\SYSTEM\\CurrentControlSet\\Services\\hns\\State"
SDN_REMOTE_ARP_VALUE_NAME = "SDNRemoteArpMacAddress"
HNS_SERVICE_NAME = "hns"


def ps_escape(value: str) -> str:
    """Escape a value for use inside a PowerShell double-quoted string."""
    escaped = value.replace("`", "``")
    escaped = escaped.replace('"', '`"')
    escaped = escaped.replace("$", "`$")
    return escaped


def list_adapters_command(pattern: str = MELLANOX_SEARCH_PATTERN) -> str:
    return (
        f'Get-NetAdapter | Where-Object {{ $_.InterfaceDescription -like "{ps_escape(pattern)}" }} '
        f'| Select-Object -ExpandProperty Name'
    )


def find_direct_property_command(adapter_name: str, keyword: str = PRIORITY_VLAN_TAG_KEYWORD) -> str:
    return (
        f'Get-NetAdapterAdvancedProperty | Where-Object {{ $_.RegistryKeyword -like "{ps_escape(keyword)}" '
        f'-and $_.Name -eq "{ps_escape(adapter_name)}" }} | Select-Object -ExpandProperty Name'
    )


def get_direct_property_value_command(adapter_name: str, keyword: str = PRIORITY_VLAN_TAG_KEYWORD) -> str:
    return (
        f'Get-NetAdapterAdvancedProperty | Where-Object {{ $_.RegistryKeyword -like "{ps_escape(keyword)}" '
        f'-and $_.Name -eq "{ps_escape(adapter_name)}" }} | Select-Object -ExpandProperty RegistryValue'
    )


def set_direct_property_command(adapter_name: str, value: int, keyword: str = PRIORITY_VLAN_TAG_KEYWORD) -> str:
    return (
        f'Set-NetAdapterAdvancedProperty -Name "{ps_escape(adapter_name)}" '
        f'-RegistryKeyword "{ps_escape(keyword)}" -RegistryValue {int(value)}'
    )


def find_device_id_command(pattern: str = MELLANOX_SEARCH_PATTERN) -> str:
    return (
        'Get-CimInstance -Namespace root/cimv2 -ClassName Win32_PNPEntity | Where-Object PNPClass -EQ "Net" '
        f'| Where-Object {{ $_.Name -like "{ps_escape(pattern)}" }} | Select-Object -ExpandProperty DeviceID'
    )


def get_adapter_device_id_command(adapter_name: str) -> str:
    return f'Get-NetAdapter -Name "{ps_escape(adapter_name)}" | Select-Object -ExpandProperty PnPDeviceID'


def get_driver_key_command(device_id: str) -> str:
    return (
        f'Get-PnpDeviceProperty -InstanceId "{ps_escape(device_id)}" '
        '| Where-Object KeyName -EQ "DEVPKEY_Device_Driver" | Select-Object -ExpandProperty Data'
    )


def get_registry_value_command(registry_path: str, value_name: str = PRIORITY_VLAN_TAG_KEYWORD) -> str:
    name = ps_escape(value_name)
    return (
        f'Get-ItemProperty -Path "{ps_escape(registry_path)}" -Name "{name}" '
        f'| Select-Object -ExpandProperty "{name}"'
    )


def new_registry_value_command(registry_path: str, value: int, value_name: str = PRIORITY_VLAN_TAG_KEYWORD) -> str:
    # The key may not hold the value yet, so create it with -Force.
    return (
        f'New-ItemProperty -Path "{ps_escape(registry_path)}" -Name "{ps_escape(value_name)}" '
        f'-Value {int(value)} -PropertyType String -Force'
    )


def restart_adapter_command(adapter_name: str) -> str:
    return f'Restart-NetAdapter -Name "{ps_escape(adapter_name)}"'


def get_sdn_remote_arp_command() -> str:
    return (
        f'(Get-ItemProperty -Path {HNS_STATE_REGISTRY_PATH} -Name {SDN_REMOTE_ARP_VALUE_NAME})'
        f'.{SDN_REMOTE_ARP_VALUE_NAME}'
    )


def set_sdn_remote_arp_command() -> str:
    return (
        f'Set-ItemProperty -Path {HNS_STATE_REGISTRY_PATH} -Name {SDN_REMOTE_ARP_VALUE_NAME} '
        f'-Value "{SDN_REMOTE_ARP_MAC_ADDRESS}"'
    )


def restart_service_command(service_name: str = HNS_SERVICE_NAME) -> str:
    return f'Restart-Service -Name {service_name}'


def get_process_command(pid: int) -> str:
    return f'Get-Process -Id {int(pid)}'


def describe_process_command(pid: int) -> str:
    return f'Get-Process -Id {int(pid)}|Format-List'


def kill_process_command(process_name: str) -> str:
    return f'taskkill /IM "{process_name}" /F'
