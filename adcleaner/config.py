import copy
import json
import os

CONFIG_FILE = "ADC_Config.json"

DEFAULTS = {
    "All": {
        "dry_run_default": "true",
        "backup_directory": ".",
        "report_directory": ".",
    },
    "Computer": {
        "computer_days_stale": 185,
        "workstation_os_match": ["Windows 10", "Windows 11"],
        "recovery_match": "substring",
        "decommission_parent": "",
        "container_prefix": "Decommissioned",
        "backup_prefix": "ComputerBackup",
    },
    "User": {
        "user_years_since_logon": 5,
        "exclude_name_starting_with": "",
        "user_bypass_group": "",
    },
    "Firewall": {
        "server_os_match": "Server",
    },
    "Logon": {
        "logon_attribute": "description",
    },
    "VSphere": {
        "server": "",
        "cluster": "",
        "vswitch": "vSwitch0",
    },
    "Color": {
        "main_color": "LIGHT_CYAN",
    },
}





'''
################################################
Open config file and fill gaps with the defaults.
################################################

9/14/2026
'''
def load_config(path=CONFIG_FILE):
    config = copy.deepcopy(DEFAULTS)
    if not os.path.exists(path):
        return config

    with open(path, "r") as f:
        loaded = json.load(f)

    for section, values in loaded.items():
        if isinstance(values, dict):
            config.setdefault(section, {}).update(values)
        else:
            config[section] = values
    return config
