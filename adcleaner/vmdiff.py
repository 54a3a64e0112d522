from collections import namedtuple

VMDiff = namedtuple("VMDiff", ["vms_without_computer", "computers_without_vm"])


def diff_vms_against_ad(vm_names, computer_names):
    """Compare VM names with AD computer names, ignoring case."""
    vms = {name.strip().lower(): name.strip() for name in vm_names if name.strip()}
    computers = {name.strip().lower(): name.strip() for name in computer_names if name.strip()}

    return VMDiff(
        vms_without_computer=sorted((vms[k] for k in vms.keys() - computers.keys()), key=str.lower),
        computers_without_vm=sorted((computers[k] for k in computers.keys() - vms.keys()), key=str.lower),
    )
