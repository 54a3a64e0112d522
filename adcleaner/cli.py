import os
import sys
import time

from . import version_number
from .cleanup import (
    ContainerNotFoundError,
    archive,
    backup_path,
    decommission,
    latest_backup,
    load_snapshot,
    select_stale_computers,
)
from .config import load_config
from .console import (
    RED,
    RESET,
    Spinner,
    display_dry_run,
    get_consent,
    intro,
    main_color,
    pause,
    print_error,
    progress_line,
    separator,
)
from .directory import ADDirectory
from .firewall import check_firewall
from .logon import read_logon_telemetry, update_logon_attributes
from .powershell import PowerShellError, ad_tools_available, parse_bool
from .reports import write_csv
from .selection import TerminalSelector
from .users import select_stale_users
from .vmdiff import diff_vms_against_ad
from .vsphere import VCenter





'''
################################################
Take user input to activate different functions.
################################################

5/29/2025
'''
def main():

    config = load_config()
    verify_ad_tools()
    dry_run = parse_bool(config["All"].get("dry_run_default", "true"))
    directory = ADDirectory()

    actions = {
        2: find_stale_computers,
        3: decommission_from_backup,
        4: stale_user_report,
        5: firewall_report,
        6: update_logon_from_telemetry,
        7: manage_port_groups,
        8: vm_ad_diff,
    }

    while True:
        intro(version_number)
        display_dry_run(dry_run)

        # Get user input
        choice = main_option_list()

        try:
            choice = int(choice)
        except ValueError:
            print("Invalid Option: Please enter a number.")
            time.sleep(2)
            continue

        # Disable/Enable dry run.
        if choice == 1:
            dry_run = not dry_run

        elif choice in actions:
            try:
                actions[choice](directory, config, dry_run)
            except PowerShellError as e:
                print_error(e, e.command)
                pause()
            except (ContainerNotFoundError, OSError, ValueError) as e:
                print(f"\n{RED}Error: {RESET}{e}")
                pause()

        # Exit program
        elif choice == 0:
            break

        else:
            print("Invalid Option: Please try again.\n")
            time.sleep(2)





'''
#######################
Print options for user.
#######################

9/20/2026
'''
def main_option_list():
    print("\n\nEnter a number:")
    print("1) Toggle Dry Run")
    print("2) Find Stale Computers and Back Up")
    print("3) Decommission Computers From Backup")
    print("4) Stale User Report")
    print("5) Firewall Check")
    print("6) Update Logon Attributes")
    print("7) Port Groups")
    print("8) VM / AD Diff")
    print("\n0) Leave  Console")

    answer = input("\nChoice: ")
    return answer





'''
###########################################################
Stage one and two: list stale computers and back up a pick.
###########################################################

9/20/2026
'''
def find_stale_computers(directory, config, dry_run):
    computer_config = config["Computer"]
    max_age_days = int(computer_config.get("computer_days_stale", 185))
    separator()

    with Spinner("Querying..."):
        stale = select_stale_computers(
            directory,
            max_age_days,
            os_match=computer_config.get("workstation_os_match", ["Windows 10", "Windows 11"]),
        )
    print_skipped_rows(directory)

    print(f"{main_color}{len(stale)} COMPUTERS{RESET} have been stale for {main_color}{max_age_days}{RESET} days.")

    selector = TerminalSelector(
        "stale computers",
        describe=lambda c: f"{c.name:<20} {c.operating_system:<30} {c.distinguished_name}",
    )
    selected = selector(stale)
    if not selected:
        return

    destination = backup_path(
        config["All"].get("backup_directory", "."),
        computer_config.get("backup_prefix", "ComputerBackup"),
    )
    snapshot = archive(
        directory,
        selected,
        destination,
        match=computer_config.get("recovery_match", "substring"),
        progress=progress_line,
    )
    keys = sum(len(c.recovery_records) for c in snapshot.computers)

    print(f"\n{main_color}BACKUP COMPLETED{RESET}")
    print(f"{len(snapshot)} computers and {keys} recovery keys saved to: {os.path.abspath(destination)}")
    pause()





'''
##############################################################
Stage three: disable and move computers picked from a backup.
##############################################################

9/21/2026
'''
def decommission_from_backup(directory, config, dry_run):
    computer_config = config["Computer"]
    separator()

    default = latest_backup(
        config["All"].get("backup_directory", "."),
        computer_config.get("backup_prefix", "ComputerBackup"),
    )
    path = input(f"Backup file [{default or ''}]: ").strip() or default
    if not path:
        print("No backup file found. Run option 2 first.")
        pause()
        return

    snapshot = load_snapshot(path)
    selector = TerminalSelector(
        "backed up computers",
        describe=lambda a: f"{a.name:<20} {a.computer.distinguished_name}",
    )
    selected = selector(snapshot.computers)
    if not selected:
        return

    target = computer_config.get("decommission_parent", "")
    print(f"{main_color}{len(selected)} COMPUTERS{RESET} are about to be {main_color}DISABLED{RESET} and moved under {main_color}{target}{RESET}.")

    if not get_consent(dry_run):
        return

    if dry_run:
        print(f"\r{main_color}NO CHANGES MADE{RESET}\n")
        pause()
        return

    batch = decommission(
        directory,
        selected,
        target,
        prefix=computer_config.get("container_prefix", "Decommissioned"),
        progress=progress_line,
    )
    report = write_csv(
        [o.as_row() for o in batch.outcomes],
        f"computers_{batch.name}",
        config["All"].get("report_directory", "."),
    )

    print(f"\n{main_color}OPERATIONS COMPLETED{RESET}")
    print(f"Container: {batch.distinguished_name}")
    print(f"{len(batch.succeeded)} computers processed.")
    print(f"{len(batch.failed)} computers failed.")
    for outcome in batch.failed:
        print(f"  {RED}{outcome.name}{RESET}: {outcome.error}")
    if report:
        print(f"\nResults saved in: {report}")
    pause()





'''
############################################
Report users that have not logged on lately.
############################################

9/22/2026
'''
def stale_user_report(directory, config, dry_run):
    user_config = config["User"]
    years = int(user_config.get("user_years_since_logon", 5))
    separator()

    with Spinner("Querying..."):
        affected, bypassed = select_stale_users(
            directory,
            years,
            name_exclusion=user_config.get("exclude_name_starting_with", ""),
            bypass_group_pattern=user_config.get("user_bypass_group", ""),
        )
    print_skipped_rows(directory)

    report_directory = config["All"].get("report_directory", ".")
    stale_file = write_csv([u.as_row() for u in affected], "users_stale", report_directory)
    bypassed_file = write_csv([u.as_row() for u in bypassed], "users_bypassed", report_directory)

    print(f"{len(affected)} users have not logged on in {main_color}{years}{RESET} years.")
    print(f"{len(bypassed)} users bypassed.")
    for path in (stale_file, bypassed_file):
        if path:
            print(f"List saved in: {path}")
    pause()





'''
#######################################
Check firewall profiles on the servers.
#######################################

9/22/2026
'''
def firewall_report(directory, config, dry_run):
    separator()
    answer = input("Hosts (comma separated, ENTER for all servers in AD): ").strip()
    if answer:
        hosts = [h.strip() for h in answer.split(",") if h.strip()]
    else:
        with Spinner("Querying..."):
            hosts = directory.query_computer_names(config["Firewall"].get("server_os_match", "Server"))

    results = check_firewall(hosts, progress=progress_line)
    for status in results:
        if status.error:
            print(f"{RED}{status.host}{RESET}: {status.error}")
        elif not status.compliant:
            off = ", ".join(name for name, enabled in status.profiles.items() if not enabled)
            print(f"{RED}{status.host}{RESET}: disabled profiles {off}")

    compliant = sum(1 for s in results if s.compliant)
    print(f"\n{main_color}{compliant}/{len(results)}{RESET} hosts have every firewall profile enabled.")
    report = write_csv([s.as_row() for s in results], "firewall", config["All"].get("report_directory", "."))
    if report:
        print(f"Results saved in: {report}")
    pause()





'''
############################################
Write last logged on user into AD computers.
############################################

9/23/2026
'''
def update_logon_from_telemetry(directory, config, dry_run):
    separator()
    path = input("Logon telemetry CSV: ").strip().strip('"')
    if not path:
        return

    latest, skipped = read_logon_telemetry(path)
    for row in skipped:
        print(f"Error reading logon row {row}")

    attribute = config["Logon"].get("logon_attribute", "description")
    print(f"{main_color}{len(latest)} COMPUTERS{RESET} will have {main_color}{attribute}{RESET} updated.")
    if not get_consent(dry_run):
        return

    outcomes = update_logon_attributes(
        directory, latest.values(), attribute, dry_run=dry_run, progress=progress_line
    )
    if dry_run:
        print(f"\r{main_color}NO CHANGES MADE{RESET}\n")

    failed = [o for o in outcomes if o.error]
    for outcome in failed:
        print(f"{RED}{outcome.computer}{RESET}: {outcome.error}")
    print(f"{sum(1 for o in outcomes if o.updated)} computers updated, {len(failed)} failed.")
    report = write_csv([o.as_row() for o in outcomes], "logon_updates", config["All"].get("report_directory", "."))
    if report:
        print(f"Results saved in: {report}")
    pause()





'''
##############################################
Add or remove a port group on every host.
##############################################

9/24/2026
'''
def manage_port_groups(directory, config, dry_run):
    vsphere_config = config["VSphere"]
    separator()

    print("1) ADD port group")
    print("2) REMOVE port group")
    answer = input("\nChoice: ").strip()
    if answer not in ("1", "2"):
        print("Invalid Option: Please try again.")
        time.sleep(2)
        return

    name = input("Port group name: ").strip()
    if not name:
        return

    vcenter = VCenter(vsphere_config.get("server", ""))
    cluster = vsphere_config.get("cluster", "")
    vswitch = vsphere_config.get("vswitch", "vSwitch0")
    if answer == "1":
        vlan_id = int(input("VLAN ID [0]: ").strip() or 0)
        intent = f"ADD {name} (VLAN {vlan_id}) to {vswitch}"
    else:
        intent = f"REMOVE {name}"

    print(f"This will {main_color}{intent}{RESET} on every host in cluster {main_color}{cluster}{RESET}.")
    if not get_consent(dry_run):
        return

    if dry_run:
        with Spinner("Querying..."):
            hosts = vcenter.cluster_hosts(cluster)
        for host in hosts:
            print(f"  {host}")
        print(f"\r{main_color}NO CHANGES MADE{RESET}\n")
        pause()
        return

    if answer == "1":
        outcomes = vcenter.add_port_group_to_cluster(cluster, vswitch, name, vlan_id, progress=progress_line)
    else:
        outcomes = vcenter.remove_port_group_from_cluster(cluster, name, progress=progress_line)

    for outcome in outcomes:
        color = RED if outcome.status == "failed" else main_color
        print(f"{color}{outcome.host}{RESET}: {outcome.status} {outcome.error}".rstrip())
    pause()





'''
###########################################
Find VMs with no computer object and back.
###########################################

9/24/2026
'''
def vm_ad_diff(directory, config, dry_run):
    separator()
    vcenter = VCenter(config["VSphere"].get("server", ""))

    with Spinner("Querying..."):
        diff = diff_vms_against_ad(vcenter.vm_names(), directory.query_computer_names())

    print(f"{main_color}VMs WITHOUT A COMPUTER OBJECT ({len(diff.vms_without_computer)}){RESET}")
    for name in diff.vms_without_computer:
        print(f"  {name}")
    print(f"\n{main_color}COMPUTERS WITHOUT A VM ({len(diff.computers_without_vm)}){RESET}")
    for name in diff.computers_without_vm:
        print(f"  {name}")

    rows = [{"Name": n, "Missing": "Computer"} for n in diff.vms_without_computer]
    rows += [{"Name": n, "Missing": "VM"} for n in diff.computers_without_vm]
    report = write_csv(rows, "vm_ad_diff", config["All"].get("report_directory", "."))
    if report:
        print(f"\nResults saved in: {report}")
    pause()





def print_skipped_rows(directory):
    for row, error in directory.skipped:
        print(f"Error parsing dates for row {row}: {error}")





'''
########################
Ensure RSAT is installed
########################

6/2/2025
'''
def verify_ad_tools():
    if not ad_tools_available():
        print("\nAD Module not found. Is this a domained machine with RSAT installed and enabled?")
        time.sleep(5)
        print("EXITING")
        time.sleep(1)
        sys.exit(1)


if __name__ == "__main__":
    main()
