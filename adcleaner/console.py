r'''
                    #################################################
                    #  ____                         _   _           #
                    # / ___|___  ___ _ __ ___   ___| |_(_) ___ ___  #
                    #| |   / _ \/ __| '_ ` _ \ / _ \ __| |/ __/ __| #
                    #| |__| (_) \__ \ | | | | |  __/ |_| | (__\__ \ #
                    # \____\___/|___/_| |_| |_|\___|\__|_|\___|___/ #
                    #                                               #
                    #################################################
'''

import os
import shutil
import sys
import threading
import time

from .config import load_config

# Enable ANSI Support for Windows 10+
if os.name == "nt":
    os.system("")

# Add colors
RED = "\u001b[0;31m"
GREEN = "\u001b[0;32m"
CYAN = "\u001b[36m"
LIGHT_CYAN = "\u001b[1;36m"
RESET = "\u001b[0m"

COLOR_MAP = {
    "RED": RED,
    "GREEN": GREEN,
    "CYAN": CYAN,
    "LIGHT_CYAN": LIGHT_CYAN,
    "RESET": RESET
}


main_color_str = str(load_config()["Color"].get("main_color", "LIGHT_CYAN")).upper()
main_color = COLOR_MAP.get(main_color_str, LIGHT_CYAN)





'''
#######################################################
Clear console and print pretty introduction to program.
#######################################################

5/29/2025
'''
def intro(version_number):
    os.system('cls' if os.name == 'nt' else 'clear')
    print(f"{main_color}\n")
    print(" █████╗ ██████╗      ██████╗██╗     ███████╗ █████╗ ███╗   ██╗███████╗██████╗ ")
    print("██╔══██╗██╔══██╗    ██╔════╝██║     ██╔════╝██╔══██╗████╗  ██║██╔════╝██╔══██╗")
    print("███████║██║  ██║    ██║     ██║     █████╗  ███████║██╔██╗ ██║█████╗  ██████╔╝")
    print("██╔══██║██║  ██║    ██║     ██║     ██╔══╝  ██╔══██║██║╚██╗██║██╔══╝  ██╔══██╗")
    print("██║  ██║██████╔╝    ╚██████╗███████╗███████╗██║  ██║██║ ╚████║███████╗██║  ██║")
    print(f"╚═╝  ╚═╝╚═════╝      ╚═════╝╚══════╝╚══════╝╚═╝  ╚═╝╚═╝  ╚═══╝╚══════╝╚═╝  ╚═╝{RESET}")
    print(f"                                                                   Version {version_number}")





class Spinner:
    """Spinning cursor to show the program didn't freeze."""

    def __init__(self, label="Working..."):
        self.label = label
        self.done = threading.Event()
        self.thread = None

    def _spin(self):
        spinner = "|/-\\"
        i = 0
        while not self.done.is_set():
            sys.stdout.write(f"\r{self.label} {spinner[i % len(spinner)]}")
            sys.stdout.flush()
            time.sleep(0.1)
            i += 1
        sys.stdout.write("\r" + " " * (len(self.label) + 2) + "\r")

    def __enter__(self):
        self.done.clear()
        self.thread = threading.Thread(target=self._spin, daemon=True)
        self.thread.start()
        return self

    def __exit__(self, exc_type, exc, tb):
        self.done.set()
        self.thread.join()
        return False


def progress_line(done, total, label):
    sys.stdout.write(f"\r{main_color}[{done}/{total}]{RESET} {label}".ljust(60))
    sys.stdout.flush()
    if done == total:
        sys.stdout.write("\n")





'''
###################################################
Display whether or not the code is in dry run mode.
###################################################

6/5/2025
'''
def display_dry_run(dry_run):
    if dry_run:
        print(f"DRY RUN = {GREEN}ENABLED{RESET}")
    else:
        print(f"DRY RUN = {RED}DISABLED{RESET}")





'''
##########################################
Confirm before proceeding with operations.
##########################################

5/30/2025
'''
def get_consent(dry_run, prompt=input) -> bool:

    #Display if dry-run is enabled.
    if dry_run:
        print(f"\n\t{RED}###################################################################{RESET}")
        print(f"\t{RED}###{main_color}Dry Run Enabled:{RESET} These objects will {main_color}NOT{RESET} actually be affected.{RED}###{RESET}")
        print(f"\t{RED}###################################################################{RESET}\n")

    while True:
        answer = prompt("Proceed? (y/n): ").strip().lower()
        if answer in ("y", "yes"):
            separator()
            return True
        elif answer in ("n", "no"):
            print("Well... it seems we are at an impass...")
            return False
        else:
            print("Please enter 'y' or 'n'\n")


def print_error(error, command=None):
    print(f"\n\n{RED}PowerShell Error: {RESET}", error)
    if command:
        print(f"{RED}Failed command: {RESET}", command.strip())


def pause():
    input(f"\nPress {main_color}ENTER{RESET} to continue.")





'''
#######################################
Separate lines to increase readability.
#######################################

5/30/2025
'''
def separator():
    terminal_width = shutil.get_terminal_size().columns
    print(f"{main_color}\n{'#'*terminal_width}\n{RESET}")
