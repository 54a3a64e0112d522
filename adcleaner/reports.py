import csv
import os
from datetime import date





'''
#######################
Print results to files.
#######################

6/2/2025
'''
def write_csv(rows, filename_prefix, directory=".", today=None):
    """Write dict rows to ``<prefix>_<yyyy-mm-dd>.csv``; nothing is written for no rows."""
    if not rows:
        return None

    today = (today or date.today()).strftime("%Y-%m-%d")
    os.makedirs(directory, exist_ok=True)
    path = os.path.join(directory, f"{filename_prefix}_{today}.csv")

    with open(path, 'w', newline='') as csv_file:
        writer = csv.DictWriter(csv_file, fieldnames=list(rows[0].keys()))
        writer.writeheader()
        writer.writerows(rows)
    return path
