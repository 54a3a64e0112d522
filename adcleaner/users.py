import re
from datetime import datetime, timedelta, timezone





'''
##################################################
Find enabled users who have not logged on in years.
##################################################

5/30/2025
'''
def select_stale_users(directory, inactivity_years=5, name_exclusion="", bypass_group_pattern="", now=None):
    """Return ``(affected, bypassed)`` lists of stale users.

    LastLogonDate falls back to whenCreated for accounts that never logged on.
    Accounts whose name starts with ``name_exclusion`` or whose groups match
    ``bypass_group_pattern`` are bypassed instead of affected.
    """
    now = now or datetime.now(timezone.utc)
    baseline = now - timedelta(days=365 * inactivity_years)

    affected = []
    bypassed = []
    for user in directory.query_users():
        activity_date = user.last_logon or user.when_created
        if activity_date is None or activity_date > baseline:
            continue

        name_match = name_exclusion and user.sam_account_name.startswith(name_exclusion)
        group_match = bypass_group_pattern and re.search(bypass_group_pattern, user.member_of)
        if name_match or group_match:
            bypassed.append(user)
        else:
            affected.append(user)

    return affected, bypassed
