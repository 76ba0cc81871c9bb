"""
Action Policy Configuration
This config defines which role tiers may perform each community action and
the user-facing reason shown when a tier is denied.
Changing an entry here is a policy change and ships as a code change.
"""

GENERIC_FAILURE_REASON = "Unable to verify permissions. Please try again."
UNKNOWN_ACTION_REASON = "Unknown permission type"

# Tiers in privilege order; only used for display and monotonicity checks,
# never for allow decisions.
TIERS = ["guest", "member", "admin"]

# Raw grant roles stored in user_roles and the tier each one collapses to
GRANT_ROLES = {
    "user": "member",
    "moderator": "member",
    "admin": "admin",
    "super_admin": "admin",
}

# Allow-sets per action.
# "owner_tiers" are tiers allowed only when the actor owns the resource.
ACTIONS = {
    "createPost": {
        "description": "Create a community post",
        "allowed_tiers": ["member", "admin"],
        "owner_tiers": [],
        "denial_reasons": {
            "guest": "Only registered members can create posts. Please sign up or sign in to continue.",
            "insufficient": "Insufficient permissions to create posts.",
        },
    },
    "manageGroups": {
        "description": "Create, edit and archive community groups",
        "allowed_tiers": ["admin"],
        "owner_tiers": [],
        "denial_reasons": {
            "guest": "Please sign in as an administrator to manage groups.",
            "insufficient": "Only administrators can manage groups.",
        },
    },
    "viewMembers": {
        "description": "View the community member list",
        "allowed_tiers": ["member", "admin"],
        "owner_tiers": [],
        "denial_reasons": {
            "guest": "Please sign in to view the member list.",
            "insufficient": None,
        },
    },
    "deletePost": {
        "description": "Delete a community post",
        "allowed_tiers": ["admin"],
        "owner_tiers": ["member"],
        "denial_reasons": {
            "guest": "You can only delete your own posts.",
            "insufficient": "You can only delete your own posts.",
        },
    },
    "accessAdmin": {
        "description": "Open the administration screens",
        "allowed_tiers": ["admin"],
        "owner_tiers": [],
        "denial_reasons": {
            "guest": "Please sign in as an administrator to access the admin panel.",
            "insufficient": "Only administrators can access the admin panel.",
        },
    },
}

# Admin-panel capabilities keyed by the highest effective raw role.
# "member" covers user and moderator grants as well as users with no grant.
ROLE_CAPABILITIES = {
    "super_admin": {
        "can_access_admin": True,
        "can_manage_users": True,
        "can_manage_content": True,
        "can_view_reports": True,
        "can_manage_system": True,
        "can_view_analytics": True,
    },
    "admin": {
        "can_access_admin": True,
        "can_manage_users": True,
        "can_manage_content": True,
        "can_view_reports": True,
        "can_manage_system": False,
        "can_view_analytics": True,
    },
    "member": {
        "can_access_admin": False,
        "can_manage_users": False,
        "can_manage_content": False,
        "can_view_reports": False,
        "can_manage_system": False,
        "can_view_analytics": False,
    },
}

ROLE_DISPLAY = {
    "super_admin": {"label": "Super Administrator", "color": "#dc2626"},
    "admin": {"label": "Administrator", "color": "#f59e0b"},
    "member": {"label": "Member", "color": "#10b981"},
    "guest": {"label": "Guest", "color": "#6b7280"},
}


def get_policy_matrix():
    """
    Returns the action policy as a list of rows, one per action
    Format: [
        {
            "action": "createPost",
            "description": "...",
            "allowed_tiers": ["member", "admin"],
            "owner_tiers": []
        },
        ...
    ]
    """
    rows = []
    for action, policy in ACTIONS.items():
        rows.append({
            "action": action,
            "description": policy["description"],
            "allowed_tiers": [t for t in TIERS if t in policy["allowed_tiers"]],
            "owner_tiers": [t for t in TIERS if t in policy["owner_tiers"]],
        })
    return rows


# Export the matrix for the policy listing endpoint
POLICY_MATRIX = get_policy_matrix()
