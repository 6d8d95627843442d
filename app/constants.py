"""
Permission catalogue and role names
"""

SCOPE_GLOBAL = "global"
SCOPE_ORGANIZATION = "organization"

ORGANIZATION_OWNER_ROLE = "Organization Owner"
SUPER_ADMIN_ROLE = "Super Admin"

# Roles allowed in an organization's action -> roles permission map
ORGANIZATION_MEMBER_ROLES = ("owner", "manager", "staff")

# (name, scope, description)
DEFAULT_PERMISSIONS = [
    ("create_organization", SCOPE_GLOBAL, "Create organizations"),
    ("update_organization", SCOPE_GLOBAL, "Update any organization"),
    ("delete_organization", SCOPE_GLOBAL, "Delete organizations"),
    ("assign_organization_owner", SCOPE_GLOBAL, "Assign an owner to an organization"),
    ("manage_global_roles", SCOPE_GLOBAL, "Create and edit global roles"),
    ("view_roles", SCOPE_ORGANIZATION, "View organization roles"),
    ("manage_organization_roles", SCOPE_ORGANIZATION, "Create and edit organization roles"),
    ("manage_organization", SCOPE_ORGANIZATION, "Edit organization details"),
    ("manage_turfs", SCOPE_ORGANIZATION, "Create, edit and delete turfs"),
    ("manage_bookings", SCOPE_ORGANIZATION, "Manage bookings of the organization's turfs"),
]

WEEKDAYS = ("monday", "tuesday", "wednesday", "thursday", "friday", "saturday", "sunday")
