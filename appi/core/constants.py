"""Roles, event kinds and action names shared across the module tree."""

# Roles. Any other string is accepted as a role as well.
ROLE_TRUNK = "trunk"
ROLE_COMMS = "comms"
ROLE_UI = "ui"
ROLE_BACKEND = "backend"
ROLE_USER = "user"
ROLE_CLIENTS = "clients"

ROLES = (ROLE_TRUNK, ROLE_COMMS, ROLE_UI, ROLE_BACKEND, ROLE_USER, ROLE_CLIENTS)

# Config keys the trunk keeps for itself
TRUNK_CONFIG_KEYS = (ROLE_TRUNK, "app")

# Event kinds
EVENT_MODULE_ADDED = "moduleadd"
EVENT_MODULE_BEFORE_REMOVE = "moduleremovebefore"
EVENT_MODULE_REMOVED = "moduleremoved"
EVENT_VAR_WRITE = "varwrite"
EVENT_BEFORE_SUSPEND = "beforesuspend"
EVENT_AFTER_WAKE = "afterwake"
EVENT_COMMAND_FROM_UI = "commandfromui"
EVENT_COMMAND_FROM_BACKEND = "commandfrombackend"

# Actions used by the packet/request shortcuts
ACTION_GET_PACKET = "get_packet"
ACTION_SEND_REQUEST = "send_request"

LOG_PREFIX = "APPI"
