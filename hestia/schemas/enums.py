from enum import Enum

class SharingMode(str, Enum):
    off = "off"
    always = "always"
    timed = "timed"

class ConnectionStatus(str, Enum):
    connected = "connected"
    requested = "requested"
    none = "none"

class NotificationType(str, Enum):
    connection_request = "connection_request"
    connection_accepted = "connection_accepted"
    connection_declined = "connection_declined"
    profile_update = "profile_update"
    location_shared = "location_shared"
    location_revoked = "location_revoked"
    new_message = "new_message"
