from hestia.schemas.enums import SharingMode

# --------------------------------------------------
# LOCATION SHARING
# --------------------------------------------------

# Used when a timed share is requested without an explicit duration
TIMED_SHARING_DEFAULT_MINUTES = 60

# Mode applied when a first location write creates the settings row
DEFAULT_SHARING_MODE = SharingMode.always

# --------------------------------------------------
# PROFILE PICTURES
# --------------------------------------------------

PROFILE_PIC_SIZE = (200, 200)
PROFILE_PIC_FORMAT = "PNG"

# --------------------------------------------------
# PROFILES
# --------------------------------------------------

DEFAULT_INTRO = "Hi! I'm using Hestia"
