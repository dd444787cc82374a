"""Fixed values shared by the services, routers and settings defaults."""

# Document slots an event can hold, in display order
DEFAULT_FILE_SLOTS = ("request", "authorization", "certificate", "result", "prescription", "invoice")

# Slots that need explicit overwrite confirmation when already filled
PROTECTED_FILE_SLOTS = ("result",)
RESULT_SLOT = "result"

# Request header carrying the overwrite confirmation for protected slots
OVERWRITE_RESULT_HEADER = "X-Overwrite-Result"

# Defaults used when promoting a notification into an event
PROMOTED_EVENT_DESCRIPTION = "Report sent by the Omni app"
PROMOTED_EVENT_START_TIME = "09:00"
PROMOTED_EVENT_END_TIME = "09:30"
PROMOTED_PROFESSIONAL_SPECIALTY = "To be defined"

NO_STORE_CACHE_CONTROL = "no-store, no-cache, must-revalidate"
