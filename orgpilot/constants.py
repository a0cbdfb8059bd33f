"""Constants used across OrgPilot.

Storage keys and event names are shared with the web front end and must not
change.
"""

# View-mode storage keys (cookie and legacy local-storage use the same key)
TASK_VIEW_MODE_KEY = "taskViewMode"
ORG_VIEW_MODE_KEY = "orgViewMode"
INITIATIVE_VIEW_MODE_KEY = "initiativeViewMode"
INSTANCE_VIEW_MODE_PREFIX = "viewMode-"

# Legacy broadcast event names
ORG_VIEW_MODE_CHANGE_EVENT = "orgViewModeChange"
INITIATIVE_VIEW_MODE_CHANGE_EVENT = "initiativeViewModeChange"

# Cross-tab polling
VIEW_MODE_POLL_INTERVAL_S = 0.3

# HTTP
DEFAULT_BASE_URL = "http://localhost:8000"
DEFAULT_REQUEST_TIMEOUT_S = 5.0
DEFAULT_FETCH_TIMEOUT_S = 10.0
DIRECT_REPORTS_PATH = "/organisation/person/{node_id}/direct-reports"
ORGANISATION_PATH = "/organisation"
DEFAULT_COOKIE_DOMAIN = "localhost"
