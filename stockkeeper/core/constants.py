from __future__ import annotations

COOKIE_NAME = "session"
JWT_ALGORITHM = "HS256"
MIN_JWT_SECRET_BYTES = 32
FALLBACK_JWT_SECRET = "fallback-super-secret-key-must-be-32-characters-minimum"

LOGIN_PATH = "/login"
ADMIN_HOME_PATH = "/admin/dashboard"
EMPLOYEE_HOME_PATH = "/"
ADMIN_PATH_PREFIX = "/admin"
REDIRECT_PARAM = "redirectedFrom"

UNSPECIFIED_LOCATION = "Unspecified"

DEFECT_REASON_SUGGESTIONS: tuple[str, ...] = (
    "Physical damage (shipping)",
    "Physical damage (storage)",
    "Manufacturing fault",
    "Expired",
    "Does not match specification",
    "Missing components",
    "Other (explain in notes)",
)
