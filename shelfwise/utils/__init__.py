from .error_messages import ErrorMessages
from .permissions import require_business_access
from .timezone_utils import TimezoneUtils

__all__ = [
    "ErrorMessages",
    "TimezoneUtils",
    "require_business_access",
]
