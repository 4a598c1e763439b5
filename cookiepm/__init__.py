"""cookiepm - record cookie policy agreement and run code once it is given."""

from cookiepm.config import ManagerSettings
from cookiepm.environment import BrowserEnvironment, Location, memory_environment, profile_environment
from cookiepm.errors import CookiePMError, InvalidAgreementTypeError, InvalidCallbackError
from cookiepm.manager import CookiePolicyManager
from cookiepm.models import AgreementStatus, AgreementValue

__all__ = [
    "AgreementStatus",
    "AgreementValue",
    "BrowserEnvironment",
    "CookiePMError",
    "CookiePolicyManager",
    "InvalidAgreementTypeError",
    "InvalidCallbackError",
    "Location",
    "ManagerSettings",
    "memory_environment",
    "profile_environment",
]
__version__ = "0.1.0"
