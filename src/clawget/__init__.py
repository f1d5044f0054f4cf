from ._version import __version__
from .client import Clawget, map_registration
from .config import DEFAULT_BASE_URL
from .errors import ClawgetError, ConfigurationError, TransportError

__all__ = [
    "__version__",
    "Clawget",
    "ClawgetError",
    "ConfigurationError",
    "TransportError",
    "DEFAULT_BASE_URL",
    "map_registration",
]
