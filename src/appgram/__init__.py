"""
Appgram SDK.

Client-side synchronization layer for Appgram feedback, voting, roadmap,
release, help-center and support features.
"""

from appgram.core.errors import AppgramError, ConfigurationError, ErrorCode
from appgram.core.identity import IdentityProvider
from appgram.provider import AppgramProvider
from appgram.schemas.result import ApiResult, Err, Ok

__version__ = "1.0.0"

__all__ = [
    "ApiResult",
    "AppgramError",
    "AppgramProvider",
    "ConfigurationError",
    "Err",
    "ErrorCode",
    "IdentityProvider",
    "Ok",
]
