"""API and entity models."""

from cosmos_sample.models.health import HealthCheckResponse
from cosmos_sample.models.keys import KeySwitchResponse
from cosmos_sample.models.user import Address, User, UserCountResponse

__all__ = ["Address", "HealthCheckResponse", "KeySwitchResponse", "User", "UserCountResponse"]
