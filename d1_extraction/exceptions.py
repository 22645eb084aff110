"""Errors raised while turning telemetry into variables"""
from typing import Optional

from core.exceptions import InputError, NotFoundError


class UnknownGameType(NotFoundError):
    """Raised when no extraction strategy is registered for a game type"""

    def __init__(self, game_type: str):
        super().__init__(resource="Game type", identifier=game_type, error_code="UNKNOWN_GAME_TYPE")
        self.game_type = game_type


class MissingTelemetryField(InputError):
    """Raised when a field required by a strategy is absent or malformed"""

    def __init__(self, field_name: str, reason: Optional[str] = None):
        message = f"Telemetry field '{field_name}' is {reason or 'missing'}"
        super().__init__(message, field=field_name, error_code="MISSING_TELEMETRY_FIELD")
        self.field_name = field_name
        self.reason = reason or "missing"
