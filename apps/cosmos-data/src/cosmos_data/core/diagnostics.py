"""Per-request diagnostics collected from Cosmos DB response headers."""

import logging
from collections.abc import Callable, Mapping
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

logger = logging.getLogger(__name__)

REQUEST_CHARGE_HEADER = "x-ms-request-charge"
ACTIVITY_ID_HEADER = "x-ms-activity-id"
SESSION_TOKEN_HEADER = "x-ms-session-token"
ITEM_COUNT_HEADER = "x-ms-item-count"


class ResponseDiagnostics(BaseModel):
    """Diagnostics of a single Cosmos DB response."""

    request_charge: float = Field(default=0.0, ge=0, alias=REQUEST_CHARGE_HEADER)
    activity_id: str | None = Field(default=None, alias=ACTIVITY_ID_HEADER)
    session_token: str | None = Field(default=None, alias=SESSION_TOKEN_HEADER)
    item_count: int | None = Field(default=None, ge=0, alias=ITEM_COUNT_HEADER)

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    @classmethod
    def from_headers(cls, headers: Mapping[str, Any] | None) -> "ResponseDiagnostics":
        """Build diagnostics from SDK response headers.

        Args:
            headers: Response headers as exposed by the SDK response hook

        Returns:
            ResponseDiagnostics with missing headers left empty
        """
        # Header names are case-insensitive on the wire
        return cls.model_validate({str(name).lower(): value for name, value in (headers or {}).items()})


ResponseDiagnosticsProcessor = Callable[[ResponseDiagnostics], None]


def make_response_hook(processor: ResponseDiagnosticsProcessor) -> Callable[[Mapping[str, Any], Any], None]:
    """Wrap a diagnostics processor into an SDK ``response_hook``."""

    def _hook(headers: Mapping[str, Any], _result: Any) -> None:
        try:
            processor(ResponseDiagnostics.from_headers(headers))
        except Exception as e:
            # Diagnostics must never fail the data operation
            logger.warning("Response diagnostics processor failed: %s", e)

    return _hook
