"""Data types shared by the expansion, dispatch and classification steps."""

from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, SecretStr


class ObjectType(str, Enum):
    """Icinga2 object types addressed by downtime actions."""
    HOST = "Host"
    SERVICE = "Service"
    DOWNTIME = "Downtime"


class DowntimeAction(str, Enum):
    """Action endpoints under /v1/actions."""
    SCHEDULE = "schedule-downtime"
    REMOVE = "remove-downtime"


class EndpointContext(BaseModel):
    """Resolved Icinga2 API target and credentials for one invocation."""

    model_config = ConfigDict(frozen=True)

    host: str = Field(..., min_length=1, description="Icinga2 API host name or address")
    port: int = Field(5665, ge=1, le=65535, description="Icinga2 API port")
    username: str = Field(..., min_length=1, description="API user")
    password: SecretStr = Field(..., description="API password")
    verify_ssl: bool = Field(
        False,
        description="Verify the API TLS certificate (Icinga2 ships self-signed certificates)",
    )
    timeout: float = Field(30.0, gt=0, description="Request timeout in seconds")

    @property
    def base_url(self) -> str:
        return f"https://{self.host}:{self.port}"


class RequestDescriptor(BaseModel):
    """
    One self-contained action request.

    Either ``filter_expression`` selects the target objects, or ``extra_fields``
    carries a literal ``downtimes`` name list and the filter is left out.
    """

    model_config = ConfigDict(frozen=True)

    object_type: ObjectType
    filter_expression: Optional[str] = None
    extra_fields: Dict[str, Any] = Field(default_factory=dict)

    def payload(self) -> Dict[str, Any]:
        """Render the JSON body sent to the action endpoint."""
        body: Dict[str, Any] = {"type": self.object_type.value}
        if self.filter_expression is not None:
            body["filter"] = self.filter_expression
        body.update(self.extra_fields)
        return body


class ApiResponse(BaseModel):
    """Outcome of one HTTP exchange, reduced to the fields we classify on."""

    model_config = ConfigDict(frozen=True)

    http_succeeded: bool
    result_code: Optional[int] = None
    error_field: Optional[Any] = None
    status_text: Optional[str] = None
    status_messages: List[str] = Field(default_factory=list)

    @classmethod
    def from_payload(cls, http_status: int, data: Dict[str, Any]) -> "ApiResponse":
        """
        Build a response from the HTTP status and the decoded JSON body.

        The result code is taken from the first entry in ``results``; Icinga2
        omits ``results`` on request-level failures (for example when a filter
        matches nothing), in which case the numeric ``error`` field or the
        HTTP status is used instead.
        """
        results = data.get("results") or []
        error = data.get("error")

        result_code: Optional[int] = None
        if results and results[0].get("code") is not None:
            result_code = int(results[0]["code"])
        elif isinstance(error, (int, float)):
            result_code = int(error)
        else:
            result_code = http_status

        messages = [str(r["status"]) for r in results if r.get("status") is not None]

        return cls(
            http_succeeded=200 <= http_status < 300,
            result_code=result_code,
            error_field=error,
            status_text=data.get("status"),
            status_messages=messages,
        )


class ResultRecord(BaseModel):
    """One object touched by a successful action."""

    object: str
    downtime_name: Optional[str] = None


class DescriptorFailure(BaseModel):
    """A descriptor whose dispatch was classified as an error."""

    model_config = ConfigDict(arbitrary_types_allowed=True)

    descriptor: RequestDescriptor
    error: Exception

    @property
    def message(self) -> str:
        return str(self.error)


class BatchResult(BaseModel):
    """Accumulated records and failures for a whole batch."""

    requests: int = 0
    records: List[ResultRecord] = Field(default_factory=list)
    failures: List[DescriptorFailure] = Field(default_factory=list)

    @property
    def succeeded(self) -> bool:
        return not self.failures
