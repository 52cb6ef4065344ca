"""Icinga2 downtime MCP server - tool definitions and handlers."""

import logging
from datetime import datetime
from typing import Any, List, Optional, Union

import httpx
from mcp.server import Server
from mcp.types import TextContent, Tool
from pydantic import BaseModel, Field, field_validator, model_validator

from . import operations
from .credentials import load_endpoint
from .expansion import (
    CreationSelector,
    RemovalSelector,
    creation_selector_from,
    removal_selector_from,
)
from .models import BatchResult, EndpointContext

logger = logging.getLogger(__name__)

# Initialize MCP server
app = Server("icinga2-downtime")

NameList = Optional[Union[str, List[str]]]


def _as_list(v: NameList) -> Optional[List[str]]:
    """Normalize a single name or a list of names to a list without blanks."""
    if v is None:
        return None
    names = [v] if isinstance(v, str) else list(v)
    if any(not name or not name.strip() for name in names):
        raise ValueError("names cannot be empty")
    return names or None


# ============================================================================
# Input Models (Pydantic v2 for validation)
# ============================================================================


class ScheduleDowntimeInput(BaseModel):
    """Input for scheduling downtime."""

    host_name: NameList = Field(
        None,
        description=(
            "Host name(s). Alone, every listed host (and by default all its services) "
            "is put in downtime; combined with service_name, every host/service pair is."
        ),
        examples=["web01.example.com", ["web01.example.com", "web02.example.com"]],
    )
    service_name: NameList = Field(
        None,
        description="Service name(s). Without host_name, matches the service on every host.",
        examples=["HTTP", ["HTTP", "MySQL"]],
    )
    service_group: Optional[str] = Field(
        None,
        description="Put every service in this service group in downtime",
        examples=["web-services"],
    )
    host_group: Optional[str] = Field(
        None,
        description="Put every service of the hosts in this host group in downtime",
        examples=["linux-servers"],
    )
    end_time: datetime = Field(
        ...,
        description="End of the downtime, local time (ISO 8601)",
        examples=["2026-10-19T22:00:00"],
    )
    start_time: Optional[datetime] = Field(
        None,
        description="Start of the downtime, local time (ISO 8601). Defaults to now.",
    )
    author: Optional[str] = Field(
        None,
        description="Author of the downtime. Defaults to the user running the server.",
        examples=["admin", "ops-team"],
    )
    comment: Optional[str] = Field(
        None,
        description="Reason for the downtime",
        examples=["Scheduled maintenance", "Database migration"],
    )
    flexible: bool = Field(
        False,
        description="If true, the downtime only starts once a problem occurs inside the window.",
    )
    duration_minutes: Optional[int] = Field(
        None,
        ge=1,
        le=43200,  # Max 30 days
        description="Flexible downtimes only: duration once triggered (default: whole window)",
    )
    all_services: bool = Field(
        True,
        description="For host-only downtimes: also schedule downtime for all services",
    )

    @field_validator("host_name", "service_name")
    @classmethod
    def validate_names(cls, v: NameList) -> Optional[List[str]]:
        """Validate names and ensure lists are not empty."""
        return _as_list(v)

    @model_validator(mode="after")
    def validate_selector(self) -> "ScheduleDowntimeInput":
        """Exactly one of host/service, service_group or host_group must be given."""
        groups = [
            bool(self.host_name or self.service_name),
            bool(self.service_group),
            bool(self.host_group),
        ]
        if sum(groups) != 1:
            raise ValueError(
                "Provide exactly one of: host_name and/or service_name, service_group, host_group"
            )
        return self

    def to_selector(self) -> CreationSelector:
        return creation_selector_from(
            hostnames=self.host_name,
            services=self.service_name,
            service_group=self.service_group,
            host_group=self.host_group,
        )


class RemoveDowntimeInput(BaseModel):
    """Input for removing downtimes."""

    downtime_name: NameList = Field(
        None,
        description="Exact downtime name(s), as returned when the downtime was scheduled",
        examples=["web01.example.com!HTTP!4f3c9a2e-..."],
    )
    host_name: NameList = Field(
        None,
        description="Remove all downtimes of these host(s)",
        examples=["web01.example.com"],
    )
    author: NameList = Field(
        None,
        description="Remove all downtimes created by these author(s)",
        examples=["admin"],
    )
    resend_full_name_list: bool = Field(
        False,
        description="With several downtime names, send the complete list with every request",
    )

    @field_validator("downtime_name", "host_name", "author")
    @classmethod
    def validate_names(cls, v: NameList) -> Optional[List[str]]:
        """Validate names and ensure lists are not empty."""
        return _as_list(v)

    @model_validator(mode="after")
    def validate_selector(self) -> "RemoveDowntimeInput":
        """Exactly one of downtime_name, host_name or author must be given."""
        groups = [bool(self.downtime_name), bool(self.host_name), bool(self.author)]
        if sum(groups) != 1:
            raise ValueError("Provide exactly one of: downtime_name, host_name, author")
        return self

    def to_selector(self) -> RemovalSelector:
        return removal_selector_from(
            downtime_names=self.downtime_name,
            hostnames=self.host_name,
            authors=self.author,
        )


# ============================================================================
# Helper Functions
# ============================================================================


def get_endpoint() -> EndpointContext:
    """Resolve the Icinga2 endpoint from the environment or the stored record."""
    return load_endpoint()


def format_batch_result(
    title: str, result: BatchResult, details: Optional[List[str]] = None
) -> List[str]:
    """Format the summary, optional details, records and failures of a batch."""
    lines = [
        f"# {title}",
        "",
        "**Summary:**",
        f"- Requests: {result.requests}",
        f"- Objects: {len(result.records)}",
        f"- Failed requests: {len(result.failures)}",
    ]

    if details:
        lines.append("")
        lines.extend(details)

    if result.records:
        lines.append("")
        lines.append(f"**✅ Objects ({len(result.records)}):**")
        for record in result.records:
            if record.downtime_name:
                lines.append(f"  - {record.object}: {record.downtime_name}")
            else:
                lines.append(f"  - {record.object}")

    if result.failures:
        lines.append("")
        lines.append(f"**❌ Failed ({len(result.failures)}):**")
        for failure in result.failures:
            descriptor = failure.descriptor
            target = descriptor.filter_expression or descriptor.extra_fields.get("downtimes")
            lines.append(f"  - {target}: {failure.message}")

    return lines


# ============================================================================
# Tool registration
# ============================================================================


@app.list_tools()
async def list_tools() -> list[Tool]:
    """List available tools."""
    return [
        Tool(
            name="schedule_downtime",
            description=(
                "Schedule maintenance downtime to suppress alerts during planned maintenance windows. "
                "Select targets by host name(s), service name(s), both (every host/service pair), "
                "a service group or a host group. Supports fixed and flexible downtimes."
            ),
            inputSchema=ScheduleDowntimeInput.model_json_schema(),
        ),
        Tool(
            name="remove_downtime",
            description=(
                "Cancel/remove scheduled maintenance downtimes by downtime name, "
                "by host name or by author."
            ),
            inputSchema=RemoveDowntimeInput.model_json_schema(),
        ),
    ]


@app.call_tool()
async def call_tool(name: str, arguments: Any) -> list[TextContent]:
    """Handle tool calls."""
    try:
        if name == "schedule_downtime":
            return await handle_schedule_downtime(ScheduleDowntimeInput(**arguments))
        elif name == "remove_downtime":
            return await handle_remove_downtime(RemoveDowntimeInput(**arguments))
        else:
            return [TextContent(type="text", text=f"Unknown tool: {name}")]
    except Exception as e:
        logger.error(f"Error in tool {name}: {e}", exc_info=True)
        return [
            TextContent(
                type="text",
                text=f"Error executing {name}: {str(e)}\n\n"
                "Please check your configuration and ensure Icinga2 API is accessible.",
            )
        ]


async def handle_schedule_downtime(
    params: ScheduleDowntimeInput,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> list[TextContent]:
    """Handle schedule_downtime tool call."""
    endpoint = get_endpoint()
    selector = params.to_selector()

    result = await operations.schedule_downtime(
        endpoint,
        selector,
        end=params.end_time,
        start=params.start_time,
        author=params.author,
        comment=params.comment,
        flexible=params.flexible,
        duration=params.duration_minutes * 60 if params.duration_minutes else None,
        all_services=params.all_services,
        transport=transport,
    )

    start = params.start_time.strftime("%Y-%m-%d %H:%M:%S") if params.start_time else "now"
    details = [
        "**Downtime Details:**",
        f"- Start: {start}",
        f"- End: {params.end_time.strftime('%Y-%m-%d %H:%M:%S')}",
        f"- Type: {'Flexible' if params.flexible else 'Fixed'}",
    ]
    output = format_batch_result("Downtime Scheduling Results", result, details)

    return [TextContent(type="text", text="\n".join(output))]


async def handle_remove_downtime(
    params: RemoveDowntimeInput,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> list[TextContent]:
    """Handle remove_downtime tool call."""
    endpoint = get_endpoint()

    result = await operations.remove_downtime(
        endpoint,
        params.to_selector(),
        resend_full_name_list=params.resend_full_name_list,
        transport=transport,
    )

    output = format_batch_result("Downtime Removal Results", result)
    if not result.records and not result.failures:
        output.append("")
        output.append("⚠️ Note: No downtimes matched the criteria.")

    return [TextContent(type="text", text="\n".join(output))]
