"""Selector variants and their expansion into action request descriptors."""

import getpass
import logging
from datetime import datetime
from typing import Any, Dict, List, Literal, Optional, Sequence, Union

from pydantic import BaseModel, Field

from .models import ObjectType, RequestDescriptor
from .timewindow import normalize_window

logger = logging.getLogger(__name__)

DEFAULT_COMMENT = "Scheduled maintenance"


# ============================================================================
# Removal selectors
# ============================================================================


class ByDowntimeName(BaseModel):
    kind: Literal["downtime_name"] = "downtime_name"
    names: List[str] = Field(..., min_length=1)


class ByHostname(BaseModel):
    kind: Literal["hostname"] = "hostname"
    hostnames: List[str] = Field(..., min_length=1)


class ByAuthor(BaseModel):
    kind: Literal["author"] = "author"
    authors: List[str] = Field(..., min_length=1)


RemovalSelector = Union[ByDowntimeName, ByHostname, ByAuthor]


# ============================================================================
# Creation selectors
# ============================================================================


class HostAndService(BaseModel):
    kind: Literal["host_and_service"] = "host_and_service"
    hostnames: List[str] = Field(..., min_length=1)
    services: List[str] = Field(..., min_length=1)


class HostOnly(BaseModel):
    kind: Literal["host"] = "host"
    hostnames: List[str] = Field(..., min_length=1)


class ServiceOnly(BaseModel):
    kind: Literal["service"] = "service"
    services: List[str] = Field(..., min_length=1)


class ServiceGroup(BaseModel):
    kind: Literal["service_group"] = "service_group"
    group: str = Field(..., min_length=1)


class HostGroup(BaseModel):
    kind: Literal["host_group"] = "host_group"
    group: str = Field(..., min_length=1)


CreationSelector = Union[HostAndService, HostOnly, ServiceOnly, ServiceGroup, HostGroup]


def _present(values: Optional[Sequence[str]]) -> bool:
    return bool(values)


def removal_selector_from(
    downtime_names: Optional[Sequence[str]] = None,
    hostnames: Optional[Sequence[str]] = None,
    authors: Optional[Sequence[str]] = None,
) -> RemovalSelector:
    """
    Build the removal selector from raw parameters.

    Groups are checked in priority order: downtime name, hostname, author.

    Raises:
        ValueError: If no selector group is given
    """
    if _present(downtime_names):
        return ByDowntimeName(names=list(downtime_names))
    if _present(hostnames):
        return ByHostname(hostnames=list(hostnames))
    if _present(authors):
        return ByAuthor(authors=list(authors))
    raise ValueError("One of downtime_names, hostnames or authors is required")


def creation_selector_from(
    hostnames: Optional[Sequence[str]] = None,
    services: Optional[Sequence[str]] = None,
    service_group: Optional[str] = None,
    host_group: Optional[str] = None,
) -> CreationSelector:
    """
    Build the creation selector from raw parameters.

    Groups are checked in priority order: hostname+service, hostname,
    service, service group, host group.

    Raises:
        ValueError: If no selector group is given
    """
    if _present(hostnames) and _present(services):
        return HostAndService(hostnames=list(hostnames), services=list(services))
    if _present(hostnames):
        return HostOnly(hostnames=list(hostnames))
    if _present(services):
        return ServiceOnly(services=list(services))
    if service_group:
        return ServiceGroup(group=service_group)
    if host_group:
        return HostGroup(group=host_group)
    raise ValueError(
        "One of hostnames, services, service_group or host_group is required"
    )


# ============================================================================
# Expansion
# ============================================================================


def expand_removal(
    selector: RemovalSelector, resend_full_name_list: bool = False
) -> List[RequestDescriptor]:
    """
    Expand a removal selector into remove-downtime descriptors.

    Args:
        selector: Removal selector variant
        resend_full_name_list: For downtime names, send the complete name list
            with every request instead of only the name being iterated

    Returns:
        Descriptors in dispatch order
    """
    if isinstance(selector, ByDowntimeName):
        return [
            RequestDescriptor(
                object_type=ObjectType.DOWNTIME,
                extra_fields={
                    "downtimes": list(selector.names) if resend_full_name_list else [name]
                },
            )
            for name in selector.names
        ]

    if isinstance(selector, ByHostname):
        return [
            RequestDescriptor(
                object_type=ObjectType.HOST,
                filter_expression=f'host.name == "{host}"',
            )
            for host in selector.hostnames
        ]

    if isinstance(selector, ByAuthor):
        return [
            RequestDescriptor(
                object_type=ObjectType.DOWNTIME,
                filter_expression=f'downtime.author == "{author}"',
            )
            for author in selector.authors
        ]

    raise TypeError(f"Unsupported removal selector: {type(selector).__name__}")


def expand_creation(
    selector: CreationSelector,
    end: datetime,
    start: Optional[datetime] = None,
    author: Optional[str] = None,
    comment: Optional[str] = None,
    flexible: bool = False,
    duration: Optional[int] = None,
    all_services: bool = True,
    policy=None,
) -> List[RequestDescriptor]:
    """
    Expand a creation selector into schedule-downtime descriptors.

    Args:
        selector: Creation selector variant
        end: End of the window (local time)
        start: Start of the window (local time, defaults to now)
        author: Downtime author (defaults to the invoking user)
        comment: Downtime comment
        flexible: Schedule a flexible instead of a fixed downtime
        duration: Flexible downtime duration in seconds (defaults to the window length)
        all_services: For host-only selectors, also put all services of the host in downtime
        policy: Time normalization policy, see timewindow

    Returns:
        Descriptors in dispatch order
    """
    start_epoch, end_epoch = normalize_window(end, start, policy=policy)

    fields: Dict[str, Any] = {
        "start_time": start_epoch,
        "end_time": end_epoch,
        "author": author or getpass.getuser(),
        "comment": comment or DEFAULT_COMMENT,
        "fixed": not flexible,
    }
    if flexible:
        fields["duration"] = duration if duration is not None else end_epoch - start_epoch

    def service(filter_expr: str) -> RequestDescriptor:
        return RequestDescriptor(
            object_type=ObjectType.SERVICE,
            filter_expression=filter_expr,
            extra_fields=dict(fields),
        )

    if isinstance(selector, HostAndService):
        descriptors = [
            service(f'host.name=="{host}" && service.name=="{srv}"')
            for host in selector.hostnames
            for srv in selector.services
        ]
    elif isinstance(selector, HostOnly):
        descriptors = [
            RequestDescriptor(
                object_type=ObjectType.HOST,
                filter_expression=f'host.name=="{host}"',
                extra_fields={**fields, "all_services": all_services},
            )
            for host in selector.hostnames
        ]
    elif isinstance(selector, ServiceOnly):
        descriptors = [service(f'service.name=="{srv}"') for srv in selector.services]
    elif isinstance(selector, ServiceGroup):
        descriptors = [service(f'"{selector.group}" in service.groups')]
    elif isinstance(selector, HostGroup):
        descriptors = [service(f'"{selector.group}" in host.groups')]
    else:
        raise TypeError(f"Unsupported creation selector: {type(selector).__name__}")

    logger.debug(f"Expanded {selector.kind} selector into {len(descriptors)} request(s)")
    return descriptors
