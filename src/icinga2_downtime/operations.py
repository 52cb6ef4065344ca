"""Schedule and remove downtimes for a selector against one Icinga2 endpoint."""

import logging
from datetime import datetime
from typing import Optional

import httpx

from .client import Icinga2Client
from .dispatcher import dispatch_batch
from .expansion import (
    CreationSelector,
    RemovalSelector,
    expand_creation,
    expand_removal,
)
from .models import BatchResult, DowntimeAction, EndpointContext

logger = logging.getLogger(__name__)


async def schedule_downtime(
    endpoint: EndpointContext,
    selector: CreationSelector,
    end: datetime,
    start: Optional[datetime] = None,
    author: Optional[str] = None,
    comment: Optional[str] = None,
    flexible: bool = False,
    duration: Optional[int] = None,
    all_services: bool = True,
    policy=None,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> BatchResult:
    """
    Schedule downtimes for every object the selector expands to.

    See expansion.expand_creation for the meaning of the window and payload
    arguments.

    Returns:
        Records for each scheduled downtime and failures per request
    """
    descriptors = expand_creation(
        selector,
        end=end,
        start=start,
        author=author,
        comment=comment,
        flexible=flexible,
        duration=duration,
        all_services=all_services,
        policy=policy,
    )
    logger.info(f"Scheduling downtime: {len(descriptors)} request(s) to {endpoint.base_url}")

    async with Icinga2Client(endpoint, transport=transport) as client:
        return await dispatch_batch(client, DowntimeAction.SCHEDULE, descriptors)


async def remove_downtime(
    endpoint: EndpointContext,
    selector: RemovalSelector,
    resend_full_name_list: bool = False,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> BatchResult:
    """
    Remove downtimes matched by the selector.

    Returns:
        Records for each removed downtime and failures per request
    """
    descriptors = expand_removal(selector, resend_full_name_list=resend_full_name_list)
    logger.info(f"Removing downtime: {len(descriptors)} request(s) to {endpoint.base_url}")

    async with Icinga2Client(endpoint, transport=transport) as client:
        return await dispatch_batch(client, DowntimeAction.REMOVE, descriptors)
