"""Sequential dispatch of request descriptors and classification of the responses."""

import logging
from typing import Iterable, List

from .client import (
    Icinga2APIError,
    Icinga2Client,
    NotFoundError,
    RemoteStatusError,
)
from .models import (
    ApiResponse,
    BatchResult,
    DescriptorFailure,
    DowntimeAction,
    RequestDescriptor,
    ResultRecord,
)
from .status import parse_status

logger = logging.getLogger(__name__)

NOT_FOUND_MESSAGE = "object not found - check filter"


def classify_response(action: DowntimeAction, response: ApiResponse) -> List[ResultRecord]:
    """
    Turn one API response into result records.

    Args:
        action: Action the response belongs to (selects the status parser)
        response: Parsed API response

    Returns:
        One record per status message

    Raises:
        NotFoundError: Result code is not 200 and the API gave no error field
        RemoteStatusError: Result code is not 200 and the API reported an error
        StatusParseError: A status message could not be parsed
    """
    if response.result_code != 200:
        if response.error_field is None:
            raise NotFoundError(NOT_FOUND_MESSAGE)

        message = response.status_text
        if not message and response.status_messages:
            message = response.status_messages[0]
        raise RemoteStatusError(message or str(response.error_field))

    return [parse_status(action, line) for line in response.status_messages]


async def dispatch_batch(
    client: Icinga2Client,
    action: DowntimeAction,
    descriptors: Iterable[RequestDescriptor],
) -> BatchResult:
    """
    Send every descriptor, one after another, and collect the outcome.

    A failing descriptor is logged and recorded in ``failures``; it never
    stops the remaining descriptors from being sent.

    Args:
        client: Open Icinga2 client
        action: Action endpoint to call
        descriptors: Requests in dispatch order

    Returns:
        Records of all successful requests and failures of the others
    """
    result = BatchResult()

    for descriptor in descriptors:
        result.requests += 1
        target = descriptor.filter_expression or descriptor.extra_fields.get("downtimes")
        try:
            response = await client.perform_action(action, descriptor)
            records = classify_response(action, response)
        except Icinga2APIError as e:
            logger.error(f"{action.value} failed for {target}: {e}")
            result.failures.append(DescriptorFailure(descriptor=descriptor, error=e))
            continue

        logger.info(f"{action.value} succeeded for {target}: {len(records)} object(s)")
        result.records.extend(records)

    return result
