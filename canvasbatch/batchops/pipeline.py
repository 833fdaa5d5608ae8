"""Single round trip for one batch: envelope in, aggregated result out"""

import logging
from typing import Any, Callable

from .aggregate import BatchResult, aggregate_reply, empty_result
from .common import BatchTransportError, response_error_text
from .envelope import BatchEnvelope

logger = logging.getLogger(__name__)


def submit_batch(envelope: BatchEnvelope, get_connection: Callable[[], Any]) -> BatchResult:
    """
    Send a batch to the canvas and aggregate the reply.

    An empty envelope short-circuits before ``get_connection`` is called, so
    no availability probe and no round trip happen for it.

    Args:
        envelope: Validated batch
        get_connection: Returns an object with ``execute_operation(dict) -> dict``

    Raises:
        BatchTransportError: the round trip failed as a whole
    """
    if envelope.is_empty():
        logger.info(f"Nothing to do for {envelope.remote_command}: empty batch")
        return empty_result(envelope)

    connection = get_connection()
    logger.info(f"Submitting {envelope.remote_command} with {envelope.total} items")
    response = connection.execute_operation(envelope.to_operation_data())

    if not isinstance(response, dict) or response.get("status") != "success":
        error = response_error_text(response) if isinstance(response, dict) else "No response from canvas"
        logger.error(f"{envelope.remote_command} failed: {error}")
        raise BatchTransportError(error)

    return aggregate_reply(envelope, response.get("data"))
