"""
K8s events of the agents: their health after every pass, and the failed passes.

The events are for humans (``kubectl describe``), not for the controllers:
a failure to post one is logged and never fails or delays the pass.
"""
import asyncio
import datetime

import aiohttp

from cwoperator._cogs.clients import api, errors
from cwoperator._cogs.configs import configuration
from cwoperator._cogs.helpers import typedefs
from cwoperator._cogs.structs import bodies, references

# Longer messages are rejected by K8s, so the event would be lost entirely.
MAX_MESSAGE_LENGTH = 1024
ELLIPSIS = '...'

POSTING_ERRORS = (errors.APIError, aiohttp.ClientError, asyncio.TimeoutError)


def shorten(message: str, limit: int = MAX_MESSAGE_LENGTH) -> str:
    """ Cut the middle of a long message, keeping its beginning and its end. """
    if len(message) <= limit:
        return message
    kept = limit - len(ELLIPSIS)
    return f'{message[:kept - kept // 2]}{ELLIPSIS}{message[len(message) - kept // 2:]}'


def build_event(
        ref: bodies.ObjectReference,
        *,
        namespace: str,
        type: str,
        reason: str,
        message: str,
        settings: configuration.OperatorSettings,
) -> dict[str, object]:
    now = datetime.datetime.now(datetime.timezone.utc).isoformat()
    component = settings.posting.reporting_component
    return {
        'metadata': {'namespace': namespace, 'generateName': settings.posting.event_name_prefix},
        'involvedObject': dict(ref, namespace=namespace),
        'type': type,
        'reason': reason,
        'message': shorten(message),
        'reportingComponent': component,
        'reportingInstance': settings.posting.reporting_instance,
        'source': {'component': component},  # the "From" column of `kubectl describe`
        'firstTimestamp': now,
        'lastTimestamp': now,
        'eventTime': now,
    }


async def post_event(
        *,
        ref: bodies.ObjectReference,
        type: str,
        reason: str,
        message: str = '',
        settings: configuration.OperatorSettings,
        logger: typedefs.Logger,
) -> None:
    """
    Post an event of the agent. Return nothing, even if posting has failed.

    The agents are namespaced; the references without a namespace
    go to the namespace of the current API context.
    """
    try:
        namespace = ref.get('namespace') or (await api.get_default_namespace()) or 'default'
        body = build_event(ref, namespace=namespace, type=type, reason=reason, message=message,
                           settings=settings)
        await api.post(
            url=references.EVENTS.get_url(namespace=references.NamespaceName(namespace)),
            headers={'Content-Type': 'application/json'},
            payload=body,
            logger=logger,
            settings=settings,
        )
    except POSTING_ERRORS as e:
        logger.warning(f"Failed to post the {type} event {reason!r}; continuing without it: "
                       f"{e.__class__.__name__}: {e}")
