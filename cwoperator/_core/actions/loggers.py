"""
Logging of the reconcile passes: every message is attributed to its agent.

The passes log via :class:`AgentLogger`, which puts the agent's reference
into the records. The formatters show it either as a ``[namespace/name]``
prefix of the messages, or as a separate field of the JSON lines,
so that the log collectors can filter the messages by the agent.
"""
import copy
import enum
import logging
from collections.abc import Mapping, MutableMapping
from typing import Any

from pythonjsonlogger.core import RESERVED_ATTRS
from pythonjsonlogger.json import JsonFormatter

from cwoperator._cogs.helpers import typedefs

logger = logging.getLogger('cwoperator.agents')

# The handler's name marks it as ours, so that re-configuration replaces it.
HANDLER_NAME = 'cwoperator'

# The field of JSON lines with the agent's reference.
DEFAULT_JSON_REFKEY = 'agent'

SEVERITIES = (
    (logging.DEBUG, 'debug'),
    (logging.INFO, 'info'),
    (logging.WARNING, 'warn'),
    (logging.ERROR, 'error'),
)


class LogFormat(enum.Enum):
    """ Log formats, as specified on CLI. """
    PLAIN = '%(message)s'
    FULL = '[%(asctime)s] %(name)-20.20s [%(levelname)-8.8s] %(message)s'
    JSON = '-json-'  # not used for formatting, only for detection


def _prefixed(record: logging.LogRecord) -> logging.LogRecord:
    ref = getattr(record, 'agent_ref', None)
    if not ref:
        return record
    namespace, name = ref.get('namespace'), ref.get('name')
    record = copy.copy(record)  # other handlers must see the original message
    record.msg = f"[{namespace}/{name}] {record.msg}" if namespace else f"[{name}] {record.msg}"
    return record


class AgentTextFormatter(logging.Formatter):
    def __init__(self, fmt: str | None = None, *, prefix: bool = False) -> None:
        super().__init__(fmt)
        self.prefix = prefix

    def format(self, record: logging.LogRecord) -> str:
        return super().format(_prefixed(record) if self.prefix else record)


class AgentJsonFormatter(JsonFormatter):
    """
    JSON lines with the agent's reference and a severity for the log collectors.

    The reference goes under ``refkey`` instead of the raw ``agent_ref`` attribute.
    """

    def __init__(self, *, refkey: str | None = None, prefix: bool = False) -> None:
        super().__init__(reserved_attrs=set(RESERVED_ATTRS) | {'agent_ref'}, timestamp=True)
        self.refkey = refkey or DEFAULT_JSON_REFKEY
        self.prefix = prefix

    def format(self, record: logging.LogRecord) -> str:
        return super().format(_prefixed(record) if self.prefix else record)

    def add_fields(
            self,
            log_record: dict[str, Any],
            record: logging.LogRecord,
            message_dict: dict[str, Any],
    ) -> None:
        super().add_fields(log_record, record, message_dict)
        ref = getattr(record, 'agent_ref', None)
        if ref:
            log_record[self.refkey] = ref
        log_record.setdefault('severity', next(
            (severity for levelno, severity in SEVERITIES if record.levelno <= levelno), 'fatal'))


class AgentLogger(typedefs.LoggerAdapter):
    """
    A logger of one reconcile pass of one agent.

    The builders, the reactor, and the API clients of the pass all log via it,
    so all their messages are attributed to the agent being reconciled.
    """

    def __init__(self, *, body: Mapping[str, Any]) -> None:
        meta = body.get('metadata', {})
        super().__init__(logger, dict(agent_ref=dict(
            apiVersion=body.get('apiVersion'),
            kind=body.get('kind'),
            name=meta.get('name'),
            uid=meta.get('uid'),
            namespace=meta.get('namespace'),
        )))

    def process(
            self,
            msg: str,
            kwargs: MutableMapping[str, Any],
    ) -> tuple[str, MutableMapping[str, Any]]:
        # The stdlib adapters replace the message's extras; we keep both.
        kwargs['extra'] = (self.extra or {}) | kwargs.get('extra', {})
        return msg, kwargs


def make_formatter(
        log_format: LogFormat | str = LogFormat.FULL,
        log_prefix: bool | None = False,
        log_refkey: str | None = None,
) -> logging.Formatter:
    """
    The formatter of the requested format; the texts are prefixed by default.
    """
    if log_prefix is None:
        log_prefix = log_format is not LogFormat.JSON
    match log_format:
        case LogFormat.JSON:
            return AgentJsonFormatter(refkey=log_refkey, prefix=log_prefix)
        case LogFormat():
            return AgentTextFormatter(log_format.value, prefix=log_prefix)
        case str():
            return AgentTextFormatter(log_format, prefix=log_prefix)
        case _:
            raise ValueError(f"Unsupported log format: {log_format!r}")


def configure(
        debug: bool | None = None,
        verbose: bool | None = None,
        quiet: bool | None = None,
        log_format: LogFormat | str = LogFormat.FULL,
        log_prefix: bool | None = False,
        log_refkey: str | None = None,
) -> None:
    handler = logging.StreamHandler()
    handler.set_name(HANDLER_NAME)
    handler.setFormatter(make_formatter(log_format=log_format, log_prefix=log_prefix, log_refkey=log_refkey))

    root = logging.getLogger()
    root.handlers[:] = [h for h in root.handlers if h.get_name() != HANDLER_NAME] + [handler]
    root.setLevel('DEBUG' if debug or verbose else 'WARNING' if quiet else 'INFO')

    # The event loop's own messages are only shown when debugging.
    asyncio_logger = logging.getLogger('asyncio')
    asyncio_logger.propagate = bool(debug)
    if not debug:
        asyncio_logger.handlers[:] = [logging.NullHandler()]
