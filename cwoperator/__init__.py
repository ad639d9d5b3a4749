"""
The main module of the operator for all the exported functions & classes.
"""
# isort: skip_file

# Unlike all other places, where we import other modules and refer
# the functions via the modules, this is the operator's top-level interface,
# as it is seen by the users & the tests. So, we export the individual names.

from cwoperator._cogs.configs.configuration import (
    OperatorSettings,
    NetworkingSettings,
    ReconcilingSettings,
    PostingSettings,
    FilteringSettings,
    ManifestsSettings,
)
from cwoperator._cogs.helpers.typedefs import (
    Logger,
)
from cwoperator._cogs.helpers.versions import (
    version as __version__,
)
from cwoperator._cogs.structs.bodies import (
    RawBody,
    OwnerReference,
    ObjectReference,
    build_object_reference,
    build_owner_reference,
)
from cwoperator._cogs.structs.credentials import (
    LoginError,
    ConnectionInfo,
)
from cwoperator._cogs.structs.ports import (
    PortDescriptor,
    Protocol,
)
from cwoperator._cogs.structs.specs import (
    Agent,
    AgentSpec,
    Mode,
    parse_agent,
)
from cwoperator._cogs.clients.auth import (
    authenticated_context,
)
from cwoperator._cogs.clients.errors import (
    APIError,
    APIClientError,
    APIServerError,
    APIForbiddenError,
    APIUnauthorizedError,
    APINotFoundError,
    APIConflictError,
    APIUnprocessableEntityError,
)
from cwoperator._core.actions.loggers import (
    configure as configure_logging,
    AgentLogger,
    LogFormat,
)
from cwoperator._core.intents.piggybacking import (
    login,
    login_with_service_account,
    login_with_kubeconfig,
)
from cwoperator._core.resolving.agentconfig import (
    AGENT_PARSERS,
    resolve_agent_ports,
)
from cwoperator._core.resolving.collectorconfig import (
    RECEIVER_PARSERS,
    resolve_collector_ports,
)
from cwoperator._core.resolving.ports import (
    resolve_ports,
    resolve_metrics_port,
)
from cwoperator._core.manifests.building import (
    build,
    build_agent,
)
from cwoperator._core.manifests.params import (
    Manifest,
    Params,
    make_params,
)
from cwoperator._core.reactor.mutating import (
    MutationResult,
)
from cwoperator._core.reactor.errors import (
    ReconciliationError,
    PruningError,
)
from cwoperator._core.reactor.processing import (
    PassOutcome,
    reconcile,
)

__all__ = [
    'OperatorSettings',
    'NetworkingSettings',
    'ReconcilingSettings',
    'PostingSettings',
    'FilteringSettings',
    'ManifestsSettings',
    'Logger',
    'RawBody',
    'OwnerReference',
    'ObjectReference',
    'build_object_reference',
    'build_owner_reference',
    'LoginError',
    'ConnectionInfo',
    'PortDescriptor',
    'Protocol',
    'Agent',
    'AgentSpec',
    'Mode',
    'parse_agent',
    'authenticated_context',
    'APIError',
    'APIClientError',
    'APIServerError',
    'APIForbiddenError',
    'APIUnauthorizedError',
    'APINotFoundError',
    'APIConflictError',
    'APIUnprocessableEntityError',
    'configure_logging',
    'AgentLogger',
    'LogFormat',
    'login',
    'login_with_service_account',
    'login_with_kubeconfig',
    'AGENT_PARSERS',
    'resolve_agent_ports',
    'RECEIVER_PARSERS',
    'resolve_collector_ports',
    'resolve_ports',
    'resolve_metrics_port',
    'build',
    'build_agent',
    'Manifest',
    'Params',
    'make_params',
    'MutationResult',
    'ReconciliationError',
    'PruningError',
    'PassOutcome',
    'reconcile',
]
