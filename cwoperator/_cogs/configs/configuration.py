"""
All configuration flags, options, settings to fine-tune the operator.

All settings are grouped semantically just for convenience
(instead of a flat mega-object with all the values in it).

The settings object is created once (e.g. by the CLI) and then passed
explicitly to every function that needs it: the builders, the reactor,
the API clients. There are no module-level singletons of configuration.

.. note::

    Some of the settings are flags, some are scalars, some are optional,
    some are not (but all of them have reasonable defaults).
"""
import dataclasses
import logging
import re
import socket
from collections.abc import Collection, Iterable


@dataclasses.dataclass
class NetworkingSettings:

    request_timeout: float | None = 5 * 60  # == aiohttp.client.DEFAULT_TIMEOUT
    """
    A timeout (in seconds) for all the API calls, as a whole.
    """

    connect_timeout: float | None = None
    """
    A timeout (in seconds) for establishing the connection to the API.
    """

    error_backoffs: float | Iterable[float] = (1, 1, 2, 3, 5, 8)
    """
    Backoffs (in seconds) for retrying the API calls on transient errors:
    connection errors, timeouts, HTTP 5xx responses.

    The number of backoffs defines the number of retries.
    Set to an empty collection to disable the retries.

    The API errors (HTTP 4xx) are never retried here.
    """


@dataclasses.dataclass
class ReconcilingSettings:

    conflict_backoffs: Iterable[float] = (0.1, 0.2, 0.5, 1.0)
    """
    Backoffs (in seconds) for re-applying an object after a write conflict
    (HTTP 409 on creation or replacement), i.e. when another actor has changed
    the object between our reading and writing.

    On every retry, the object is re-read and re-merged from scratch.
    The number of backoffs defines the number of retries; once exhausted,
    the object is reported as failed, and the outer runtime's requeue applies.
    """

    owner_references: bool = True
    """
    Whether the namespaced objects get the custom resource as their controller.
    Cluster-scoped objects never get owners, regardless of this flag.
    """

    openshift_routes: bool = False
    """
    Whether the cluster serves OpenShift routes (`route.openshift.io`).
    If so, the routes are built and their orphans are pruned; otherwise,
    the routes are neither built nor listed, even if the custom resource asks for them.
    """


@dataclasses.dataclass
class PostingSettings:

    enabled: bool = True
    """
    Should the health reports & errors be posted as K8s events for the custom
    resource. The events can be seen in ``kubectl describe`` output.
    """

    level: int = logging.INFO
    """
    A minimal level of the events to post. Health events are ``INFO``,
    errors are ``WARNING``.
    """

    reporting_component: str = 'amazon-cloudwatch-agent-operator'
    """
    A name of the reporting component, as seen in the "From" column
    of ``kubectl describe``.
    """

    reporting_instance: str = dataclasses.field(default_factory=socket.gethostname)
    """
    An id of the reporting instance; usually the pod's hostname.
    """

    event_name_prefix: str = 'cwoperator-event-'
    """
    A prefix for the generated names of the events.
    """


@dataclasses.dataclass
class FilteringSettings:
    """
    Labels & annotations of the custom resource that are not propagated
    to the generated objects.

    The patterns are globs: ``*`` matches any sequence of characters;
    everything else is matched literally. E.g. ``kubectl.kubernetes.io/*``.
    """

    labels: Collection[str] = ()
    annotations: Collection[str] = ()

    @property
    def label_patterns(self) -> list[re.Pattern[str]]:
        return [glob_to_regex(glob) for glob in self.labels]

    @property
    def annotation_patterns(self) -> list[re.Pattern[str]]:
        return [glob_to_regex(glob) for glob in self.annotations]


@dataclasses.dataclass
class ManifestsSettings:

    agent_image: str = 'public.ecr.aws/cloudwatch-agent/cloudwatch-agent:latest'
    """
    The agent's image when the custom resource does not specify one.
    """

    default_version: str = 'latest'
    """
    The version to report in the status when the image has no tag.
    """

    config_mount_path: str = '/etc/cwagentconfig'
    windows_config_mount_path: str = 'C:\\Program Files\\Amazon\\AmazonCloudWatchAgent\\cwagentconfig'
    """
    Where the agent's ConfigMap is mounted into the container: generally,
    and for the pods selected to Windows nodes.
    """


@dataclasses.dataclass
class OperatorSettings:
    networking: NetworkingSettings = dataclasses.field(default_factory=NetworkingSettings)
    reconciling: ReconcilingSettings = dataclasses.field(default_factory=ReconcilingSettings)
    posting: PostingSettings = dataclasses.field(default_factory=PostingSettings)
    filtering: FilteringSettings = dataclasses.field(default_factory=FilteringSettings)
    manifests: ManifestsSettings = dataclasses.field(default_factory=ManifestsSettings)


def glob_to_regex(glob: str) -> re.Pattern[str]:
    """
    Convert a filtering glob to an anchored regexp: ``*`` becomes ``.*``.
    """
    parts = [re.escape(part) for part in glob.split('*')]
    return re.compile('^' + '.*'.join(parts) + '$')
