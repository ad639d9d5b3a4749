import dataclasses
import urllib.parse
from collections.abc import Iterable, Mapping
from typing import NewType

# A specific really existing addressable namespace (at least, the one assumed to be so).
# Made as a NewType for stricter type-checking to avoid collisions with other strings.
NamespaceName = NewType('NamespaceName', str)

# A namespace reference usable in the API calls. `None` means cluster-wide API calls.
Namespace = NamespaceName | None


@dataclasses.dataclass(frozen=True, eq=False, repr=False)
class Resource:
    """
    A reference to a very specific custom or built-in resource kind.

    It is used to form the K8s API URLs. Generally, K8s API only needs
    an API group, an API version, and a plural name of the resource.
    The kind is remembered to match the generated objects to their resources.
    """

    group: str
    """
    The resource's API group; e.g. ``"apps"``, ``"networking.k8s.io"``.
    For Core v1 API resources, an empty string: ``""``.
    """

    version: str
    """
    The resource's API version; e.g. ``"v1"``, ``"v1alpha1"``, etc.
    """

    plural: str
    """
    The resource's plural name; e.g. ``"services"``, ``"deployments"``.
    It is used as an API endpoint, together with API group & version.
    """

    kind: str
    """
    The resource's kind (as in YAML files); e.g. ``"Service"``, ``"Deployment"``.
    """

    subresources: frozenset[str] = frozenset()
    """
    The resource's subresources, if defined; e.g. ``{"status", "scale"}``.
    """

    namespaced: bool = True
    """
    Whether the resource is namespaced (``True``) or cluster-scoped (``False``).
    """

    def __hash__(self) -> int:
        return hash((self.group, self.version, self.plural))

    def __eq__(self, other: object) -> bool:
        if isinstance(other, Resource):
            self_tuple = (self.group, self.version, self.plural)
            other_tuple = (other.group, other.version, other.plural)
            return self_tuple == other_tuple
        else:
            return NotImplemented

    def __repr__(self) -> str:
        return f'{self.plural}.{self.version}.{self.group}'.strip('.')

    @property
    def api_version(self) -> str:
        return f'{self.group}/{self.version}' if self.group else self.version

    def get_url(
            self,
            *,
            server: str | None = None,
            namespace: Namespace = None,
            name: str | None = None,
            subresource: str | None = None,
            params: Mapping[str, str] | None = None,
    ) -> str:
        """
        Build a URL to be used with K8s API.

        If the namespace is not set, a cluster-wide URL is returned.
        For cluster-scoped resources, the namespace is ignored.

        If the name is not set, the URL for the resource list is returned.
        Otherwise (if set), the URL for the individual resource is returned.

        If subresource is set, that subresource's URL is returned,
        regardless of whether such a subresource is known or not.

        Params go to the query parameters (``?param1=value1&param2=value2...``).
        """
        if subresource is not None and name is None:
            raise ValueError("Subresources can be used only with specific resources by their name.")
        if not self.namespaced and namespace is not None:
            raise ValueError("Specific namespaces are not supported for cluster-scoped resources.")
        if self.namespaced and namespace is None and name is not None:
            raise ValueError("Specific namespaces are required for specific namespaced resources.")

        parts: list[str | None] = [
            '/api' if self.group == '' and self.version == 'v1' else '/apis',
            self.group,
            self.version,
            'namespaces' if self.namespaced and namespace is not None else None,
            namespace if self.namespaced and namespace is not None else None,
            self.plural,
            name,
            subresource,
        ]

        query = urllib.parse.urlencode(params, encoding='utf-8') if params else ''
        path = '/'.join([part for part in parts if part])
        url = path + ('?' if query else '') + query
        return url if server is None else server.rstrip('/') + '/' + url.lstrip('/')


AGENTS = Resource('cloudwatch.aws.amazon.com', 'v1alpha1', 'amazoncloudwatchagents',
                  kind='AmazonCloudWatchAgent', subresources=frozenset({'status', 'scale'}))
EVENTS = Resource('', 'v1', 'events', kind='Event')

CONFIGMAPS = Resource('', 'v1', 'configmaps', kind='ConfigMap')
SERVICES = Resource('', 'v1', 'services', kind='Service')
SERVICEACCOUNTS = Resource('', 'v1', 'serviceaccounts', kind='ServiceAccount')
DEPLOYMENTS = Resource('apps', 'v1', 'deployments', kind='Deployment')
STATEFULSETS = Resource('apps', 'v1', 'statefulsets', kind='StatefulSet')
DAEMONSETS = Resource('apps', 'v1', 'daemonsets', kind='DaemonSet')
INGRESSES = Resource('networking.k8s.io', 'v1', 'ingresses', kind='Ingress')
ROUTES = Resource('route.openshift.io', 'v1', 'routes', kind='Route')
AUTOSCALERS = Resource('autoscaling', 'v2', 'horizontalpodautoscalers', kind='HorizontalPodAutoscaler')
DISRUPTION_BUDGETS = Resource('policy', 'v1', 'poddisruptionbudgets', kind='PodDisruptionBudget')
CLUSTER_ROLES = Resource('rbac.authorization.k8s.io', 'v1', 'clusterroles',
                         kind='ClusterRole', namespaced=False)
CLUSTER_ROLE_BINDINGS = Resource('rbac.authorization.k8s.io', 'v1', 'clusterrolebindings',
                                 kind='ClusterRoleBinding', namespaced=False)

# All kinds that can be generated, hence owned, hence pruned. The order is the pruning order.
# Routes are only served on OpenShift; they are pruned only if configured so (see settings).
OWNED_RESOURCES: tuple[Resource, ...] = (
    CONFIGMAPS,
    SERVICEACCOUNTS,
    SERVICES,
    DEPLOYMENTS,
    STATEFULSETS,
    DAEMONSETS,
    INGRESSES,
    AUTOSCALERS,
    DISRUPTION_BUDGETS,
)
KNOWN_RESOURCES: tuple[Resource, ...] = OWNED_RESOURCES + (
    ROUTES,
    CLUSTER_ROLES,
    CLUSTER_ROLE_BINDINGS,
)


def resource_for(
        body: Mapping[str, object],
        resources: Iterable[Resource] = KNOWN_RESOURCES,
) -> Resource:
    """
    Find the resource of an object by its ``apiVersion`` & ``kind``.
    """
    api_version = body.get('apiVersion')
    kind = body.get('kind')
    for resource in resources:
        if resource.api_version == api_version and resource.kind == kind:
            return resource
    raise LookupError(f"Unknown resource for apiVersion={api_version!r}, kind={kind!r}.")

