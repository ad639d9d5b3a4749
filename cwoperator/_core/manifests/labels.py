"""
Labels & annotations of the generated objects.

The selector labels identify the objects of one custom resource; without
the component label, they identify all the objects the operator owns for it,
which is used for the garbage collection of the objects no longer desired.
"""
import hashlib
import re
from collections.abc import Collection

from cwoperator._cogs.helpers import naming
from cwoperator._cogs.structs import specs

MANAGED_BY = 'amazon-cloudwatch-agent-operator'
PART_OF = 'amazon-cloudwatch-agent'
COMPONENT = 'amazon-cloudwatch-agent'

CONFIG_HASH_ANNOTATION = 'amazon-cloudwatch-agent-operator-config/sha256'


def is_filtered(key: str, patterns: Collection[re.Pattern[str]]) -> bool:
    return any(pattern.match(key) for pattern in patterns)


def owned_labels(agent: specs.Agent) -> dict[str, str]:
    """ The labels of all the objects of the custom resource, of all components. """
    return {
        'app.kubernetes.io/managed-by': MANAGED_BY,
        'app.kubernetes.io/instance': naming.truncate('%s.%s', naming.DNS_LABEL_MAX_LENGTH,
                                                      agent.namespace, agent.name),
        'app.kubernetes.io/part-of': PART_OF,
    }


def selector_labels(agent: specs.Agent, component: str = COMPONENT) -> dict[str, str]:
    return dict(sorted((owned_labels(agent) | {'app.kubernetes.io/component': component}).items()))


def version_from_image(image: str) -> str:
    """
    The version label of the image: its tag, or the digest-prefixed part.

    E.g.: ``repo/agent:1.300`` is ``1.300``; ``repo/agent:1.300@sha256:abc``
    is ``1.300``; an image without a tag is ``latest``.
    """
    parts = image.split(':')
    match len(parts):
        case 3:
            tagged = [part for part in parts if part.endswith('@sha256')]
            return tagged[-1].removesuffix('@sha256') if tagged else ''
        case 2:
            return naming.truncate('%s', naming.DNS_LABEL_MAX_LENGTH, parts[-1])
        case _:
            return 'latest'


def labels(
        agent: specs.Agent,
        name: str,
        *,
        image: str = '',
        patterns: Collection[re.Pattern[str]] = (),
) -> dict[str, str]:
    """
    The labels of an object: the custom resource's ones, and the selector ones.

    The custom resource's labels matching the filtering patterns are not propagated.
    """
    result = {key: val for key, val in agent.labels.items() if not is_filtered(key, patterns)}
    result.update(selector_labels(agent))
    if image:
        result['app.kubernetes.io/version'] = version_from_image(image)
    result.setdefault('app.kubernetes.io/name', name)
    return dict(sorted(result.items()))


def config_hash(config: str) -> str:
    return hashlib.sha256(config.encode('utf-8')).hexdigest()


def annotations(
        agent: specs.Agent,
        *,
        patterns: Collection[re.Pattern[str]] = (),
) -> dict[str, str]:
    """
    The annotations of an object, with the hash of the agent's config.

    The hash changes the pod template on every config change, so that
    the pods are restarted to pick up the new config.
    """
    result = {key: val for key, val in agent.annotations.items() if not is_filtered(key, patterns)}
    result[CONFIG_HASH_ANNOTATION] = config_hash(agent.spec.config)
    return dict(sorted(result.items()))


def pod_annotations(
        agent: specs.Agent,
        *,
        patterns: Collection[re.Pattern[str]] = (),
) -> dict[str, str]:
    result: dict[str, str] = dict(agent.spec.pod_annotations)
    result.update(annotations(agent, patterns=patterns))
    return dict(sorted(result.items()))
