"""
The merge of the desired objects into the existing ones.

Only the fields generated by the builders are managed: the top-level sections
(``spec``, ``data``, etc.), and the labels, annotations, owner references.
Everything else (the status, other metadata, the foreign labels & annotations)
is kept from the existing object as is.

Some fields cannot be changed once the object is created. If they are empty
in the desired object, they are taken from the existing object (e.g. the cluster
IPs allocated by K8s). If they are set but differ, the object must be re-created.
"""
import copy
import dataclasses
import enum
from collections.abc import Mapping, Sequence
from typing import Any

from cwoperator._cogs.structs import bodies

FieldPath = tuple[str, ...]

IMMUTABLE_FIELDS: Mapping[str, Sequence[FieldPath]] = {
    'Service': (
        ('spec', 'clusterIP'),
        ('spec', 'clusterIPs'),
    ),
    'Deployment': (
        ('spec', 'selector'),
    ),
    'DaemonSet': (
        ('spec', 'selector'),
    ),
    'StatefulSet': (
        ('spec', 'selector'),
        ('spec', 'serviceName'),
        ('spec', 'podManagementPolicy'),
        ('spec', 'volumeClaimTemplates'),
    ),
}

MANAGED_META_MAPS = ('labels', 'annotations')
UNMANAGED_SECTIONS = ('metadata', 'status')


class MutationResult(enum.Enum):
    CREATED = 'created'
    UPDATED = 'updated'
    UNCHANGED = 'unchanged'
    IMMUTABLE_CONFLICT = 'immutable-conflict'
    FAILED = 'failed'


@dataclasses.dataclass(frozen=True)
class Mutation:
    result: MutationResult
    body: dict[str, Any] | None = None
    conflicts: Sequence[str] = ()


def _get(obj: Mapping[str, Any], path: FieldPath) -> Any:
    value: Any = obj
    for key in path:
        if not isinstance(value, Mapping):
            return None
        value = value.get(key)
    return value


def _set(obj: dict[str, Any], path: FieldPath, value: Any) -> None:
    for key in path[:-1]:
        obj = obj.setdefault(key, {})
    obj[path[-1]] = value


def _is_empty(value: Any) -> bool:
    return value is None or value == '' or value == [] or value == {}


def is_subset(desired: Any, existing: Any) -> bool:
    """
    Check if all the desired values are in the existing object.

    The existing objects have extra fields defaulted by K8s
    (e.g. ``protocol``, ``terminationMessagePath``), which must not count
    as differences. The lists must match in length and element by element.
    The empty desired values match the absent keys: K8s omits them on storing.
    """
    if isinstance(desired, Mapping):
        return isinstance(existing, Mapping) and all(
            is_subset(val, existing[key]) if key in existing else _is_empty(val)
            for key, val in desired.items()
        )
    elif isinstance(desired, list):
        return (isinstance(existing, list) and len(desired) == len(existing) and
                all(is_subset(d, e) for d, e in zip(desired, existing)))
    else:
        return bool(desired == existing)


def merge(
        desired: Mapping[str, Any],
        existing: Mapping[str, Any],
) -> tuple[dict[str, Any], list[str]]:
    """
    Merge the desired object into the existing one; return it with the conflicts.

    The conflicts are the dotted paths of the immutable fields that differ.
    """
    merged: dict[str, Any] = copy.deepcopy(dict(existing))
    for key, val in desired.items():
        if key not in UNMANAGED_SECTIONS:
            merged[key] = copy.deepcopy(val)

    desired_meta = desired.get('metadata', {})
    merged_meta = merged.setdefault('metadata', {})
    for key in MANAGED_META_MAPS:
        if key in desired_meta:
            merged_meta[key] = dict(merged_meta.get(key) or {}) | dict(desired_meta[key])
    for owner_ref in desired_meta.get('ownerReferences', []):
        refs = merged_meta.setdefault('ownerReferences', [])
        if not any(ref.get('uid') == owner_ref.get('uid') for ref in refs):
            refs.append(copy.deepcopy(owner_ref))

    conflicts: list[str] = []
    for path in IMMUTABLE_FIELDS.get(desired.get('kind', ''), ()):
        wanted = _get(desired, path)
        current = _get(existing, path)
        if _is_empty(wanted):
            if not _is_empty(current):
                _set(merged, path, copy.deepcopy(current))
        elif not _is_empty(current) and wanted != current:
            conflicts.append('.'.join(path))

    return merged, conflicts


def mutate(
        desired: Mapping[str, Any],
        existing: Mapping[str, Any] | None,
) -> Mutation:
    """
    Decide what to do with the object, and prepare its new body if needed.
    """
    if existing is None:
        return Mutation(MutationResult.CREATED, body=copy.deepcopy(dict(desired)))

    merged, conflicts = merge(desired, existing)
    if conflicts:
        return Mutation(MutationResult.IMMUTABLE_CONFLICT, conflicts=conflicts)

    if is_subset(merged, existing):
        return Mutation(MutationResult.UNCHANGED, body=dict(existing))

    # The existing resourceVersion is kept in the merged metadata: the write fails
    # with a conflict if the object was changed by others since it was read.
    return Mutation(MutationResult.UPDATED, body=merged)


def describe_conflicts(body: Mapping[str, Any], conflicts: Sequence[str]) -> str:
    return f"{bodies.describe(body)} has changed immutable fields: {', '.join(conflicts)}"
