"""
All the structures coming from/to the Kubernetes API.

For strict type-checking, they are detailed to the per-field level
(e.g. `TypedDict` instead of just ``Mapping[Any, Any]``) -- as used by
the operator. The objects can have arbitrary fields at runtime,
which are not declared in the type definitions at type-checking time.

The Kubernetes-originated objects are plain dicts, as decoded from JSON.
The generated (desired) objects are plain dicts too, ready to be encoded.
"""
from collections.abc import Mapping
from typing import Any, cast

from typing_extensions import TypedDict

Labels = Mapping[str, str]
Annotations = Mapping[str, str]


class OwnerReference(TypedDict, total=False):
    controller: bool
    blockOwnerDeletion: bool
    apiVersion: str
    kind: str
    name: str
    uid: str


class RawMeta(TypedDict, total=False):
    uid: str
    name: str
    namespace: str
    labels: dict[str, str]
    annotations: dict[str, str]
    ownerReferences: list[OwnerReference]
    resourceVersion: str
    deletionTimestamp: str
    creationTimestamp: str


class RawBody(TypedDict, total=False):
    apiVersion: str
    kind: str
    metadata: RawMeta
    spec: dict[str, Any]
    status: dict[str, Any]
    data: dict[str, str]


class ObjectReference(TypedDict, total=False):
    apiVersion: str
    kind: str
    namespace: str | None
    name: str
    uid: str


def build_object_reference(
        body: Mapping[str, Any],
) -> ObjectReference:
    """
    Construct an object reference for the events.

    Keep in mind that some fields can be absent: e.g. ``namespace``
    for cluster resources, or ``uid`` for not yet created objects.
    """
    ref = dict(
        apiVersion=body.get('apiVersion'),
        kind=body.get('kind'),
        name=body.get('metadata', {}).get('name'),
        uid=body.get('metadata', {}).get('uid'),
        namespace=body.get('metadata', {}).get('namespace'),
    )
    return cast(ObjectReference, {key: val for key, val in ref.items() if val})


def build_owner_reference(
        body: Mapping[str, Any],
) -> OwnerReference:
    """
    Construct an owner reference object for the parent-children relationships.

    The structure needed to link the children objects to the current object as a parent.
    See https://kubernetes.io/docs/concepts/workloads/controllers/garbage-collection/
    """
    ref = dict(
        controller=True,
        blockOwnerDeletion=True,
        apiVersion=body.get('apiVersion'),
        kind=body.get('kind'),
        name=body.get('metadata', {}).get('name'),
        uid=body.get('metadata', {}).get('uid'),
    )
    return cast(OwnerReference, {key: val for key, val in ref.items() if val})


def append_owner_reference(
        obj: dict[str, Any],
        owner: Mapping[str, Any],
) -> None:
    """
    Add an owner reference to the object, unless it is already there (by uid).
    """
    owner_ref = build_owner_reference(owner)
    refs = obj.setdefault('metadata', {}).setdefault('ownerReferences', [])
    matching = [ref for ref in refs if ref.get('uid') == owner_ref.get('uid')]
    if not matching:
        refs.append(owner_ref)


def get_uid(body: Mapping[str, Any]) -> str | None:
    uid: str | None = body.get('metadata', {}).get('uid')
    return uid


def describe(body: Mapping[str, Any]) -> str:
    """ A short human-readable identity of an object for the logs & errors. """
    kind = body.get('kind', '?')
    name = body.get('metadata', {}).get('name', '?')
    namespace = body.get('metadata', {}).get('namespace')
    return f"{kind} {namespace}/{name}" if namespace else f"{kind} {name}"
