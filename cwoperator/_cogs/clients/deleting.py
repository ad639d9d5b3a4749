from cwoperator._cogs.clients import api, errors
from cwoperator._cogs.configs import configuration
from cwoperator._cogs.helpers import typedefs
from cwoperator._cogs.structs import references


async def delete_obj(
        *,
        settings: configuration.OperatorSettings,
        resource: references.Resource,
        namespace: references.Namespace,
        name: str,
        propagation_policy: str = 'Background',
        logger: typedefs.Logger,
) -> bool:
    """
    Delete an object; return ``False`` if it was absent already (HTTP 404).

    The dependents (e.g. the pods of a deployment) are deleted by K8s
    according to the propagation policy.
    """
    try:
        await api.delete(
            url=resource.get_url(namespace=namespace if resource.namespaced else None, name=name),
            payload={'propagationPolicy': propagation_policy},
            logger=logger,
            settings=settings,
        )
    except errors.APINotFoundError:
        return False
    return True
