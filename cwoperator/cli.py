import asyncio
import functools
import logging
from collections.abc import Callable, Collection
from typing import Any

import click
import yaml

from cwoperator._cogs.clients import auth, fetching
from cwoperator._cogs.configs import configuration
from cwoperator._cogs.structs import credentials, references
from cwoperator._core.actions import loggers
from cwoperator._core.intents import piggybacking
from cwoperator._core.manifests import building
from cwoperator._core.reactor import processing
from cwoperator._core.reactor.errors import ReconciliationError

logger = logging.getLogger(__name__)


class LogFormatParamType(click.Choice):

    def __init__(self) -> None:
        super().__init__(choices=[v.name.lower() for v in loggers.LogFormat])

    def convert(self, value: Any, param: Any, ctx: Any) -> loggers.LogFormat:
        name: str = super().convert(value, param, ctx)
        return loggers.LogFormat[name.upper()]


def logging_options(fn: Callable[..., Any]) -> Callable[..., Any]:
    """ A decorator to configure logging in all commands the same way."""
    @click.option('-v', '--verbose', is_flag=True)
    @click.option('-d', '--debug', is_flag=True)
    @click.option('-q', '--quiet', is_flag=True)
    @click.option('--log-format', type=LogFormatParamType(), default='full')
    @click.option('--log-refkey', type=str)
    @click.option('--log-prefix/--no-log-prefix', default=None)
    @functools.wraps(fn)  # to preserve other opts/args
    def wrapper(verbose: bool, quiet: bool, debug: bool,
                log_format: loggers.LogFormat = loggers.LogFormat.FULL,
                log_prefix: bool | None = False,
                log_refkey: str | None = None,
                *args: Any, **kwargs: Any) -> Any:
        loggers.configure(debug=debug, verbose=verbose, quiet=quiet,
                          log_format=log_format, log_refkey=log_refkey, log_prefix=log_prefix)
        return fn(*args, **kwargs)

    return wrapper


def settings_options(fn: Callable[..., Any]) -> Callable[..., Any]:
    """ A decorator to build the operator's settings in all commands the same way."""
    @click.option('--label-filter', 'label_filters', multiple=True)
    @click.option('--annotation-filter', 'annotation_filters', multiple=True)
    @click.option('--agent-image', type=str)
    @click.option('--openshift-routes/--no-openshift-routes', default=False)
    @functools.wraps(fn)  # to preserve other opts/args
    def wrapper(label_filters: Collection[str],
                annotation_filters: Collection[str],
                agent_image: str | None,
                openshift_routes: bool,
                *args: Any, **kwargs: Any) -> Any:
        settings = configuration.OperatorSettings()
        settings.filtering.labels = tuple(label_filters)
        settings.filtering.annotations = tuple(annotation_filters)
        settings.reconciling.openshift_routes = openshift_routes
        if agent_image:
            settings.manifests.agent_image = agent_image
        return fn(*args, settings=settings, **kwargs)

    return wrapper


@click.version_option(prog_name='cwoperator')
@click.group(name='cwoperator', context_settings=dict(
    auto_envvar_prefix='CWOPERATOR',
))
def main() -> None:
    pass


@main.command()
@logging_options
@settings_options
@click.argument('path', type=click.Path(exists=True, dir_okay=False))
def render(
        path: str,
        settings: configuration.OperatorSettings,
) -> None:
    """ Print the desired objects of the custom resources in a YAML file. """
    with open(path, encoding='utf-8') as f:
        documents = [doc for doc in yaml.safe_load_all(f) if doc]

    objs: list[dict[str, Any]] = []
    for body in documents:
        if body.get('kind') != references.AGENTS.kind:
            logger.debug(f"Skipping a non-agent document of kind {body.get('kind')!r}.")
            continue
        objlogger = loggers.AgentLogger(body=body)
        objs.extend(building.build_agent(body, settings=settings, logger=objlogger))

    click.echo(yaml.safe_dump_all(objs, sort_keys=False), nl=False)


@main.command()
@logging_options
@settings_options
@click.option('-n', '--namespace', type=str)
@click.argument('name')
def reconcile(
        name: str,
        namespace: str | None,
        settings: configuration.OperatorSettings,
) -> None:
    """ Run one reconcile pass of a custom resource in the cluster. """
    try:
        outcome = asyncio.run(_reconcile(name=name, namespace=namespace, settings=settings))
    except (ReconciliationError, credentials.LoginError) as e:
        raise click.ClickException(str(e))
    for what, result in outcome.applied.results.items():
        click.echo(f"{what}: {result.value}")
    for body in outcome.pruned:
        click.echo(f"{body.get('kind')} {body.get('metadata', {}).get('name')}: pruned")


async def _reconcile(
        *,
        name: str,
        namespace: str | None,
        settings: configuration.OperatorSettings,
) -> processing.PassOutcome:
    info = piggybacking.login(logger=logger)
    async with auth.authenticated_context(info) as context:
        ns = references.NamespaceName(namespace or context.default_namespace or 'default')
        body = await fetching.read_obj(resource=references.AGENTS, namespace=ns, name=name,
                                       settings=settings, logger=logger)
        if body is None:
            raise click.ClickException(f"{references.AGENTS.kind} {ns}/{name} is not found.")
        objlogger = loggers.AgentLogger(body=body)
        return await processing.reconcile(body, settings=settings, logger=objlogger)
