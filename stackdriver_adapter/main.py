from __future__ import annotations

import json
import logging
from datetime import datetime
from pathlib import Path
from typing import Any, List, Optional

import pydantic as pd
import typer
from google.protobuf.json_format import ParseError

from stackdriver_adapter.core.integrations.stackdriver.exceptions import TranslatorError
from stackdriver_adapter.core.models.config import Config
from stackdriver_adapter.core.models.objects import NODES, PODS, ObjectRef, ResourceModel
from stackdriver_adapter.core.models.stackdriver import (
    parse_metric_descriptors_response,
    parse_time_series_response,
    to_query_params,
)
from stackdriver_adapter.core.translator import Translator, split_into_batches
from stackdriver_adapter.utils.clock import FixedClock
from stackdriver_adapter.utils.version import get_version

app = typer.Typer(
    pretty_exceptions_show_locals=False,
    pretty_exceptions_short=True,
    no_args_is_help=True,
    help="Build Stackdriver queries for custom metrics and translate their responses.",
)

logger = logging.getLogger("stackdriver-adapter")


@app.command(rich_help_panel="Utils")
def version() -> None:
    typer.echo(get_version())


@app.callback()
def main(
    ctx: typer.Context,
    project: Optional[str] = typer.Option(
        None,
        "--project",
        help="GCP project of the cluster. Defaults to $SD_ADAPTER_PROJECT.",
        rich_help_panel="Cluster Settings",
    ),
    cluster: Optional[str] = typer.Option(
        None,
        "--cluster",
        help="Name of the cluster. Defaults to $SD_ADAPTER_CLUSTER.",
        rich_help_panel="Cluster Settings",
    ),
    location: Optional[str] = typer.Option(
        None,
        "--location",
        help="Location of the cluster. Required unless the legacy resource model is used.",
        rich_help_panel="Cluster Settings",
    ),
    metrics_prefix: Optional[str] = typer.Option(
        None,
        "--metrics-prefix",
        help="Prefix of the exposed metric types, `custom.googleapis.com` by default.",
        rich_help_panel="Stackdriver Settings",
    ),
    resource_model: Optional[ResourceModel] = typer.Option(
        None,
        "--resource-model",
        help="The resource model the time series are written with.",
        rich_help_panel="Stackdriver Settings",
    ),
    request_window: Optional[int] = typer.Option(
        None,
        "--request-window",
        help="The window of each time series query (in whole seconds).",
        rich_help_panel="Stackdriver Settings",
    ),
    at: Optional[datetime] = typer.Option(
        None,
        "--at",
        help="End the query window at this time (UTC) instead of now.",
        rich_help_panel="Stackdriver Settings",
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable verbose mode", rich_help_panel="Logging Settings"),
    quiet: bool = typer.Option(False, "--quiet", "-q", help="Enable quiet mode", rich_help_panel="Logging Settings"),
) -> None:
    options: dict[str, Any] = {
        "project": project,
        "cluster": cluster,
        "location": location,
        "metrics_prefix": metrics_prefix,
        "resource_model": resource_model,
        "request_window": request_window,
    }
    ctx.obj = {
        "options": {key: value for key, value in options.items() if value is not None},
        "verbose": verbose,
        "quiet": quiet,
        "at": at,
    }


def _create_translator(ctx: typer.Context) -> Translator:
    try:
        config = Config(
            **ctx.obj["options"],
            verbose=ctx.obj["verbose"],
            quiet=ctx.obj["quiet"],
            # NOTE: stdout is reserved for the JSON output
            log_to_stderr=True,
        )
    except pd.ValidationError as e:
        typer.echo(str(e), err=True)
        raise typer.Exit(code=2)

    config.configure_logging()
    clock = FixedClock(ctx.obj["at"]) if ctx.obj["at"] is not None else None
    return Translator(config, clock=clock)


def _parse_pod(value: str, namespace: str) -> ObjectRef:
    # NAME or NAME=UID
    name, _, uid = value.partition("=")
    return ObjectRef.pod(name=name, namespace=namespace, uid=uid or None)


def _echo_json(data: Any) -> None:
    typer.echo(json.dumps(data, indent=2))


def _fail(e: Exception) -> typer.Exit:
    logger.error(f"{e.__class__.__name__}: {e}")
    return typer.Exit(code=1)


@app.command(rich_help_panel="Requests")
def pods(
    ctx: typer.Context,
    metric_name: str = typer.Argument(..., help="The custom metric, without the metrics prefix."),
    namespace: str = typer.Option(..., "--namespace", "-n", help="Namespace of the pods."),
    pod_list: List[str] = typer.Option(
        [], "--pod", "-p", help="Pod to query, as NAME or NAME=UID (the uid is required by the legacy model)."
    ),
) -> None:
    """Print the time series requests for a metric of the given pods, one per batch of 100 pods."""

    translator = _create_translator(ctx)
    objects = [_parse_pod(pod, namespace) for pod in pod_list]
    try:
        requests = [
            translator.get_request_for_pods(batch, metric_name, namespace)
            for batch in (split_into_batches(objects) or [[]])
        ]
    except TranslatorError as e:
        raise _fail(e)

    _echo_json([{"name": request.name, "params": to_query_params(request)} for request in requests])


@app.command(rich_help_panel="Requests")
def nodes(
    ctx: typer.Context,
    metric_name: str = typer.Argument(..., help="The custom metric, without the metrics prefix."),
    node_list: List[str] = typer.Option([], "--node", help="Node to query."),
) -> None:
    """Print the time series requests for a metric of the given nodes, one per batch of 100 nodes."""

    translator = _create_translator(ctx)
    objects = [ObjectRef.node(name) for name in node_list]
    try:
        requests = [
            translator.get_request_for_nodes(batch, metric_name) for batch in (split_into_batches(objects) or [[]])
        ]
    except TranslatorError as e:
        raise _fail(e)

    _echo_json([{"name": request.name, "params": to_query_params(request)} for request in requests])


@app.command(rich_help_panel="Requests")
def descriptors(ctx: typer.Context) -> None:
    """Print the request listing the metric descriptors exposed for the cluster."""

    translator = _create_translator(ctx)
    request = translator.list_metric_descriptors()
    _echo_json({"name": request.name, "params": to_query_params(request)})


@app.command(rich_help_panel="Responses")
def translate(
    ctx: typer.Context,
    response_file: Path = typer.Argument(..., exists=True, dir_okay=False, help="A timeSeries.list JSON response."),
    metric_name: str = typer.Argument(..., help="The custom metric, without the metrics prefix."),
    namespace: str = typer.Option("", "--namespace", "-n", help="Namespace of the pods."),
    pod_list: List[str] = typer.Option([], "--pod", "-p", help="Requested pod, as NAME or NAME=UID."),
    node_list: List[str] = typer.Option([], "--node", help="Requested node."),
) -> None:
    """Print the custom metric values a time series response holds for the requested objects."""

    if bool(pod_list) == bool(node_list):
        typer.echo("Exactly one of --pod or --node must be given", err=True)
        raise typer.Exit(code=2)

    translator = _create_translator(ctx)
    if pod_list:
        objects, group_resource = [_parse_pod(pod, namespace) for pod in pod_list], PODS
    else:
        objects, group_resource = [ObjectRef.node(name) for name in node_list], NODES

    try:
        response = parse_time_series_response(response_file.read_text())
        values = translator.get_response_for_multiple_objects(response, objects, group_resource, metric_name)
    except (TranslatorError, ParseError) as e:
        raise _fail(e)

    _echo_json([value.model_dump(mode="json", by_alias=True) for value in values])


@app.command("filter-descriptors", rich_help_panel="Responses")
def filter_descriptors(
    ctx: typer.Context,
    response_file: Path = typer.Argument(..., exists=True, dir_okay=False, help="A metricDescriptors.list JSON response."),
) -> None:
    """Print the custom metrics a metric descriptors response exposes."""

    translator = _create_translator(ctx)
    try:
        response = parse_metric_descriptors_response(response_file.read_text())
    except ParseError as e:
        raise _fail(e)

    metrics = translator.get_metrics_from_descriptors_response(response)
    _echo_json([metric.model_dump(mode="json") for metric in metrics])


def run() -> None:
    app()


if __name__ == "__main__":
    run()
