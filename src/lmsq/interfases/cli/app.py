"""Command-line interface for the lmsq project."""

from __future__ import annotations

import argparse
import getpass
import logging
import sys
from collections.abc import Callable, Mapping, Sequence
from dataclasses import dataclass
from typing import Any, cast

from lmsq import __version__
from lmsq.client import (
    ApiResult,
    LemonSqueezyClient,
    build_filter,
    build_include,
    build_page,
    parse_comma_separated,
    parse_positive_int,
)
from lmsq.core.config import (
    get_api_key,
    get_api_key_source,
    mask_key,
    remove_api_key,
    save_api_key,
)
from lmsq.core.errors import ApiResponseError, InvalidUsageError, LmsqError
from lmsq.core.models import CliError, ErrorKind, OutputMode, OutputOptions
from lmsq.core.safety import mask_secrets
from lmsq.interfases.cli import documents
from lmsq.interfases.cli.resources import RESOURCES, ResourceSpec
from lmsq.output import (
    EXIT_INVALID_USAGE,
    EXIT_SUCCESS,
    classify_error,
    get_exit_code,
    output_error,
    output_list,
    output_resource,
    resolve_output_mode,
)

logger = logging.getLogger(__name__)

type ClientFactory = Callable[[str | None], LemonSqueezyClient]
type ApiCall = Callable[[LemonSqueezyClient], ApiResult]
type RenderFn = Callable[[Any], str]
type DocumentBuilder = Callable[[argparse.Namespace], dict[str, Any]]

_EPILOG = """\
Output modes:
  default           colored tables on a terminal, flat key: value when piped
  --json            clean flattened JSON
  --json-raw        full unmodified JSON:API response
  --fields a,b      only return specific attributes
  --only-ids        one ID per line (list commands)
  --count           just the total count (list commands)
  --pluck <field>   just the bare value (get commands)

Exit codes: 0 success, 1 API error, 2 invalid usage, 3 auth error, 4 network error.
"""


@dataclass(frozen=True)
class Runtime:
    """Collaborators injected into command handlers."""

    client_factory: ClientFactory
    interactive: bool


def main(
    argv: Sequence[str] | None = None,
    *,
    client_factory: ClientFactory | None = None,
    interactive: bool | None = None,
) -> int:
    """Parse *argv*, execute the requested command and return the exit code."""
    parser = _build_parser()
    args_namespace = parser.parse_args(argv)
    command = getattr(args_namespace, "command", None)
    if command is None:
        parser.print_help(sys.stderr)
        return EXIT_INVALID_USAGE

    if args_namespace.verbose:
        logging.basicConfig(
            level=logging.DEBUG,
            stream=sys.stderr,
            format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        )

    runtime = Runtime(
        client_factory=client_factory or _default_client_factory,
        interactive=sys.stdout.isatty() if interactive is None else interactive,
    )
    mode = resolve_output_mode(_output_options(args_namespace), interactive=runtime.interactive)
    try:
        return command(args_namespace, runtime)
    except KeyboardInterrupt:  # pragma: no cover - manual interruption
        _write(sys.stderr, "Aborted by user")
        return 130
    except Exception as error:
        logger.debug("Unhandled error", exc_info=error)
        return _emit_error(classify_error(error), mode)


def _default_client_factory(api_key: str | None) -> LemonSqueezyClient:
    return LemonSqueezyClient(api_key)


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="lmsq",
        description=(
            "Lemon Squeezy CLI: manage your store from the command line with "
            "output tuned for humans, pipes and AI agents."
        ),
        epilog=_EPILOG,
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("--version", action="version", version=f"lmsq {__version__}")
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Log HTTP activity to stderr.",
    )
    subparsers = parser.add_subparsers(dest="command_name")

    parents = _ParentParsers.build()
    _configure_auth(subparsers)
    _configure_user(subparsers, parents)
    for spec in RESOURCES:
        group = _configure_resource(subparsers, spec, parents)
        _configure_actions(group, spec, parents)
    _configure_licenses(subparsers, parents)

    return parser


@dataclass(frozen=True)
class _ParentParsers:
    output: argparse.ArgumentParser
    listing: argparse.ArgumentParser
    single: argparse.ArgumentParser

    @classmethod
    def build(cls) -> _ParentParsers:
        output = argparse.ArgumentParser(add_help=False)
        output.add_argument("-j", "--json", action="store_true", help="Output as flattened, clean JSON.")
        output.add_argument(
            "--json-raw",
            dest="json_raw",
            action="store_true",
            help="Output the full, unmodified API response.",
        )
        output.add_argument(
            "-f",
            "--fields",
            help="Comma-separated list of fields to include (id is always included).",
        )
        output.add_argument("--color", action="store_true", help="Force colored output.")
        output.add_argument(
            "--no-color",
            dest="no_color",
            action="store_true",
            help="Disable colored output.",
        )
        output.add_argument("--api-key", dest="api_key", help="Override the stored/env API key.")

        listing = argparse.ArgumentParser(add_help=False)
        listing.add_argument("-p", "--page", help="Page number (default: 1).")
        listing.add_argument(
            "-s",
            "--page-size",
            dest="page_size",
            help="Results per page (default: 5, max: 100).",
        )
        listing.add_argument(
            "--only-ids",
            dest="only_ids",
            action="store_true",
            help="Output only resource IDs, one per line.",
        )
        listing.add_argument(
            "--count",
            action="store_true",
            help="Output only the total count of matching resources.",
        )
        listing.add_argument("--first", action="store_true", help="Return only the first result.")

        single = argparse.ArgumentParser(add_help=False)
        single.add_argument("--pluck", help="Output only the value of a single field.")

        return cls(output=output, listing=listing, single=single)


def _configure_auth(subparsers: Any) -> None:
    auth_parser = subparsers.add_parser("auth", help="Manage API key authentication.")
    auth_subparsers = auth_parser.add_subparsers(dest="auth_command")

    login = auth_subparsers.add_parser("login", help="Validate an API key and store it locally.")
    login.set_defaults(command=_command_auth_login)
    login.add_argument("-k", "--key", help="API key to store (prompted for when omitted).")

    logout = auth_subparsers.add_parser("logout", help="Remove the stored API key.")
    logout.set_defaults(command=_command_auth_logout)

    status = auth_subparsers.add_parser("status", help="Show the key source and the authenticated user.")
    status.set_defaults(command=_command_auth_status)


def _configure_user(subparsers: Any, parents: _ParentParsers) -> None:
    parser = subparsers.add_parser(
        "user",
        help="Show the currently authenticated user.",
        parents=[parents.single, parents.output],
    )
    parser.set_defaults(command=_command_user)


def _configure_resource(subparsers: Any, spec: ResourceSpec, parents: _ParentParsers) -> Any:
    group = subparsers.add_parser(spec.command, help=spec.description)
    group_subparsers = group.add_subparsers(dest="action")

    list_parser = group_subparsers.add_parser(
        "list",
        help=f"List {spec.command}.",
        parents=[parents.listing, parents.output],
    )
    list_parser.set_defaults(command=_command_list, resource=spec)
    _add_include_option(list_parser, spec)
    for resource_filter in spec.filters:
        list_parser.add_argument(
            resource_filter.flag,
            dest=f"filter_{resource_filter.key}",
            help=resource_filter.help,
        )

    get_parser = group_subparsers.add_parser(
        "get",
        help=f"Retrieve a single {spec.label.lower()} by its ID.",
        parents=[parents.single, parents.output],
    )
    get_parser.set_defaults(command=_command_get, resource=spec)
    get_parser.add_argument("id", help=f"{spec.label} ID.")
    _add_include_option(get_parser, spec)
    return group_subparsers


def _add_include_option(parser: argparse.ArgumentParser, spec: ResourceSpec) -> None:
    if not spec.includes:
        return
    parser.add_argument(
        "-i",
        "--include",
        help=f"Comma-separated related resources to include ({', '.join(spec.includes)}).",
    )


def _configure_actions(group_subparsers: Any, spec: ResourceSpec, parents: _ParentParsers) -> None:
    configure = _ACTION_CONFIGURERS.get(spec.command)
    if configure is not None:
        configure(group_subparsers, spec, parents)


def _configure_order_actions(group_subparsers: Any, spec: ResourceSpec, parents: _ParentParsers) -> None:
    _add_refund_parser(group_subparsers, spec, parents)
    _add_invoice_parser(group_subparsers, spec, parents, "invoice")


def _configure_subscription_invoice_actions(
    group_subparsers: Any, spec: ResourceSpec, parents: _ParentParsers,
) -> None:
    _add_invoice_parser(group_subparsers, spec, parents, "generate")
    _add_refund_parser(group_subparsers, spec, parents)


def _configure_subscription_actions(group_subparsers: Any, spec: ResourceSpec, parents: _ParentParsers) -> None:
    update = _add_write_parser(
        group_subparsers,
        spec,
        parents,
        "update",
        "Change the plan, pause state, cancellation or billing of a subscription.",
        documents.subscription_document,
        method="PATCH",
    )
    update.add_argument("--variant-id", help="Switch to another variant.")
    pause = update.add_mutually_exclusive_group()
    pause.add_argument("--pause", choices=("void", "free"), help="Pause billing (void also revokes access).")
    _add_switch(pause, "--unpause", help_text="Resume a paused subscription.")
    update.add_argument("--pause-resumes-at", help="When a paused subscription resumes (ISO 8601).")
    cancellation = update.add_mutually_exclusive_group()
    _add_switch(cancellation, "--cancelled", help_text="Cancel at the end of the billing period.")
    _add_switch(
        cancellation, "--uncancelled", dest="cancelled", value=False, help_text="Undo a pending cancellation.",
    )
    update.add_argument("--trial-ends-at", help="End of the trial period (ISO 8601).")
    update.add_argument("--billing-anchor", help="Day of the month to bill on (1-31, 0 removes the anchor).")
    _add_switch(update, "--invoice-immediately", help_text="Invoice a plan change immediately.")
    _add_switch(update, "--disable-prorations", help_text="Skip prorated charges for a plan change.")

    _add_action_parser(
        group_subparsers,
        spec,
        parents,
        "cancel",
        "Cancel a subscription.",
        command=_command_simple_action,
        method="DELETE",
        success="Subscription {id} cancelled successfully.",
    )


def _configure_subscription_item_actions(
    group_subparsers: Any, spec: ResourceSpec, parents: _ParentParsers,
) -> None:
    update = _add_write_parser(
        group_subparsers,
        spec,
        parents,
        "update",
        "Change the quantity of a subscription item.",
        documents.subscription_item_document,
        method="PATCH",
    )
    update.add_argument("--quantity", required=True, help="New quantity.")
    update.add_argument("--invoice-immediately", choices=_BOOLEAN_CHOICES, help="Invoice the change immediately.")
    update.add_argument("--disable-prorations", choices=_BOOLEAN_CHOICES, help="Skip prorated charges.")

    _add_action_parser(
        group_subparsers,
        spec,
        parents,
        "usage",
        "Show the usage of a metered subscription item in the current billing period.",
        command=_command_item_usage,
    )


def _configure_usage_record_actions(group_subparsers: Any, spec: ResourceSpec, parents: _ParentParsers) -> None:
    create = _add_write_parser(
        group_subparsers,
        spec,
        parents,
        "create",
        "Record usage for a metered subscription item.",
        documents.usage_record_document,
        method="POST",
    )
    create.add_argument("--subscription-item-id", required=True, help="Subscription item the usage belongs to.")
    create.add_argument("--quantity", required=True, help="Usage quantity.")
    create.add_argument(
        "--action",
        dest="usage_action",
        choices=("increment", "set"),
        default="increment",
        help="Add to the current usage (increment) or replace it (set).",
    )


def _configure_customer_actions(group_subparsers: Any, spec: ResourceSpec, parents: _ParentParsers) -> None:
    create = _add_write_parser(
        group_subparsers,
        spec,
        parents,
        "create",
        "Create a customer in a store.",
        documents.customer_document,
        method="POST",
    )
    create.add_argument("--store-id", required=True, help="Store to create the customer in.")
    create.add_argument("--name", required=True, help="Full name of the customer.")
    create.add_argument("--email", required=True, help="Email address of the customer.")
    _add_options(create, _CUSTOMER_LOCATION_OPTIONS)

    update = _add_write_parser(
        group_subparsers,
        spec,
        parents,
        "update",
        "Update a customer.",
        documents.customer_document,
        method="PATCH",
    )
    _add_options(update, (("name", "Full name."), ("email", "Email address."), *_CUSTOMER_LOCATION_OPTIONS))

    _add_write_parser(
        group_subparsers,
        spec,
        parents,
        "archive",
        "Archive a customer.",
        documents.archived_document,
        method="PATCH",
        success="Customer {id} archived.",
    )


def _configure_discount_actions(group_subparsers: Any, spec: ResourceSpec, parents: _ParentParsers) -> None:
    create = _add_write_parser(
        group_subparsers,
        spec,
        parents,
        "create",
        "Create a discount.",
        documents.discount_document,
        method="POST",
    )
    create.add_argument("--store-id", required=True, help="Store to create the discount in.")
    create.add_argument("--name", required=True, help="Name of the discount.")
    create.add_argument("--amount", required=True, help="Percentage, or fixed amount in cents.")
    create.add_argument("--amount-type", required=True, choices=("percent", "fixed"), help="How --amount applies.")
    create.add_argument("--code", help="Code customers enter at checkout.")
    create.add_argument(
        "--is-limited-redemptions", choices=_BOOLEAN_CHOICES, help="Limit the total number of redemptions.",
    )
    create.add_argument("--max-redemptions", help="Maximum number of redemptions.")
    create.add_argument("--starts-at", help="Start date (ISO 8601).")
    create.add_argument("--expires-at", help="Expiry date (ISO 8601).")
    create.add_argument(
        "--duration", choices=("once", "repeating", "forever"), help="How long the discount applies to subscriptions.",
    )
    create.add_argument("--duration-in-months", help="Months a repeating discount lasts.")
    create.add_argument(
        "--is-limited-to-products", choices=_BOOLEAN_CHOICES, help="Limit the discount to --variant-ids.",
    )
    create.add_argument("--variant-ids", help="Comma-separated variant IDs the discount applies to.")
    create.add_argument("--test-mode", choices=_BOOLEAN_CHOICES, help="Create the discount in test mode.")

    _add_delete_parser(group_subparsers, spec, parents)


def _configure_license_key_actions(group_subparsers: Any, spec: ResourceSpec, parents: _ParentParsers) -> None:
    update = _add_write_parser(
        group_subparsers,
        spec,
        parents,
        "update",
        "Update the activation limit, expiry or disabled state of a license key.",
        documents.license_key_document,
        method="PATCH",
    )
    update.add_argument("--activation-limit", help='Maximum number of activations, or "unlimited".')
    update.add_argument("--expires-at", help='Expiry date (ISO 8601), or "never".')
    state = update.add_mutually_exclusive_group()
    state.add_argument("--disabled", choices=_BOOLEAN_CHOICES, help="Disable the license key.")
    state.add_argument("--enabled", choices=_BOOLEAN_CHOICES, help="Enable the license key.")


def _configure_checkout_actions(group_subparsers: Any, spec: ResourceSpec, parents: _ParentParsers) -> None:
    create = _add_write_parser(
        group_subparsers,
        spec,
        parents,
        "create",
        "Create a checkout URL for a variant.",
        documents.checkout_document,
        method="POST",
    )
    create.add_argument("--store-id", required=True, help="Store the checkout belongs to.")
    create.add_argument("--variant-id", required=True, help="Variant being sold.")
    create.add_argument("--custom-price", help="Custom price in cents.")
    for flag, _, help_text in documents.CHECKOUT_PRODUCT_OPTIONS:
        create.add_argument(f"--{flag}", help=help_text)
    create.add_argument("--product-media", help="Comma-separated image URLs for the product media.")
    create.add_argument("--enabled-variants", help="Comma-separated variant IDs offered on the checkout.")
    for flag, attribute, value, help_text in documents.CHECKOUT_SWITCHES:
        _add_switch(create, flag, dest=f"checkout_{attribute}", value=value, help_text=help_text)
    create.add_argument("--background-color", help="Hex colour of the checkout background.")
    create.add_argument("--button-color", help="Hex colour of the checkout button.")
    _add_options(create, documents.CHECKOUT_DATA_OPTIONS)
    create.add_argument("--custom", help="Custom data as a JSON object.")
    _add_switch(create, "--preview", help_text="Include a pricing preview in the response.")
    _add_switch(create, "--test-mode", help_text="Create the checkout in test mode.")
    create.add_argument("--expires-at", help="Expiry of the checkout URL (ISO 8601).")


def _configure_webhook_actions(group_subparsers: Any, spec: ResourceSpec, parents: _ParentParsers) -> None:
    create = _add_write_parser(
        group_subparsers,
        spec,
        parents,
        "create",
        "Create a webhook.",
        documents.webhook_document,
        method="POST",
    )
    create.add_argument("--store-id", required=True, help="Store whose events are sent.")
    create.add_argument("--url", required=True, help="Endpoint receiving the events.")
    create.add_argument("--secret", required=True, help="Signing secret for request verification.")
    create.add_argument("--events", required=True, help="Comma-separated event names to subscribe to.")
    _add_switch(create, "--test-mode", help_text="Create the webhook in test mode.")

    update = _add_write_parser(
        group_subparsers,
        spec,
        parents,
        "update",
        "Update the URL, secret or events of a webhook.",
        documents.webhook_document,
        method="PATCH",
    )
    update.add_argument("--url", help="New endpoint URL.")
    update.add_argument("--secret", help="New signing secret.")
    update.add_argument("--events", help="Comma-separated event names to subscribe to.")

    _add_delete_parser(group_subparsers, spec, parents)


def _add_action_parser(
    group_subparsers: Any,
    spec: ResourceSpec,
    parents: _ParentParsers,
    name: str,
    help_text: str,
    *,
    with_id: bool = True,
    **defaults: Any,
) -> argparse.ArgumentParser:
    parser = group_subparsers.add_parser(name, help=help_text, parents=[parents.single, parents.output])
    parser.set_defaults(resource=spec, **defaults)
    if with_id:
        parser.add_argument("id", help=f"{spec.label} ID.")
    return cast("argparse.ArgumentParser", parser)


def _add_write_parser(
    group_subparsers: Any,
    spec: ResourceSpec,
    parents: _ParentParsers,
    name: str,
    help_text: str,
    build: DocumentBuilder,
    *,
    method: str,
    success: str | None = None,
) -> argparse.ArgumentParser:
    return _add_action_parser(
        group_subparsers,
        spec,
        parents,
        name,
        help_text,
        with_id=method == "PATCH",
        command=_command_write,
        method=method,
        build=build,
        success=success,
    )


def _add_refund_parser(group_subparsers: Any, spec: ResourceSpec, parents: _ParentParsers) -> None:
    refund = _add_action_parser(
        group_subparsers,
        spec,
        parents,
        "refund",
        f"Refund a {spec.label.lower()}; omit --amount for a full refund.",
        command=_command_refund,
    )
    refund.add_argument("--amount", help="Refund amount in cents.")


def _add_invoice_parser(group_subparsers: Any, spec: ResourceSpec, parents: _ParentParsers, name: str) -> None:
    invoice = _add_action_parser(
        group_subparsers,
        spec,
        parents,
        name,
        f"Generate an invoice for a {spec.label.lower()} and return its download link.",
        command=_command_invoice,
    )
    _add_options(invoice, _INVOICE_FLAGS)


def _add_delete_parser(group_subparsers: Any, spec: ResourceSpec, parents: _ParentParsers) -> None:
    _add_action_parser(
        group_subparsers,
        spec,
        parents,
        "delete",
        f"Delete a {spec.label.lower()}.",
        command=_command_simple_action,
        method="DELETE",
        success=f"{spec.label} {{id}} deleted.",
    )


def _add_options(parser: argparse.ArgumentParser, options: Sequence[tuple[str, str]]) -> None:
    for flag, help_text in options:
        parser.add_argument(f"--{flag}", dest=flag.replace("-", "_"), help=help_text)


def _add_switch(
    parser: Any,
    flag: str,
    *,
    help_text: str,
    dest: str | None = None,
    value: bool = True,
) -> None:
    # Unset switches stay None so they are left out of request documents.
    parser.add_argument(
        flag,
        dest=dest or flag.removeprefix("--").replace("-", "_"),
        action="store_const",
        const=value,
        help=help_text,
    )


_BOOLEAN_CHOICES = ("true", "false")

_CUSTOMER_LOCATION_OPTIONS: tuple[tuple[str, str], ...] = (
    ("city", "City of the customer."),
    ("country", "Two-letter ISO country code."),
    ("region", "State or region of the customer."),
)

_INVOICE_FLAGS: tuple[tuple[str, str], ...] = (
    ("name", "Customer name on the invoice."),
    ("address", "Street address on the invoice."),
    ("city", "City on the invoice."),
    ("state", "State or region on the invoice."),
    ("zip-code", "ZIP / postal code on the invoice."),
    ("country", "Two-letter ISO country code on the invoice."),
    ("notes", "Custom notes appended to the invoice."),
    ("locale", "Invoice language code."),
)

_ACTION_CONFIGURERS: dict[str, Callable[[Any, ResourceSpec, _ParentParsers], None]] = {
    "checkouts": _configure_checkout_actions,
    "customers": _configure_customer_actions,
    "discounts": _configure_discount_actions,
    "license-keys": _configure_license_key_actions,
    "orders": _configure_order_actions,
    "subscription-invoices": _configure_subscription_invoice_actions,
    "subscription-items": _configure_subscription_item_actions,
    "subscriptions": _configure_subscription_actions,
    "usage-records": _configure_usage_record_actions,
    "webhooks": _configure_webhook_actions,
}




def _configure_licenses(subparsers: Any, parents: _ParentParsers) -> None:
    licenses = subparsers.add_parser(
        "licenses",
        help="Activate, validate and deactivate license keys (public API, no API key needed).",
    )
    license_subparsers = licenses.add_subparsers(dest="license_command")
    action_parents = [parents.single, parents.output]

    activate = license_subparsers.add_parser(
        "activate", help="Activate a license key for a new instance.", parents=action_parents,
    )
    activate.set_defaults(command=_command_license, endpoint="activate", status_field="activated")
    activate.add_argument("--key", required=True, help="License key to activate.")
    activate.add_argument(
        "--instance-name", dest="instance_name", required=True, help="Label for the new instance.",
    )

    validate = license_subparsers.add_parser(
        "validate", help="Validate a license key or one of its instances.", parents=action_parents,
    )
    validate.set_defaults(command=_command_license, endpoint="validate", status_field="valid")
    validate.add_argument("--key", required=True, help="License key to validate.")
    validate.add_argument("--instance-id", dest="instance_id", help="Instance ID to validate.")

    deactivate = license_subparsers.add_parser(
        "deactivate", help="Deactivate a license key instance.", parents=action_parents,
    )
    deactivate.set_defaults(command=_command_license, endpoint="deactivate", status_field="deactivated")
    deactivate.add_argument("--key", required=True, help="License key to deactivate.")
    deactivate.add_argument(
        "--instance-id", dest="instance_id", required=True, help="Instance ID to deactivate.",
    )


def _command_list(args: argparse.Namespace, runtime: Runtime) -> int:
    spec = cast("ResourceSpec", args.resource)
    options = _output_options(args)
    mode = resolve_output_mode(options, interactive=runtime.interactive)

    def _call(client: LemonSqueezyClient) -> ApiResult:
        params: dict[str, str | int | None] = {}
        params.update(build_page(args.page, args.page_size, first=options.first).to_params())
        filter_values = {
            resource_filter.key: getattr(args, f"filter_{resource_filter.key}", None)
            for resource_filter in spec.filters
        }
        params.update(build_filter(filter_values))
        params["include"] = build_include(getattr(args, "include", None), spec.includes)
        return client.get(spec.path, params=params)

    return _execute(
        args,
        runtime,
        mode,
        _call,
        lambda data: output_list(data, mode, spec.columns, options),
    )


def _command_get(args: argparse.Namespace, runtime: Runtime) -> int:
    spec = cast("ResourceSpec", args.resource)
    options = _output_options(args)
    mode = resolve_output_mode(options, interactive=runtime.interactive)

    def _call(client: LemonSqueezyClient) -> ApiResult:
        include = build_include(getattr(args, "include", None), spec.includes)
        return client.get(f"{spec.path}/{args.id}", params={"include": include})

    return _execute(
        args,
        runtime,
        mode,
        _call,
        lambda data: output_resource(data, mode, spec.label, options),
    )


def _command_user(args: argparse.Namespace, runtime: Runtime) -> int:
    options = _output_options(args)
    mode = resolve_output_mode(options, interactive=runtime.interactive)
    return _execute(
        args,
        runtime,
        mode,
        lambda client: client.get("/users/me"),
        lambda data: output_resource(data, mode, "User", options),
    )


def _command_simple_action(args: argparse.Namespace, runtime: Runtime) -> int:
    spec = cast("ResourceSpec", args.resource)
    options = _output_options(args)
    mode = resolve_output_mode(options, interactive=runtime.interactive)
    path = f"{spec.path}/{args.id}"
    return _execute(
        args,
        runtime,
        mode,
        lambda client: client.request(args.method, path),
        lambda data: output_resource(data, mode, spec.label, options),
        success_message=args.success.format(id=args.id),
    )


def _command_write(args: argparse.Namespace, runtime: Runtime) -> int:
    """Create (``POST``) or update (``PATCH``) a resource from a JSON:API document."""
    spec = cast("ResourceSpec", args.resource)
    options = _output_options(args)
    mode = resolve_output_mode(options, interactive=runtime.interactive)
    build = cast("DocumentBuilder", args.build)
    path = f"{spec.path}/{args.id}" if args.method == "PATCH" else spec.path

    def _call(client: LemonSqueezyClient) -> ApiResult:
        body = build(args)
        if args.method == "PATCH" and not body["data"]["attributes"]:
            message = f"Nothing to update: pass at least one option to change the {spec.label.lower()}."
            raise InvalidUsageError(message)
        return client.request(args.method, path, body=body)

    success = cast("str | None", args.success)
    return _execute(
        args,
        runtime,
        mode,
        _call,
        lambda data: output_resource(data, mode, spec.label, options),
        success_message=success.format(id=getattr(args, "id", "")) if success else None,
    )


def _command_refund(args: argparse.Namespace, runtime: Runtime) -> int:
    spec = cast("ResourceSpec", args.resource)
    options = _output_options(args)
    mode = resolve_output_mode(options, interactive=runtime.interactive)

    def _call(client: LemonSqueezyClient) -> ApiResult:
        body: dict[str, Any] | None = None
        if args.amount:
            amount = parse_positive_int(args.amount, option="--amount")
            body = {"data": {"type": spec.command, "id": str(args.id), "attributes": {"amount": amount}}}
        return client.post(f"{spec.path}/{args.id}/refund", body=body)

    success = None if args.amount else f"{spec.label} {args.id} fully refunded."
    return _execute(
        args,
        runtime,
        mode,
        _call,
        lambda data: output_resource(data, mode, spec.label, options),
        success_message=success,
    )


def _command_invoice(args: argparse.Namespace, runtime: Runtime) -> int:
    spec = cast("ResourceSpec", args.resource)
    options = _output_options(args)
    mode = resolve_output_mode(options, interactive=runtime.interactive)
    params = {flag: getattr(args, flag.replace("-", "_"), None) for flag, _ in _INVOICE_FLAGS}

    def _render(data: Any) -> str:
        if mode is OutputMode.JSON_RAW:
            return output_resource(data, mode, "Invoice", options)
        envelope = _meta_envelope("invoices", args.id, data, member="urls")
        return output_resource(envelope, mode, "Invoice", options)

    return _execute(
        args,
        runtime,
        mode,
        lambda client: client.post(f"{spec.path}/{args.id}/generate-invoice", params=params),
        _render,
    )


def _command_item_usage(args: argparse.Namespace, runtime: Runtime) -> int:
    spec = cast("ResourceSpec", args.resource)
    options = _output_options(args)
    mode = resolve_output_mode(options, interactive=runtime.interactive)

    def _render(data: Any) -> str:
        if mode is OutputMode.JSON_RAW:
            return output_resource(data, mode, "Usage", options)
        return output_resource(_meta_envelope("usage", args.id, data), mode, "Usage", options)

    return _execute(
        args,
        runtime,
        mode,
        lambda client: client.get(f"{spec.path}/{args.id}/current-usage"),
        _render,
    )


def _command_license(args: argparse.Namespace, runtime: Runtime) -> int:
    options = _output_options(args)
    mode = resolve_output_mode(options, interactive=runtime.interactive)
    form = {"license_key": args.key}
    instance_name = getattr(args, "instance_name", None)
    instance_id = getattr(args, "instance_id", None)
    if instance_name:
        form["instance_name"] = instance_name
    if instance_id:
        form["instance_id"] = instance_id

    def _render(data: Any) -> str:
        if mode is OutputMode.JSON_RAW:
            return output_resource(data, mode, "License", options)
        return output_resource(_license_envelope(data, args.status_field), mode, "License", options)

    return _execute(
        args,
        runtime,
        mode,
        lambda client: client.post_form(f"/licenses/{args.endpoint}", form),
        _render,
        authenticated=False,
    )


def _command_auth_login(args: argparse.Namespace, runtime: Runtime) -> int:
    api_key = args.key or getpass.getpass("Enter your Lemon Squeezy API key: ").strip()
    if not api_key:
        message = "No API key provided. Aborting."
        return _emit_error(CliError(error=ErrorKind.AUTH_ERROR, message=message), OutputMode.TEXT)

    try:
        with runtime.client_factory(api_key) as client:
            result = client.get("/users/me")
    except LmsqError as error:
        return _emit_error(classify_error(error), OutputMode.TEXT)

    if result.error is not None:
        cli_error = CliError(
            error=ErrorKind.AUTH_ERROR,
            message=f"Authentication failed: {result.error.message}",
            status=result.error.status,
        )
        return _emit_error(cli_error, OutputMode.TEXT)

    config_path = save_api_key(api_key)
    name = _user_attribute(result.data, "name") or "Unknown"
    _write(sys.stdout, f"Authenticated as {name}. API key saved to {config_path}")
    return EXIT_SUCCESS


def _command_auth_logout(args: argparse.Namespace, runtime: Runtime) -> int:
    del args, runtime
    config_path = remove_api_key()
    _write(sys.stdout, f"API key removed from {config_path}")
    return EXIT_SUCCESS


def _command_auth_status(args: argparse.Namespace, runtime: Runtime) -> int:
    del args
    try:
        api_key = get_api_key()
    except LmsqError:
        _write(sys.stdout, "Not authenticated. Run `lmsq auth login`.")
        return EXIT_SUCCESS

    _write(sys.stdout, f"API key source: {get_api_key_source()}")
    _write(sys.stdout, f"API key:        {mask_key(api_key)}")

    try:
        with runtime.client_factory(api_key) as client:
            result = client.get("/users/me")
    except LmsqError as error:
        _write(sys.stderr, f"Could not fetch user info: {mask_secrets(str(error))}")
        return EXIT_SUCCESS

    if result.error is not None:
        _write(sys.stderr, f"Could not fetch user info: {result.error.message}")
        return EXIT_SUCCESS

    _write(sys.stdout, f"Name:           {_user_attribute(result.data, 'name') or 'N/A'}")
    _write(sys.stdout, f"Email:          {_user_attribute(result.data, 'email') or 'N/A'}")
    return EXIT_SUCCESS


def _execute(
    args: argparse.Namespace,
    runtime: Runtime,
    mode: OutputMode,
    call: ApiCall,
    render: RenderFn,
    *,
    success_message: str | None = None,
    authenticated: bool = True,
) -> int:
    """Run one API call and write its rendering or its classified error."""
    try:
        api_key = get_api_key(getattr(args, "api_key", None)) if authenticated else None
        with runtime.client_factory(api_key) as client:
            result = call(client)

        if result.error is not None:
            raise ApiResponseError(result.error.message, status=result.error.status)

        if result.data is None:
            if success_message:
                _write(sys.stdout, success_message)
            return EXIT_SUCCESS

        _write(sys.stdout, render(result.data))
    except LmsqError as error:
        logger.debug("Command failed", exc_info=error)
        return _emit_error(classify_error(error), mode)
    return EXIT_SUCCESS


def _output_options(args: argparse.Namespace) -> OutputOptions:
    raw_fields = getattr(args, "fields", None)
    fields = tuple(parse_comma_separated(raw_fields)) if raw_fields else None
    return OutputOptions(
        json=bool(getattr(args, "json", False)),
        json_raw=bool(getattr(args, "json_raw", False)),
        fields=fields or None,
        only_ids=bool(getattr(args, "only_ids", False)),
        count=bool(getattr(args, "count", False)),
        first=bool(getattr(args, "first", False)),
        pluck=getattr(args, "pluck", None),
        color=bool(getattr(args, "color", False)),
        no_color=bool(getattr(args, "no_color", False)),
    )


def _meta_envelope(
    resource_type: str, resource_id: str, data: Any, *, member: str | None = None,
) -> dict[str, Any]:
    """Wrap the ``meta`` block (or one member of it) of a non-resource answer."""
    block: Any = cast("Mapping[str, Any]", data).get("meta") if isinstance(data, Mapping) else None
    if member is not None and isinstance(block, Mapping):
        block = cast("Mapping[str, Any]", block).get(member)
    attributes = dict(cast("Mapping[str, Any]", block)) if isinstance(block, Mapping) else {}
    return {"data": {"type": resource_type, "id": str(resource_id), "attributes": attributes}}


def _license_envelope(data: Any, status_field: str) -> dict[str, Any]:
    payload = cast("Mapping[str, Any]", data) if isinstance(data, Mapping) else {}
    flat: dict[str, Any] = {status_field: payload.get(status_field)}
    if payload.get("error") is not None:
        flat["error"] = payload["error"]

    license_key = payload.get("license_key")
    license_id: Any = ""
    if isinstance(license_key, Mapping):
        key_data = cast("Mapping[str, Any]", license_key)
        license_id = key_data.get("id", "")
        flat["license_key_id"] = key_data.get("id")
        flat["license_key_status"] = key_data.get("status")
        flat["license_key"] = key_data.get("key")
        flat["activation_limit"] = key_data.get("activation_limit")
        flat["activation_usage"] = key_data.get("activation_usage")
        flat["license_key_expires_at"] = key_data.get("expires_at")

    instance = payload.get("instance")
    if isinstance(instance, Mapping):
        instance_data = cast("Mapping[str, Any]", instance)
        flat["instance_id"] = instance_data.get("id")
        flat["instance_name"] = instance_data.get("name")
        flat["instance_created_at"] = instance_data.get("created_at")

    meta = payload.get("meta")
    if isinstance(meta, Mapping):
        meta_data = cast("Mapping[str, Any]", meta)
        for key in (
            "store_id", "product_id", "product_name", "variant_id", "variant_name",
            "customer_id", "customer_name", "customer_email",
        ):
            flat[key] = meta_data.get(key)

    return {"data": {"type": "licenses", "id": str(license_id), "attributes": flat}}


def _user_attribute(data: Any, name: str) -> Any:
    if not isinstance(data, Mapping):
        return None
    resource = cast("Mapping[str, Any]", data).get("data")
    if not isinstance(resource, Mapping):
        return None
    attributes = cast("Mapping[str, Any]", resource).get("attributes")
    if not isinstance(attributes, Mapping):
        return None
    return cast("Mapping[str, Any]", attributes).get(name)


def _emit_error(error: CliError, mode: OutputMode) -> int:
    _write(sys.stderr, output_error(error, mode))
    return get_exit_code(error)


def _write(stream: Any, text: str) -> None:
    stream.write(text + "\n")
    stream.flush()


__all__ = ["Runtime", "main"]
