"""JSON:API request documents for the create and update commands.

Each builder receives the parsed command line and returns the ``data``
document sent to the API. Only options the user passed become attributes,
except where ``null`` is meaningful (``--unpause``, ``unlimited``, ``never``).
"""

from __future__ import annotations

import argparse
import json
from collections.abc import Mapping
from typing import Any, cast

from lmsq.client import parse_comma_separated, parse_positive_int
from lmsq.core.errors import InvalidUsageError
from lmsq.interfases.cli.resources import ResourceSpec

MAX_BILLING_ANCHOR = 31

# (flag, attribute, help)
CHECKOUT_PRODUCT_OPTIONS: tuple[tuple[str, str, str], ...] = (
    ("product-name", "name", "Custom product name."),
    ("product-description", "description", "Custom product description."),
    ("redirect-url", "redirect_url", "URL to send the buyer to after purchase."),
    ("receipt-button-text", "receipt_button_text", "Text of the receipt email button."),
    ("receipt-link-url", "receipt_link_url", "URL of the receipt email button."),
    ("receipt-thank-you-note", "receipt_thank_you_note", "Thank-you note in the receipt email."),
    ("confirmation-title", "confirmation_title", "Title of the payment success alert."),
    ("confirmation-message", "confirmation_message", "Content of the payment success alert."),
    ("confirmation-button-text", "confirmation_button_text", "Button text of the payment success alert."),
)

# (flag, attribute, value, help)
CHECKOUT_SWITCHES: tuple[tuple[str, str, bool, str], ...] = (
    ("--embed", "embed", True, "Show the checkout as an overlay."),
    ("--no-media", "media", False, "Hide the product media."),
    ("--no-logo", "logo", False, "Hide the store logo."),
    ("--no-desc", "desc", False, "Hide the product description."),
    ("--no-discount", "discount", False, "Hide the discount code field."),
    ("--skip-trial", "skip_trial", True, "Remove the free trial."),
    ("--subscription-preview", "subscription_preview", True, "Show the subscription charge preview."),
)

CHECKOUT_DATA_OPTIONS: tuple[tuple[str, str], ...] = (
    ("email", "Pre-filled email address."),
    ("name", "Pre-filled name."),
    ("billing-country", "Pre-filled billing country (ISO 3166-1 alpha-2)."),
    ("billing-zip", "Pre-filled billing ZIP / postal code."),
    ("tax-number", "Pre-filled tax number."),
    ("discount-code", "Pre-filled discount code."),
)


def checkout_document(args: argparse.Namespace) -> dict[str, Any]:
    """Build the document for ``checkouts create``."""
    product_options = _provided(
        {attribute: getattr(args, flag.replace("-", "_")) for flag, attribute, _ in CHECKOUT_PRODUCT_OPTIONS},
    )
    if args.product_media:
        product_options["media"] = parse_comma_separated(args.product_media)
    if args.enabled_variants:
        product_options["enabled_variants"] = _parse_ids(args.enabled_variants, option="--enabled-variants")

    checkout_options = _provided(
        {attribute: getattr(args, f"checkout_{attribute}") for _, attribute, _, _ in CHECKOUT_SWITCHES},
    )
    checkout_options.update(
        _provided({"background_color": args.background_color, "button_color": args.button_color}),
    )

    checkout_data = _provided(
        {
            "email": args.email,
            "name": args.name,
            "tax_number": args.tax_number,
            "discount_code": args.discount_code,
        },
    )
    billing_address = _provided({"country": args.billing_country, "zip": args.billing_zip})
    if billing_address:
        checkout_data["billing_address"] = billing_address
    if args.custom is not None:
        checkout_data["custom"] = _parse_json_object(args.custom, option="--custom")

    attributes = _provided(
        {
            "custom_price": _optional_int(args.custom_price, option="--custom-price"),
            "product_options": product_options or None,
            "checkout_options": checkout_options or None,
            "checkout_data": checkout_data or None,
            "preview": args.preview,
            "test_mode": args.test_mode,
            "expires_at": args.expires_at,
        },
    )
    relationships = {
        "store": identifier("stores", args.store_id),
        "variant": identifier("variants", args.variant_id),
    }
    return document(args, attributes, relationships=relationships)


def customer_document(args: argparse.Namespace) -> dict[str, Any]:
    """Build the document for ``customers create`` and ``customers update``."""
    attributes = _provided(
        {
            "name": args.name,
            "email": args.email,
            "city": args.city,
            "country": args.country,
            "region": args.region,
        },
    )
    store_id = getattr(args, "store_id", None)
    relationships = {"store": identifier("stores", store_id)} if store_id else None
    return document(args, attributes, relationships=relationships)


def archived_document(args: argparse.Namespace) -> dict[str, Any]:
    return document(args, {"status": "archived"})


def discount_document(args: argparse.Namespace) -> dict[str, Any]:
    """Build the document for ``discounts create``.

    Variant restrictions are only sent when ``--is-limited-to-products true``
    is given, matching how the API ignores them otherwise.
    """
    limited_to_products = parse_flag(args.is_limited_to_products)
    attributes = _provided(
        {
            "name": args.name,
            "code": args.code,
            "amount": parse_positive_int(args.amount, option="--amount"),
            "amount_type": args.amount_type,
            "is_limited_redemptions": parse_flag(args.is_limited_redemptions),
            "max_redemptions": _optional_int(args.max_redemptions, option="--max-redemptions"),
            "starts_at": args.starts_at,
            "expires_at": args.expires_at,
            "duration": args.duration,
            "duration_in_months": _optional_int(args.duration_in_months, option="--duration-in-months"),
            "is_limited_to_products": limited_to_products,
            "test_mode": parse_flag(args.test_mode),
        },
    )
    relationships: dict[str, Any] = {"store": identifier("stores", args.store_id)}
    if limited_to_products and args.variant_ids:
        relationships["variants"] = [
            identifier("variants", variant_id) for variant_id in parse_comma_separated(args.variant_ids)
        ]
    return document(args, attributes, relationships=relationships)


def license_key_document(args: argparse.Namespace) -> dict[str, Any]:
    """Build the document for ``license-keys update``."""
    attributes: dict[str, Any] = {}
    if args.activation_limit is not None:
        attributes["activation_limit"] = (
            None
            if args.activation_limit == "unlimited"
            else parse_positive_int(args.activation_limit, option="--activation-limit")
        )
    if args.expires_at is not None:
        attributes["expires_at"] = None if args.expires_at == "never" else args.expires_at
    if args.disabled is not None:
        attributes["disabled"] = parse_flag(args.disabled)
    elif args.enabled is not None:
        attributes["disabled"] = not parse_flag(args.enabled)
    return document(args, attributes)


def subscription_document(args: argparse.Namespace) -> dict[str, Any]:
    """Build the document for ``subscriptions update``."""
    attributes = _provided(
        {
            "variant_id": _optional_int(args.variant_id, option="--variant-id"),
            "cancelled": args.cancelled,
            "trial_ends_at": args.trial_ends_at,
            "invoice_immediately": args.invoice_immediately,
            "disable_prorations": args.disable_prorations,
        },
    )
    if args.unpause:
        attributes["pause"] = None
    elif args.pause is not None:
        attributes["pause"] = _provided({"mode": args.pause, "resumes_at": args.pause_resumes_at})
    if args.billing_anchor is not None:
        attributes["billing_anchor"] = _billing_anchor(args.billing_anchor)
    return document(args, attributes)


def subscription_item_document(args: argparse.Namespace) -> dict[str, Any]:
    attributes = _provided(
        {
            "quantity": parse_positive_int(args.quantity, option="--quantity"),
            "invoice_immediately": parse_flag(args.invoice_immediately),
            "disable_prorations": parse_flag(args.disable_prorations),
        },
    )
    return document(args, attributes)


def usage_record_document(args: argparse.Namespace) -> dict[str, Any]:
    attributes = {
        "quantity": parse_positive_int(args.quantity, option="--quantity"),
        "action": args.usage_action,
    }
    relationships = {"subscription-item": identifier("subscription-items", args.subscription_item_id)}
    return document(args, attributes, relationships=relationships)


def webhook_document(args: argparse.Namespace) -> dict[str, Any]:
    """Build the document for ``webhooks create`` and ``webhooks update``."""
    events = parse_comma_separated(args.events) if args.events else None
    attributes = _provided(
        {
            "url": args.url,
            "events": events or None,
            "secret": args.secret,
            "test_mode": getattr(args, "test_mode", None),
        },
    )
    store_id = getattr(args, "store_id", None)
    relationships = {"store": identifier("stores", store_id)} if store_id else None
    return document(args, attributes, relationships=relationships)


def document(
    args: argparse.Namespace,
    attributes: Mapping[str, Any],
    *,
    relationships: Mapping[str, Any] | None = None,
) -> dict[str, Any]:
    """Wrap *attributes* in a document typed after the command's resource.

    Updates (``PATCH``) carry the resource id; creates carry none.
    """
    spec = cast("ResourceSpec", args.resource)
    data: dict[str, Any] = {"type": spec.command}
    if args.method == "PATCH":
        data["id"] = str(args.id)
    data["attributes"] = dict(attributes)
    if relationships:
        data["relationships"] = {name: {"data": value} for name, value in relationships.items()}
    return {"data": data}


def identifier(resource_type: str, resource_id: Any) -> dict[str, str]:
    """Return a JSON:API resource identifier."""
    return {"type": resource_type, "id": str(resource_id)}


def parse_flag(value: str | None) -> bool | None:
    """Map a ``true``/``false`` option value to a boolean, keeping ``None``."""
    if value is None:
        return None
    return value == "true"


def _provided(values: Mapping[str, Any]) -> dict[str, Any]:
    return {key: value for key, value in values.items() if value is not None}


def _optional_int(value: str | None, *, option: str) -> int | None:
    return None if value is None else parse_positive_int(value, option=option)


def _parse_ids(value: str, *, option: str) -> list[int]:
    return [parse_positive_int(item, option=option) for item in parse_comma_separated(value)]


def _parse_json_object(value: str, *, option: str) -> dict[str, Any]:
    try:
        payload = json.loads(value)
    except json.JSONDecodeError as error:
        message = f"Invalid JSON for {option}: {error.msg}"
        raise InvalidUsageError(message) from error
    if not isinstance(payload, Mapping):
        message = f"{option} must be a JSON object"
        raise InvalidUsageError(message)
    return dict(cast("Mapping[str, Any]", payload))


def _billing_anchor(value: str) -> int | None:
    # 0 clears the anchor.
    if value == "0":
        return None
    anchor = parse_positive_int(value, option="--billing-anchor")
    if anchor > MAX_BILLING_ANCHOR:
        message = f"--billing-anchor must be between 0 and {MAX_BILLING_ANCHOR}, got {anchor}"
        raise InvalidUsageError(message)
    return anchor


__all__ = [
    "CHECKOUT_DATA_OPTIONS",
    "CHECKOUT_PRODUCT_OPTIONS",
    "CHECKOUT_SWITCHES",
    "archived_document",
    "checkout_document",
    "customer_document",
    "discount_document",
    "document",
    "identifier",
    "license_key_document",
    "parse_flag",
    "subscription_document",
    "subscription_item_document",
    "usage_record_document",
    "webhook_document",
]
