"""Declarative catalogue of the API resources exposed as CLI command groups."""

from __future__ import annotations

from dataclasses import dataclass, field

from lmsq.core.models import Column


@dataclass(frozen=True)
class ResourceFilter:
    """A ``--<flag>`` option translated into ``filter[<key>]``."""

    key: str
    help: str

    @property
    def flag(self) -> str:
        """Return the command-line flag for this filter."""
        return "--" + self.key.replace("_", "-")


@dataclass(frozen=True)
class ResourceSpec:
    """Everything needed to register ``list`` and ``get`` for one resource."""

    command: str
    path: str
    label: str
    description: str
    columns: tuple[Column, ...]
    includes: tuple[str, ...] = ()
    filters: tuple[ResourceFilter, ...] = field(default_factory=tuple)


def _columns(*pairs: tuple[str, str]) -> tuple[Column, ...]:
    return tuple(Column(key=key, label=label) for key, label in pairs)


def _filters(*keys: str) -> tuple[ResourceFilter, ...]:
    return tuple(ResourceFilter(key=key, help=f"Filter by {key.replace('_', ' ')}") for key in keys)


RESOURCES: tuple[ResourceSpec, ...] = (
    ResourceSpec(
        command="stores",
        path="/stores",
        label="Store",
        description="Manage Lemon Squeezy stores",
        columns=_columns(
            ("name", "Name"), ("slug", "Slug"), ("url", "URL"),
            ("currency", "Currency"), ("total_sales", "Total Sales"),
        ),
        includes=("products", "orders", "subscriptions", "discounts", "license-keys", "webhooks"),
    ),
    ResourceSpec(
        command="customers",
        path="/customers",
        label="Customer",
        description="Manage Lemon Squeezy customers",
        columns=_columns(
            ("name", "Name"), ("email", "Email"), ("status", "Status"),
            ("city", "City"), ("country", "Country"),
        ),
        includes=("store", "orders", "subscriptions", "license-keys"),
        filters=_filters("store_id", "email"),
    ),
    ResourceSpec(
        command="products",
        path="/products",
        label="Product",
        description="Browse Lemon Squeezy products",
        columns=_columns(
            ("name", "Name"), ("slug", "Slug"), ("status", "Status"), ("price_formatted", "Price"),
        ),
        includes=("store", "variants"),
        filters=_filters("store_id"),
    ),
    ResourceSpec(
        command="variants",
        path="/variants",
        label="Variant",
        description="Browse product variants",
        columns=_columns(("name", "Name"), ("slug", "Slug"), ("status", "Status"), ("sort", "Sort")),
        includes=("product", "files", "price-model"),
        filters=_filters("product_id", "status"),
    ),
    ResourceSpec(
        command="prices",
        path="/prices",
        label="Price",
        description="Browse variant prices",
        columns=_columns(
            ("variant_id", "Variant ID"), ("category", "Category"),
            ("scheme", "Scheme"), ("unit_price", "Unit Price"),
        ),
        includes=("variant",),
        filters=_filters("variant_id"),
    ),
    ResourceSpec(
        command="files",
        path="/files",
        label="File",
        description="Browse downloadable files attached to variants",
        columns=_columns(
            ("name", "Name"), ("extension", "Extension"), ("size_formatted", "Size"),
            ("version", "Version"), ("status", "Status"),
        ),
        includes=("variant",),
        filters=_filters("variant_id"),
    ),
    ResourceSpec(
        command="orders",
        path="/orders",
        label="Order",
        description="Manage Lemon Squeezy orders",
        columns=_columns(
            ("order_number", "Order #"), ("status", "Status"), ("user_email", "Email"),
            ("total", "Total"), ("currency", "Currency"),
        ),
        includes=(
            "store", "customer", "order-items", "subscriptions", "license-keys",
            "discount-redemptions",
        ),
        filters=_filters("store_id", "user_email", "order_number"),
    ),
    ResourceSpec(
        command="order-items",
        path="/order-items",
        label="Order Item",
        description="Browse line items of orders",
        columns=_columns(
            ("order_id", "Order ID"), ("product_name", "Product"), ("variant_name", "Variant"),
            ("price", "Price"), ("quantity", "Qty"),
        ),
        includes=("order", "product", "variant"),
        filters=_filters("order_id", "product_id", "variant_id"),
    ),
    ResourceSpec(
        command="subscriptions",
        path="/subscriptions",
        label="Subscription",
        description="Manage Lemon Squeezy subscriptions",
        columns=_columns(
            ("product_name", "Product"), ("variant_name", "Variant"), ("status", "Status"),
            ("user_email", "Email"), ("renews_at", "Renews At"),
        ),
        includes=(
            "store", "customer", "order", "order-item", "product", "variant",
            "subscription-items", "subscription-invoices",
        ),
        filters=_filters(
            "store_id", "order_id", "order_item_id", "product_id", "variant_id",
            "user_email", "status",
        ),
    ),
    ResourceSpec(
        command="subscription-invoices",
        path="/subscription-invoices",
        label="Subscription Invoice",
        description="Browse subscription invoices",
        columns=_columns(
            ("subscription_id", "Subscription ID"), ("billing_reason", "Billing Reason"),
            ("status", "Status"), ("total", "Total"), ("currency", "Currency"),
        ),
        includes=("store", "subscription", "customer"),
        filters=_filters("store_id", "status", "refunded", "subscription_id"),
    ),
    ResourceSpec(
        command="subscription-items",
        path="/subscription-items",
        label="Subscription Item",
        description="Browse subscription items",
        columns=_columns(
            ("subscription_id", "Subscription ID"), ("price_id", "Price ID"),
            ("quantity", "Quantity"), ("is_usage_based", "Usage Based"),
        ),
        includes=("subscription", "price", "usage-records"),
        filters=_filters("subscription_id", "price_id"),
    ),
    ResourceSpec(
        command="usage-records",
        path="/usage-records",
        label="Usage Record",
        description="Browse usage records of usage-based subscription items",
        columns=_columns(
            ("subscription_item_id", "Subscription Item ID"), ("quantity", "Quantity"),
            ("action", "Action"),
        ),
        includes=("subscription-item",),
        filters=_filters("subscription_item_id"),
    ),
    ResourceSpec(
        command="discounts",
        path="/discounts",
        label="Discount",
        description="Manage discount codes",
        columns=_columns(
            ("name", "Name"), ("code", "Code"), ("amount", "Amount"),
            ("amount_type", "Amount Type"), ("status", "Status"),
        ),
        includes=("store", "variants", "discount-redemptions"),
        filters=_filters("store_id"),
    ),
    ResourceSpec(
        command="discount-redemptions",
        path="/discount-redemptions",
        label="Discount Redemption",
        description="Browse discount redemptions",
        columns=_columns(
            ("discount_name", "Discount Name"), ("discount_code", "Discount Code"),
            ("amount", "Amount"), ("discount_amount_type", "Amount Type"),
        ),
        includes=("discount", "order"),
        filters=_filters("discount_id", "order_id"),
    ),
    ResourceSpec(
        command="license-keys",
        path="/license-keys",
        label="License Key",
        description="Browse license keys issued for orders",
        columns=_columns(
            ("key_short", "Key (Short)"), ("status", "Status"),
            ("activation_limit", "Activation Limit"), ("instances_count", "Instances"),
            ("expires_at", "Expires At"),
        ),
        includes=("store", "customer", "order", "order-item", "product", "license-key-instances"),
        filters=_filters("store_id", "order_id", "order_item_id", "product_id", "status"),
    ),
    ResourceSpec(
        command="license-key-instances",
        path="/license-key-instances",
        label="License Key Instance",
        description="Browse activated license key instances",
        columns=_columns(
            ("license_key_id", "License Key ID"), ("identifier", "Identifier"), ("name", "Name"),
        ),
        includes=("license-key",),
        filters=_filters("license_key_id"),
    ),
    ResourceSpec(
        command="checkouts",
        path="/checkouts",
        label="Checkout",
        description="Browse checkouts",
        columns=_columns(
            ("url", "URL"), ("store_id", "Store ID"), ("variant_id", "Variant ID"),
            ("created_at", "Created At"),
        ),
        includes=("store", "variant"),
        filters=_filters("store_id", "variant_id"),
    ),
    ResourceSpec(
        command="webhooks",
        path="/webhooks",
        label="Webhook",
        description="Manage webhooks",
        columns=_columns(("url", "URL"), ("events", "Events"), ("last_sent_at", "Last Sent At")),
        includes=("store",),
        filters=_filters("store_id"),
    ),
    ResourceSpec(
        command="affiliates",
        path="/affiliates",
        label="Affiliate",
        description="Browse affiliates",
        columns=_columns(
            ("user_name", "User Name"), ("user_email", "User Email"), ("status", "Status"),
            ("total_earnings", "Total Earnings"),
        ),
        includes=("store", "user"),
        filters=_filters("store_id", "user_email"),
    ),
)

def find_resource(command: str) -> ResourceSpec:
    """Return the resource registered under *command*."""
    for spec in RESOURCES:
        if spec.command == command:
            return spec
    message = f"unknown resource command: {command}"
    raise KeyError(message)


__all__ = ["RESOURCES", "ResourceFilter", "ResourceSpec", "find_resource"]
