"""End-to-end example that renders bundled API responses in every output mode."""

from __future__ import annotations

import json
import sys
from pathlib import Path

from rich.console import Console

try:
    from lmsq.core.models import Column, OutputMode, OutputOptions
    from lmsq.output import output_list, output_resource
except ModuleNotFoundError as error:  # pragma: no cover - documentation helper
    if "lmsq" not in (error.name or ""):
        raise
    project_root = Path(__file__).resolve().parents[1]
    src_path = project_root / "src"
    if str(src_path) not in sys.path:
        sys.path.insert(0, str(src_path))
    from lmsq.core.models import Column, OutputMode, OutputOptions
    from lmsq.output import output_list, output_resource

ORDER_COLUMNS = (
    Column(key="order_number", label="Order #"),
    Column(key="status", label="Status"),
    Column(key="user_email", label="Email"),
    Column(key="total", label="Total"),
)


def main() -> None:
    """Print the bundled order fixtures through each renderer."""
    console = Console()
    base_dir = Path(__file__).resolve().parent
    order = json.loads((base_dir / "single_order.json").read_text(encoding="utf-8"))
    orders = json.loads((base_dir / "order_list.json").read_text(encoding="utf-8"))

    for mode in OutputMode:
        console.rule(f"[bold]{mode.value}")
        print(output_list(orders, mode, ORDER_COLUMNS))

    console.rule("[bold]fields + pluck")
    print(output_resource(order, OutputMode.JSON, "Order", OutputOptions(fields=("status", "total"))))
    print(output_resource(order, OutputMode.TEXT, "Order", OutputOptions(pluck="user_email")))
    print(output_list(orders, OutputMode.TEXT, ORDER_COLUMNS, OutputOptions(only_ids=True)))


if __name__ == "__main__":
    main()
