"""Example: Building the Analytics Report for a Bar Night

This example demonstrates how to build the dashboard report from a ledger
export. Records may come straight from the document store (camelCase keys,
ISO or epoch-millisecond timestamps); they are normalized on ingestion.

The report compares the selected range against the preceding range of the
same length and apportions the month's expenses into a break-even goal.

Prerequisites:
- A JSON export with "transactions", "products", "gameModalities" and
  "customers" lists (the example falls back to a small inline ledger)
"""

import json
import logging
from datetime import date
from pathlib import Path

from bar_core import DateRange, ReportConfig, build_report

logging.basicConfig(level=logging.INFO, format="%(asctime)s - %(name)s - %(levelname)s - %(message)s")

# Modify this path to point to your ledger export
export_file = Path("data/ledger_export.json")

if export_file.exists():
    print(f"\nLoading ledger from: {export_file}")
    export = json.loads(export_file.read_text(encoding="utf-8"))
else:
    print(f"\n{export_file} not found, using the inline sample ledger")
    export = {
        "transactions": [
            {
                "id": "t1",
                "type": "sale",
                "total": 50.0,
                "paymentMethod": "Dinheiro",
                "orderCreatedAt": "2025-01-15T19:20:00",
                "timestamp": "2025-01-15T22:05:00",
                "items": [{"productId": "beer", "name": "Cerveja", "quantity": 2, "unitPrice": 25.0}],
            },
            {
                "id": "t2",
                "type": "sale",
                "total": 40.0,
                "paymentMethod": "Fiado",
                "customerId": "c1",
                "timestamp": "2025-01-15T23:40:00",
                "items": [
                    {"productId": "gin", "name": "Gin", "quantity": 2, "unitPrice": 20.0, "size": 100},
                ],
            },
            {
                "id": "t3",
                "type": "expense",
                "total": 600.0,
                "expenseCategory": "Insumos",
                "description": "Compra: Distribuidora Sul",
                "timestamp": "2025-01-10T10:00:00",
            },
        ],
        "products": [
            {"id": "beer", "name": "Cerveja", "costPrice": 10.0, "stock": 48},
            {"id": "gin", "name": "Gin", "costPrice": 30.0, "baseUnitSize": 750, "saleType": "dose"},
        ],
        "gameModalities": [],
        "customers": [{"id": "c1", "name": "Ana", "balance": 40.0}],
    }

print("=" * 80)
print("Example 1: Single Day Report")
print("=" * 80)

report = build_report(
    transactions=export["transactions"],
    products=export["products"],
    game_modalities=export.get("gameModalities"),
    customers=export.get("customers"),
    date_range=DateRange(date(2025, 1, 15)),
    config=ReportConfig.from_env(),
)

print(f"\nRevenue:      {report.revenue:10.2f}  ({report.deltas['revenue']:+.1f}% vs previous)")
print(f"Cash inflow:  {report.cash_inflow:10.2f}")
print(f"COGS:         {report.cogs:10.2f}")
print(f"Net profit:   {report.net_profit:10.2f}")
print(f"Goal:         {report.final_goal:10.2f}  ({report.goal_progress:.1f}% reached)")

print("\nSales by payment method:")
print(report.sales_by_payment_method.to_string(index=False))

print("\nTop products:")
print(report.top_products.to_string(index=False))

print("\nOccupancy heatmap (rows: 0=Sunday ... 6=Saturday):")
grid = report.heatmap.pivot(index="day", columns="hour", values="value")
print(grid.loc[:, 18:23])

print("\n" + "=" * 80)
print("Example 2: Manual Goal Over a Week")
print("=" * 80)

week = build_report(
    transactions=export["transactions"],
    products=export["products"],
    customers=export.get("customers"),
    date_range=DateRange(date(2025, 1, 13), date(2025, 1, 19)),
    manual_goal=1500.0,
)

print(f"\nPeriod: {week.period_days} day(s), goal {week.final_goal:.2f} (manual: {week.goal.is_manual})")
print(f"Progress: {week.goal_progress:.1f}%")
print(f"Customers with open tabs: {week.references.customers_with_debt}")
