"""
Livestock contract models, generated from ``schemas/livestock.json``.

Import the models from here on both sides of the wire; never redeclare them.
"""

from .generator import column_specs, generate_contracts
from .schema import load_schema

LIVESTOCK_SCHEMA = load_schema("livestock")
LIVESTOCK_CONTRACTS = generate_contracts(LIVESTOCK_SCHEMA)
LIVESTOCK_COLUMNS = column_specs(LIVESTOCK_SCHEMA)

LivestockCreate = LIVESTOCK_CONTRACTS.create
LivestockReplace = LIVESTOCK_CONTRACTS.replace
LivestockPatch = LIVESTOCK_CONTRACTS.patch
LivestockRead = LIVESTOCK_CONTRACTS.read
LivestockFilter = LIVESTOCK_CONTRACTS.filter
LivestockPage = LIVESTOCK_CONTRACTS.page
LivestockBatchCreate = LIVESTOCK_CONTRACTS.batch

LIVESTOCK_TYPES = LIVESTOCK_SCHEMA.field("type").choices
LIVESTOCK_STATUSES = LIVESTOCK_SCHEMA.field("status").choices

__all__ = [
    "LIVESTOCK_SCHEMA",
    "LIVESTOCK_CONTRACTS",
    "LIVESTOCK_COLUMNS",
    "LIVESTOCK_TYPES",
    "LIVESTOCK_STATUSES",
    "LivestockCreate",
    "LivestockReplace",
    "LivestockPatch",
    "LivestockRead",
    "LivestockFilter",
    "LivestockPage",
    "LivestockBatchCreate",
]
