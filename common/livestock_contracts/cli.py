"""
Contract build step.

Exports the JSON Schema of every generated model so non-Python consumers
and reviewers see the exact wire shapes, and verifies that exported
artifacts match the current schema documents.

Usage:
    livestock-contracts export --out build/contracts
    livestock-contracts check --out build/contracts
"""

import argparse
import json
import sys
from pathlib import Path
from typing import Dict, List, Optional

from .generator import ContractSet, generate_contracts
from .schema import SCHEMA_DIR, SchemaDefinitionError, load_schema

MANIFEST_NAME = "manifest.json"


def render_artifacts(contracts: ContractSet) -> Dict[str, str]:
    """Render file name -> content for every artifact of one entity."""
    schema = contracts.schema
    artifacts: Dict[str, str] = {}
    for name, model in contracts.models().items():
        artifacts[f"{name}.schema.json"] = (
            json.dumps(model.model_json_schema(), indent=2, sort_keys=True) + "\n"
        )

    manifest = {
        "entity": schema.entity,
        "version": schema.version,
        "fingerprint": schema.fingerprint,
        "models": sorted(contracts.models()),
    }
    artifacts[f"{schema.table}.{MANIFEST_NAME}"] = (
        json.dumps(manifest, indent=2, sort_keys=True) + "\n"
    )
    return artifacts


def _all_contracts(schema_dir: Path) -> List[ContractSet]:
    return [
        generate_contracts(load_schema(path))
        for path in sorted(schema_dir.glob("*.json"))
    ]


def export(out_dir: Path, schema_dir: Path = SCHEMA_DIR) -> List[Path]:
    """Write all artifacts into ``out_dir``, returning the written paths."""
    out_dir.mkdir(parents=True, exist_ok=True)
    written: List[Path] = []
    for contracts in _all_contracts(schema_dir):
        for name, content in render_artifacts(contracts).items():
            path = out_dir / name
            path.write_text(content, encoding="utf-8")
            written.append(path)
    return written


def check(out_dir: Path, schema_dir: Path = SCHEMA_DIR) -> List[str]:
    """
    Compare exported artifacts with the current schemas.

    Returns:
        List of problems; empty when everything is up to date
    """
    problems: List[str] = []
    for contracts in _all_contracts(schema_dir):
        for name, expected in render_artifacts(contracts).items():
            path = out_dir / name
            if not path.exists():
                problems.append(f"missing artifact: {path}")
            elif path.read_text(encoding="utf-8") != expected:
                problems.append(f"stale artifact: {path}")
    return problems


def main(argv: Optional[List[str]] = None) -> int:
    """Console entry point."""
    parser = argparse.ArgumentParser(
        prog="livestock-contracts",
        description="Generate and verify contract artifacts from entity schemas",
    )
    parser.add_argument(
        "--schemas",
        type=Path,
        default=SCHEMA_DIR,
        help="Directory holding the entity schema documents",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    export_parser = subparsers.add_parser("export", help="Write contract artifacts")
    export_parser.add_argument("--out", type=Path, required=True)

    check_parser = subparsers.add_parser(
        "check", help="Fail when artifacts are missing or stale"
    )
    check_parser.add_argument("--out", type=Path, required=True)

    args = parser.parse_args(argv)

    try:
        if args.command == "export":
            written = export(args.out, args.schemas)
            print(f"Wrote {len(written)} contract artifacts to {args.out}")
            return 0

        problems = check(args.out, args.schemas)
    except SchemaDefinitionError as e:
        print(f"ERROR: {e}", file=sys.stderr)
        return 2

    for problem in problems:
        print(problem, file=sys.stderr)
    if problems:
        print("Contracts are out of date; run 'livestock-contracts export'", file=sys.stderr)
        return 1
    print("Contract artifacts are up to date")
    return 0


if __name__ == "__main__":
    sys.exit(main())
