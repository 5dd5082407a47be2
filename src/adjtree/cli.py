"""Command-line interface for adjtree."""

from __future__ import annotations

import json
import sys
from pathlib import Path
from typing import Any

import click

from adjtree import HierarchyContext, __version__
from adjtree.common.exceptions import AdjTreeException
from adjtree.common.schema import (
    EntityProperty,
    HierarchySchema,
    SimpleHierarchySchemaProvider,
)

TYPE_MAPPING: dict[str, type[Any]] = {
    "int": int,
    "integer": int,
    "long": int,
    "float": float,
    "double": float,
    "string": str,
}


@click.group()
@click.version_option(version=__version__, prog_name="adjtree")
def main() -> None:
    """adjtree - Render ancestor traversals of adjacency-list tables as SQL."""
    pass


@main.command()
@click.option(
    "--schema", "-s",
    "schema_file",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    required=True,
    help="JSON file containing the hierarchy schema definitions.",
)
@click.option(
    "--hierarchy", "-n",
    "hierarchy_name",
    help="Name of the hierarchy to traverse. Optional when the schema defines one.",
)
@click.option(
    "--origin", "-k",
    "origins",
    multiple=True,
    help="Key of an origin node. Repeat for a batched (eager) plan.",
)
@click.option(
    "--and-self/--no-and-self",
    default=False,
    help="Include the origin nodes themselves at depth 0.",
)
@click.option(
    "--output", "-o",
    "output_file",
    type=click.Path(dir_okay=False, path_type=Path),
    help="Output file for the SQL. If not provided, writes to stdout.",
)
@click.option(
    "--pretty/--no-pretty",
    default=True,
    help="Pretty-print the output SQL.",
)
def ancestors(
    schema_file: Path,
    hierarchy_name: str | None,
    origins: tuple[str, ...],
    and_self: bool,
    output_file: Path | None,
    pretty: bool,
) -> None:
    """Render the recursive query resolving the ancestors of the given origins."""
    if not origins:
        click.echo("Error: At least one --origin is required", err=True)
        sys.exit(1)

    # Load the schema
    try:
        schema_data = json.loads(schema_file.read_text(encoding="utf-8"))
        provider = _load_schema(schema_data)
    except json.JSONDecodeError as e:
        click.echo(f"Error parsing schema file: {e}", err=True)
        sys.exit(1)
    except (KeyError, TypeError, ValueError) as e:
        click.echo(f"Error loading schema: {e}", err=True)
        sys.exit(1)

    schema = _select_hierarchy(provider, hierarchy_name)

    key_type = schema.key_property.data_type
    try:
        keys = [key_type(origin) for origin in origins]
    except ValueError as e:
        click.echo(f"Error: origin keys must be {key_type.__name__}: {e}", err=True)
        sys.exit(1)

    # Render
    try:
        sql = HierarchyContext(schema).ancestors_sql(keys, and_self, pretty)
    except (AdjTreeException, ValueError) as e:
        click.echo(f"Error rendering query: {e}", err=True)
        sys.exit(1)

    # Output
    if output_file:
        output_file.write_text(sql, encoding="utf-8")
        click.echo(f"SQL written to {output_file}")
    else:
        click.echo(sql)


@main.command()
@click.option(
    "--output", "-o",
    "output_file",
    type=click.Path(dir_okay=False, path_type=Path),
    help="Output file for the schema template. If not provided, writes to stdout.",
)
def init_schema(output_file: Path | None) -> None:
    """Generate a template schema file."""
    template = {
        "hierarchies": [
            {
                "name": "Category",
                "tableName": "catalog.shop.categories",
                "keyProperty": {"name": "id", "type": "int"},
                "parentKeyProperty": {"name": "parent_id", "type": "int"},
                "properties": [
                    {"name": "name", "type": "string"},
                ],
                "maxDepth": None,
            },
        ],
    }

    result = json.dumps(template, indent=2)

    if output_file:
        output_file.write_text(result, encoding="utf-8")
        click.echo(f"Schema template written to {output_file}")
    else:
        click.echo(result)


def _select_hierarchy(
    provider: SimpleHierarchySchemaProvider, name: str | None
) -> HierarchySchema:
    names = provider.hierarchy_names()
    if name is None:
        if len(names) != 1:
            click.echo(
                f"Error: --hierarchy is required, choose one of {names}", err=True
            )
            sys.exit(1)
        name = names[0]

    schema = provider.get_hierarchy_definition(name)
    if schema is None:
        click.echo(f"Error: Unknown hierarchy '{name}'", err=True)
        sys.exit(1)
    return schema


def _load_property(data: dict[str, Any], default_type: str) -> EntityProperty:
    return EntityProperty(
        property_name=data["name"],
        data_type=TYPE_MAPPING.get(data.get("type", default_type), str),
    )


def _load_schema(schema_data: dict[str, Any]) -> SimpleHierarchySchemaProvider:
    """Load hierarchy schemas from JSON data."""
    provider = SimpleHierarchySchemaProvider()

    for data in schema_data.get("hierarchies", []):
        schema = HierarchySchema(
            name=data["name"],
            table_name=data.get("tableName", data["name"]),
            key_property=_load_property(
                data.get("keyProperty", {"name": "id"}), "int"
            ),
            parent_key_property=_load_property(
                data.get("parentKeyProperty", {"name": "parent_id"}), "int"
            ),
            properties=[
                _load_property(prop, "string")
                for prop in data.get("properties", [])
            ],
            max_depth=data.get("maxDepth"),
        )
        provider.add_hierarchy(schema)

    return provider


if __name__ == "__main__":
    main()
