"""Tests for the TypeScript annotation extractor."""

from __future__ import annotations

import textwrap
from pathlib import Path

import pytest

from docsite.errors import ExtractionError
from docsite.extractors import TypeScriptExtractor


def _extract(source: str, *, exported_only: bool = False, path: str = "src/sample.ts"):
    extractor = TypeScriptExtractor(exported_only=exported_only)
    return extractor.extract_source(textwrap.dedent(source).lstrip("\n"), path)


def test_function_with_doc_comment_yields_parameters_and_description() -> None:
    nodes = _extract(
        """
        /**
         * Adds two numbers
         * @param a - first operand
         * @param b second operand
         * @example
         *   add(1, 2)
         */
        export function add(a: number, b: number): number {
          return a + b;
        }
        """
    )

    assert len(nodes) == 1
    node = nodes[0]
    assert node.name == "add"
    assert node.kind == "function"
    assert node.description == "Adds two numbers"
    assert [param.name for param in node.parameters] == ["a", "b"]
    assert [param.type.type for param in node.parameters] == ["number", "number"]
    assert node.parameters[0].description == "first operand"
    assert node.parameters[1].description == "second operand"
    assert node.returns is not None and node.returns.type == "number"
    assert node.signature == "function add(a: number, b: number): number"
    assert node.examples == ["add(1, 2)"]
    assert node.source.line == 8
    assert node.source.column == 1


def test_declarations_are_returned_in_source_order_with_first_line() -> None:
    nodes = _extract(
        """
        export interface Point {
          x: number;
          y?: number;
        }

        export type Id = string | number;

        export enum Color {
          Red,
          Green = "green",
        }

        export const VERSION = "1.0";

        export class Shape {
          name: string;
          constructor(name: string) {}
          area(): number {
            return 0;
          }
        }
        """
    )

    assert [(node.name, node.kind) for node in nodes] == [
        ("Point", "interface"),
        ("Id", "type"),
        ("Color", "enum"),
        ("VERSION", "variable"),
        ("Shape", "class"),
    ]
    assert [node.source.line for node in nodes] == [1, 6, 8, 13, 15]
    assert nodes[1].signature == "type Id = string | number"
    assert nodes[2].tags["members"] == ["Red", "Green"]
    assert nodes[3].signature == 'const VERSION = "1.0"'


def test_class_and_interface_members_become_children() -> None:
    nodes = _extract(
        """
        export interface Point {
          x: number;
          move(dx: number): void;
        }

        export class Shape {
          /** Display name */
          name: string;
          area(scale = 1): number {
            return 0;
          }
        }
        """
    )

    point, shape = nodes
    assert [(child.name, child.kind) for child in point.children] == [("x", "variable"), ("move", "function")]
    assert [(child.name, child.kind) for child in shape.children] == [("name", "variable"), ("area", "function")]
    assert shape.children[0].description == "Display name"
    assert shape.children[0].returns is not None and shape.children[0].returns.type == "string"
    area = shape.children[1]
    assert area.parameters[0].optional is True
    assert area.parameters[0].default_value == "1"


def test_nested_functions_are_not_lifted_to_top_level() -> None:
    nodes = _extract(
        """
        export function outer(): void {
          function inner(): void {}
          inner();
        }
        """
    )

    assert [node.name for node in nodes] == ["outer"]


def test_repeated_tags_collapse_into_list() -> None:
    nodes = _extract(
        """
        /**
         * Formats values
         * @see one
         * @see two
         * @deprecated use render
         */
        export function format(value: string): string {
          return value;
        }
        """
    )

    assert nodes[0].tags["see"] == ["one", "two"]
    assert nodes[0].tags["deprecated"] == "use render"


def test_optional_and_arrow_function_variables() -> None:
    nodes = _extract(
        """
        /** Doubles a value */
        export const double = (value: number, factor?: number): number => value * (factor ?? 2);
        """
    )

    node = nodes[0]
    assert node.kind == "variable"
    assert node.description == "Doubles a value"
    assert [(param.name, param.optional) for param in node.parameters] == [("value", False), ("factor", True)]


def test_every_node_is_included_by_default() -> None:
    source = """
        function helper(): void {}
        export function api(): void {}
        """

    assert [node.name for node in _extract(source)] == ["helper", "api"]
    assert [node.name for node in _extract(source, exported_only=True)] == ["api"]


def test_exported_only_honours_export_clauses() -> None:
    nodes = _extract(
        """
        function helper(): void {}
        function hidden(): void {}
        export { helper };
        """,
        exported_only=True,
    )

    assert [node.name for node in nodes] == ["helper"]


def test_syntax_error_raises_extraction_error() -> None:
    with pytest.raises(ExtractionError) as excinfo:
        _extract("export function broken( {\n", path="src/broken.ts")

    assert excinfo.value.path == "src/broken.ts"
    assert "syntax error" in excinfo.value.message


def test_extract_file_reads_from_disk(tmp_path: Path) -> None:
    source = tmp_path / "math.ts"
    source.write_text("export function add(a: number, b: number): number { return a + b; }\n", encoding="utf-8")

    nodes = TypeScriptExtractor().extract_file(source, display_path="src/math.ts")

    assert nodes[0].source.file == "src/math.ts"


def test_supports_skips_declaration_files() -> None:
    extractor = TypeScriptExtractor()

    assert extractor.supports(Path("index.ts"))
    assert extractor.supports(Path("view.tsx"))
    assert not extractor.supports(Path("types.d.ts"))
    assert not extractor.supports(Path("readme.md"))


def test_function_valued_variables_keep_generic_return_types() -> None:
    nodes = _extract(
        """
        export const load = async (id: string): Promise<User> => fetchUser(id);
        export const range = function (n: number): Array<number> {
          return [];
        };
        """
    )

    assert [node.signature for node in nodes] == [
        "const load = async (id: string): Promise<User>",
        "const range = function (n: number): Array<number>",
    ]
    assert [param.name for param in nodes[0].parameters] == ["id"]


def test_class_signature_keeps_type_parameters_and_heritage() -> None:
    nodes = _extract(
        """
        export abstract class Repo<T> extends Base<T> implements Store {
          items: T[] = [];
        }
        """
    )

    assert nodes[0].kind == "class"
    assert nodes[0].signature == "abstract class Repo<T> extends Base<T> implements Store"
