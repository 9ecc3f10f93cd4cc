"""Tests for the JSX/TSX component extractor."""

from __future__ import annotations

import textwrap
from pathlib import Path

import pytest

from docsite.errors import ExtractionError
from docsite.extractors import ReactComponentExtractor


def _extract(source: str, path: str):
    return ReactComponentExtractor().extract_source(textwrap.dedent(source).lstrip("\n"), path)


def test_function_component_with_props_interface() -> None:
    component = _extract(
        """
        import React from 'react';

        export interface ButtonProps {
          /** Visible label */
          label: string;
          variant?: 'primary' | 'secondary';
          onClick?: () => void;
        }

        /** Renders a button */
        export function Button({ label, variant = 'primary', onClick }: ButtonProps) {
          return <button className={variant} onClick={onClick}>{label}</button>;
        }
        """,
        "src/components/Button.tsx",
    )

    assert component.name == "Button"
    assert component.description == "Renders a button"
    assert component.source.line == 11
    label, variant, on_click = component.props
    assert (label.name, label.type, label.required) == ("label", "string", True)
    assert label.description == "Visible label"
    assert variant.type == ["'primary'", "'secondary'"]
    assert variant.required is False
    assert variant.default == "'primary'"
    assert on_click.type == "() => void"
    assert component.events == []
    assert component.slots == []


def test_memo_wrapped_component_with_type_alias() -> None:
    component = _extract(
        """
        import { memo } from 'react';

        type CardProps = {
          title: string;
          footer?: string;
        };

        export const Card = memo(function Card({ title }: CardProps) {
          return <div>{title}</div>;
        });
        """,
        "Card.tsx",
    )

    assert component.name == "Card"
    assert [(prop.name, prop.required) for prop in component.props] == [("title", True), ("footer", False)]


def test_typed_variable_component_reads_generic_props() -> None:
    component = _extract(
        """
        interface BadgeProps { count: number }

        export const Badge: React.FC<BadgeProps> = ({ count = 0 }) => <span>{count}</span>;
        """,
        "Badge.tsx",
    )

    assert component.name == "Badge"
    assert [(prop.name, prop.type, prop.default) for prop in component.props] == [("count", "number", "0")]


def test_class_component_with_inline_props() -> None:
    component = _extract(
        """
        import React from 'react';

        export class Modal extends React.Component<{ open: boolean; title?: string }> {
          render() {
            return null;
          }
        }
        """,
        "Modal.tsx",
    )

    assert component.name == "Modal"
    assert [(prop.name, prop.required) for prop in component.props] == [("open", True), ("title", False)]


def test_component_matching_file_stem_wins() -> None:
    component = _extract(
        """
        function Helper() {
          return <i />;
        }

        export function Avatar({ src }: { src: string }) {
          return <img src={src} />;
        }
        """,
        "Avatar.jsx",
    )

    assert component.name == "Avatar"
    assert [prop.name for prop in component.props] == ["src"]


def test_file_without_component_falls_back_to_stem() -> None:
    component = _extract("export const helper = () => 1;\n", "src/components/utils.tsx")

    assert component.name == "utils"
    assert component.props == []
    assert component.description is None


def test_syntax_error_raises_extraction_error() -> None:
    with pytest.raises(ExtractionError):
        _extract("export function Broken( {\n", "Broken.tsx")


def test_supports_skips_test_files() -> None:
    extractor = ReactComponentExtractor()

    assert extractor.supports(Path("Button.tsx"))
    assert extractor.supports(Path("Button.jsx"))
    assert not extractor.supports(Path("Button.test.tsx"))
    assert not extractor.supports(Path("Button.spec.jsx"))
    assert not extractor.supports(Path("Button.ts"))
