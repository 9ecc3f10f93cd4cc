"""Tests for the single-file component extractor."""

from __future__ import annotations

import textwrap
from pathlib import Path

import pytest

from docsite.errors import ExtractionError
from docsite.extractors import VueComponentExtractor
from docsite.extractors.vue import split_sections


def _extract(source: str, path: str = "src/components/BaseButton.vue"):
    return VueComponentExtractor().extract_source(textwrap.dedent(source).lstrip("\n"), path)


SCRIPT_SETUP_COMPONENT = """
<template>
  <button :disabled="disabled" @click="$emit('click')">
    <slot name="icon" :size="iconSize" />
    <slot />
  </button>
</template>

<script setup lang="ts">
/** A clickable button */
interface Props {
  /** Button text */
  text: string;
  disabled?: boolean;
}

const props = withDefaults(defineProps<Props>(), { disabled: false });
const emit = defineEmits<{
  change: [value: string];
  (e: 'input', value: string): void;
}>();

function onInput(value: string) {
  emit('change', value);
}
</script>

<style scoped>
button { color: red; }
</style>
"""


def test_script_setup_props_events_and_slots() -> None:
    component = _extract(SCRIPT_SETUP_COMPONENT)

    assert component.name == "BaseButton"
    assert component.description == "A clickable button"
    assert [(prop.name, prop.type, prop.required) for prop in component.props] == [
        ("text", "string", True),
        ("disabled", "boolean", False),
    ]
    assert component.props[0].description == "Button text"
    assert component.props[1].default == "false"

    assert [event.name for event in component.events] == ["change", "input", "click"]
    change, input_event, click = component.events
    assert change.payload is not None and change.payload.type == "value: string"
    assert input_event.payload is not None and input_event.payload.type == "value: string"
    assert click.payload is None

    assert [(slot.name, slot.scoped) for slot in component.slots] == [("icon", True), ("default", False)]
    assert component.source.file == "src/components/BaseButton.vue"


def test_options_api_component() -> None:
    component = _extract(
        """
        <template>
          <input :value="value" @blur="$emit('blur')" />
        </template>

        <script>
        export default {
          name: 'FancyInput',
          props: {
            value: { type: String, required: true },
            size: { type: [String, Number], default: 'md' },
            label: String,
          },
          emits: ['update'],
          methods: {
            onInput(event) {
              this.$emit('update', event.target.value);
            },
          },
        };
        </script>
        """
    )

    assert component.name == "FancyInput"
    value, size, label = component.props
    assert (value.name, value.type, value.required) == ("value", "String", True)
    assert size.type == ["String", "Number"]
    assert size.default == "'md'"
    assert size.required is False
    assert (label.name, label.type) == ("label", "String")
    assert [event.name for event in component.events] == ["update", "blur"]
    assert component.slots == []


def test_runtime_prop_array_and_emit_list() -> None:
    component = _extract(
        """
        <script setup>
        defineProps(['title', 'subtitle']);
        defineEmits(['close']);
        </script>
        """,
        path="Dialog.vue",
    )

    assert component.name == "Dialog"
    assert [(prop.name, prop.type) for prop in component.props] == [("title", "any"), ("subtitle", "any")]
    assert [event.name for event in component.events] == ["close"]


def test_nested_templates_and_commented_slots() -> None:
    component = _extract(
        """
        <template>
          <div>
            <!-- <slot name="ignored" /> -->
            <template v-if="ok"><slot name="header" /></template>
            <slot name="footer" v-bind="footerProps"></slot>
          </div>
        </template>
        """
    )

    assert [(slot.name, slot.scoped) for slot in component.slots] == [("header", False), ("footer", True)]
    assert component.props == []


def test_kebab_case_slot_components_are_not_slots() -> None:
    component = _extract(
        """
        <template>
          <ul>
            <slot-item />
            <slot name="a"/>
          </ul>
        </template>
        """
    )

    assert [slot.name for slot in component.slots] == ["a"]


def test_duplicate_declarations_keep_first() -> None:
    component = _extract(
        """
        <template><button @click="$emit('save')" /></template>
        <script setup lang="ts">
        const emit = defineEmits(['save']);
        emit('save');
        </script>
        """
    )

    assert [event.name for event in component.events] == ["save"]


def test_split_sections_reports_unterminated_block() -> None:
    with pytest.raises(ExtractionError) as excinfo:
        split_sections("<template><div></div>\n", "Broken.vue")

    assert "unterminated <template>" in str(excinfo.value)


def test_source_without_blocks_is_rejected() -> None:
    with pytest.raises(ExtractionError):
        _extract("just some text\n")


def test_script_syntax_error_is_reported() -> None:
    with pytest.raises(ExtractionError) as excinfo:
        _extract("<script setup lang=\"ts\">\nconst = ;\n</script>\n", path="Bad.vue")

    assert excinfo.value.path == "Bad.vue"


def test_extract_file_uses_display_path(tmp_path: Path) -> None:
    source = tmp_path / "Tag.vue"
    source.write_text("<template><span><slot /></span></template>\n", encoding="utf-8")

    component = VueComponentExtractor().extract_file(source, display_path="components/Tag.vue")

    assert component.name == "Tag"
    assert component.source.file == "components/Tag.vue"
    assert VueComponentExtractor().supports(source)


def test_extract_file_ignores_byte_order_mark(tmp_path: Path) -> None:
    source = tmp_path / "Tag.vue"
    source.write_text("\ufeff<template><span><slot /></span></template>\n", encoding="utf-8")

    component = VueComponentExtractor().extract_file(source)

    assert [slot.name for slot in component.slots] == ["default"]
