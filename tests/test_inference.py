from __future__ import annotations

import unittest

from sharpie.icons import DEFAULT_ICON_SET, icon_glyph, indicator_glyphs, kind_icon_key
from sharpie.inference import infer_display, infer_icon_key
from sharpie.languages import CSHARP, GO
from sharpie.symbols_types import Indicator, SymbolEntry, SymbolKind


def entry(name: str, kind: SymbolKind = SymbolKind.METHOD, signature: str | None = None) -> SymbolEntry:
    return SymbolEntry(qualified_name=name, simple_name=name.rsplit(".", 1)[-1], kind=kind, signature=signature)


class CSharpInferenceTests(unittest.TestCase):
    def test_task_of_int_unwraps_to_integer(self) -> None:
        metadata = infer_display(entry("Count", signature="Task<int>"), CSHARP)

        self.assertEqual(metadata.icon_key, "integer")
        self.assertIn(Indicator.ASYNC, metadata.indicators)
        self.assertIn(Indicator.GENERIC, metadata.indicators)

    def test_bare_task_is_task(self) -> None:
        self.assertEqual(infer_icon_key(entry("Run", signature="Task"), CSHARP), "task")

    def test_task_of_user_type_is_object(self) -> None:
        self.assertEqual(infer_icon_key(entry("Load", signature="Task<Widget>"), CSHARP), "object")

    def test_nested_generic_result_is_unwrapped(self) -> None:
        signature = "public async Task<List<string>> LoadAsync()"
        self.assertEqual(infer_icon_key(entry("LoadAsync", signature=signature), CSHARP), "array")

    def test_value_task_unwraps_like_task(self) -> None:
        signature = "public ValueTask<bool> TryAsync()"
        self.assertEqual(infer_icon_key(entry("TryAsync", signature=signature), CSHARP), "boolean")

    def test_async_enumerable_unwraps_item_type(self) -> None:
        metadata = infer_display(entry("Stream", signature="public IAsyncEnumerable<int> Stream()"), CSHARP)

        self.assertEqual(metadata.icon_key, "integer")
        self.assertIn(Indicator.ASYNC, metadata.indicators)

    def test_outermost_wrapper_wins(self) -> None:
        signature = "public Task<IAsyncEnumerable<int>> OpenAsync()"
        self.assertEqual(infer_icon_key(entry("OpenAsync", signature=signature), CSHARP), "array")

    def test_async_void_is_task(self) -> None:
        metadata = infer_display(entry("Fire", signature="public async void Fire()"), CSHARP)

        self.assertEqual(metadata.icon_key, "task")
        self.assertIn(Indicator.ASYNC, metadata.indicators)

    def test_task_unwrapping_can_be_disabled(self) -> None:
        metadata = infer_display(
            entry("Count", signature="Task<int>"),
            CSHARP,
            features={"show_task_types": False},
        )

        self.assertEqual(metadata.icon_key, "method")
        self.assertIn(Indicator.ASYNC, metadata.indicators)

    def test_async_indicator_can_be_disabled(self) -> None:
        metadata = infer_display(
            entry("Count", signature="Task<int>"),
            CSHARP,
            features={"show_async_indicators": False},
        )

        self.assertEqual(metadata.icon_key, "integer")
        self.assertNotIn(Indicator.ASYNC, metadata.indicators)

    def test_inner_key_missing_from_icon_set_falls_back_to_task(self) -> None:
        icons = {key: glyph for key, glyph in DEFAULT_ICON_SET.items() if key != "integer"}
        self.assertEqual(infer_icon_key(entry("Count", signature="Task<int>"), CSHARP, icons), "task")

    def test_ambiguous_kind_with_type_keyword_is_class(self) -> None:
        self.assertEqual(infer_icon_key(entry("Foo", SymbolKind.OBJECT, "class Foo"), CSHARP), "class")
        self.assertEqual(infer_icon_key(entry("Bar", SymbolKind.UNKNOWN, "struct Bar"), CSHARP), "class")

    def test_signature_type_table(self) -> None:
        self.assertEqual(infer_icon_key(entry("Name", SymbolKind.PROPERTY, "string"), CSHARP), "string")
        self.assertEqual(infer_icon_key(entry("Age", SymbolKind.PROPERTY, "int?"), CSHARP), "integer")
        self.assertEqual(
            infer_icon_key(entry("Lookup", SymbolKind.FIELD, "Dictionary<string, int>"), CSHARP),
            "dictionary",
        )
        self.assertEqual(infer_icon_key(entry("Items", SymbolKind.FIELD, "string[]"), CSHARP), "array")

    def test_unknown_signature_falls_back_to_kind(self) -> None:
        metadata = infer_display(entry("Main", signature="public static void Main()"), CSHARP)

        self.assertEqual(metadata.icon_key, "method")
        self.assertEqual(metadata.indicators, (Indicator.STATIC,))

    def test_missing_signature_uses_kind(self) -> None:
        self.assertEqual(infer_icon_key(entry("Widget", SymbolKind.CLASS), CSHARP), "class")
        self.assertEqual(infer_display(entry("Widget", SymbolKind.CLASS), CSHARP).indicators, ())


class GoInferenceTests(unittest.TestCase):
    def test_value_error_pair_uses_first_result(self) -> None:
        metadata = infer_display(
            entry("Fetch", SymbolKind.FUNCTION, "func(ctx context.Context) (int, error)"),
            GO,
        )

        self.assertEqual(metadata.icon_key, "integer")
        self.assertEqual(metadata.indicators, (Indicator.RETURNS_ERROR,))

    def test_pointer_receiver_goroutine_and_error(self) -> None:
        metadata = infer_display(
            entry("Server.Start", SymbolKind.METHOD, "func (s *Server) Start(ctx context.Context) error"),
            GO,
        )

        self.assertEqual(metadata.icon_key, "method")
        self.assertEqual(
            metadata.indicators,
            (Indicator.POINTER_RECEIVER, Indicator.GOROUTINE, Indicator.RETURNS_ERROR),
        )

    def test_channel_directions(self) -> None:
        cases = {
            "chan<- int": Indicator.CHANNEL_SEND,
            "<-chan int": Indicator.CHANNEL_RECEIVE,
            "chan int": Indicator.CHANNEL_BIDIRECTIONAL,
        }
        for signature, indicator in cases.items():
            with self.subTest(signature=signature):
                metadata = infer_display(entry("Events", SymbolKind.FIELD, signature), GO)
                self.assertEqual(metadata.icon_key, "channel")
                self.assertIn(indicator, metadata.indicators)

    def test_composite_types(self) -> None:
        cases = {
            "[]string": "slice",
            "map[string]int": "map",
            "[4]byte": "array",
            "*int": "integer",
            "string": "string",
        }
        for signature, icon_key in cases.items():
            with self.subTest(signature=signature):
                self.assertEqual(infer_icon_key(entry("Value", SymbolKind.FIELD, signature), GO), icon_key)

    def test_interface_and_struct_kinds(self) -> None:
        self.assertEqual(infer_icon_key(entry("Reader", SymbolKind.INTERFACE, "interface{...}"), GO), "interface")
        self.assertEqual(infer_icon_key(entry("Config", SymbolKind.STRUCT, "struct{...}"), GO), "struct")

    def test_single_error_result_keeps_kind_icon(self) -> None:
        metadata = infer_display(entry("Close", SymbolKind.FUNCTION, "func() error"), GO)

        self.assertEqual(metadata.icon_key, "method")
        self.assertEqual(metadata.indicators, (Indicator.RETURNS_ERROR,))

    def test_lowercase_name_is_unexported(self) -> None:
        metadata = infer_display(entry("helper", SymbolKind.FUNCTION, "func()"), GO)
        self.assertEqual(metadata.indicators, (Indicator.UNEXPORTED,))

    def test_receiver_prefixed_name_is_judged_by_method_name(self) -> None:
        method = SymbolEntry(
            qualified_name="main.(*Server).start",
            simple_name="(*Server).start",
            kind=SymbolKind.METHOD,
            signature="func()",
        )
        metadata = infer_display(method, GO)
        self.assertEqual(metadata.indicators, (Indicator.UNEXPORTED, Indicator.GOROUTINE))

    def test_feature_toggles_hide_go_indicators(self) -> None:
        features = {
            "show_exported_indicator": False,
            "show_receiver_types": False,
            "detect_goroutine_funcs": False,
            "show_error_returns": False,
        }
        metadata = infer_display(
            entry("start", SymbolKind.METHOD, "func (s *Server) start() error"),
            GO,
            features=features,
        )
        self.assertEqual(metadata.indicators, ())


class NoProfileInferenceTests(unittest.TestCase):
    def test_kind_icon_and_no_indicators(self) -> None:
        metadata = infer_display(entry("Thing", SymbolKind.ENUM, "Task<int>"), None)

        self.assertEqual(metadata.icon_key, "enum")
        self.assertEqual(metadata.indicators, ())


class IconTests(unittest.TestCase):
    def test_kind_icon_key_defaults_to_object(self) -> None:
        self.assertEqual(kind_icon_key(SymbolKind.CONSTRUCTOR), "constructor")
        self.assertEqual(kind_icon_key(SymbolKind.UNKNOWN), "object")

    def test_icon_glyph_falls_back_to_object_glyph(self) -> None:
        icons = {"object": "O", "class": "C"}

        self.assertEqual(icon_glyph("class", icons), "C")
        self.assertEqual(icon_glyph("channel", icons), "O")
        self.assertEqual(icon_glyph("channel", {}), "")

    def test_indicator_glyphs_keep_order(self) -> None:
        glyphs = indicator_glyphs(
            (Indicator.GENERIC, Indicator.ASYNC),
            {Indicator.ASYNC: "a", Indicator.GENERIC: "g"},
        )
        self.assertEqual(glyphs, ("g", "a"))


if __name__ == "__main__":
    unittest.main()
