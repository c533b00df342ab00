from __future__ import annotations

import unittest

from sharpie.filtering import filter_entries
from sharpie.symbols_types import SymbolEntry, SymbolKind


def make_entries(*qualified_names: str) -> list[SymbolEntry]:
    return [
        SymbolEntry(qualified_name=name, simple_name=name.rsplit(".", 1)[-1], kind=SymbolKind.METHOD)
        for name in qualified_names
    ]


ENTRIES = make_entries(
    "App.UserService",
    "App.UserService.GetUser",
    "App.UserService.GetUsers",
    "App.UserService.DeleteUser",
    "App.OrderService.GetOrder",
    "App.OrderService.Cancel",
)


def names(entries: list[SymbolEntry]) -> list[str]:
    return [entry.qualified_name for entry in entries]


class FilterEntriesTests(unittest.TestCase):
    def test_empty_query_returns_everything_in_order(self) -> None:
        self.assertEqual(names(filter_entries(ENTRIES, "")), names(ENTRIES))

    def test_match_is_case_insensitive_substring(self) -> None:
        self.assertEqual(
            names(filter_entries(ENTRIES, "getuser")),
            ["App.UserService.GetUser", "App.UserService.GetUsers"],
        )

    def test_query_matches_container_segments(self) -> None:
        self.assertEqual(
            names(filter_entries(ENTRIES, "OrderService")),
            ["App.OrderService.GetOrder", "App.OrderService.Cancel"],
        )

    def test_filtering_is_idempotent(self) -> None:
        once = filter_entries(ENTRIES, "User")
        self.assertEqual(filter_entries(once, "User"), once)

    def test_longer_query_narrows_result(self) -> None:
        broad = filter_entries(ENTRIES, "Get")
        narrow = filter_entries(ENTRIES, "GetU")

        self.assertTrue(set(names(narrow)) <= set(names(broad)))
        self.assertEqual(names(filter_entries(broad, "GetU")), names(narrow))

    def test_no_match_returns_empty_list(self) -> None:
        self.assertEqual(filter_entries(ENTRIES, "zzz"), [])


if __name__ == "__main__":
    unittest.main()
