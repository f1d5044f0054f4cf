import unittest

from clawget.envelope import as_list, normalize_pagination, pick, unwrap


class TestUnwrap(unittest.TestCase):
    def test_keys_found_on_body_or_under_data(self) -> None:
        bare = {"listings": [1], "pagination": None}
        wrapped = {"success": True, "data": {"listings": [2]}}
        self.assertIs(unwrap(bare, "listings"), bare)
        self.assertEqual(unwrap(wrapped, "listings"), {"listings": [2]})
        self.assertEqual(unwrap({"other": 1}, "listings"), {})
        self.assertEqual(unwrap(None, "listings"), {})

    def test_without_keys_only_envelopes_are_opened(self) -> None:
        self.assertEqual(unwrap({"success": True, "data": {"a": 1}}), {"a": 1})
        self.assertEqual(unwrap({"data": [1, 2]}), [1, 2])
        body = {"data": {"a": 1}, "meta": {}}
        self.assertIs(unwrap(body), body)
        self.assertEqual(unwrap([1]), [1])

    def test_pick_skips_none_values(self) -> None:
        self.assertEqual(pick({"listings": None, "skills": [1]}, "listings", "skills"), [1])
        self.assertEqual(pick({}, "x", default="d"), "d")


class TestPagination(unittest.TestCase):
    def test_defaults_when_absent(self) -> None:
        self.assertEqual(
            normalize_pagination(None),
            {"page": 1, "limit": 10, "total": 0, "totalPages": 0, "hasMore": False},
        )

    def test_requested_values_fill_gaps(self) -> None:
        self.assertEqual(
            normalize_pagination({"total": 45}, page=2, limit=20),
            {"page": 2, "limit": 20, "total": 45, "totalPages": 3, "hasMore": True},
        )

    def test_backend_values_win_and_text_numbers_are_read(self) -> None:
        p = normalize_pagination({"page": "3", "limit": 10, "total": 30, "totalPages": 3, "hasMore": False}, page=1)
        self.assertEqual(p, {"page": 3, "limit": 10, "total": 30, "totalPages": 3, "hasMore": False})

    def test_zero_limit_does_not_divide(self) -> None:
        self.assertEqual(normalize_pagination({"limit": 0, "total": 5})["totalPages"], 0)


class TestAsList(unittest.TestCase):
    def test_non_lists_become_empty(self) -> None:
        self.assertEqual(as_list(None), [])
        self.assertEqual(as_list({"a": 1}), [])
        self.assertEqual(as_list([1]), [1])


if __name__ == "__main__":
    unittest.main()
