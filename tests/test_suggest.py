import unittest

from clawget.suggest import edit_distance, suggest

COMMANDS = ["auth", "register", "agent", "wallet", "skills", "souls", "purchases", "categories", "reviews", "search", "buy", "list"]


class TestEditDistance(unittest.TestCase):
    def test_adjacent_swap_costs_one(self) -> None:
        self.assertEqual(edit_distance("serach", "search"), 1)
        self.assertEqual(edit_distance("ab", "ba"), 1)

    def test_basic_edits(self) -> None:
        self.assertEqual(edit_distance("", "abc"), 3)
        self.assertEqual(edit_distance("wallet", "wallet"), 0)
        self.assertEqual(edit_distance("kitten", "sitting"), 3)


class TestSuggest(unittest.TestCase):
    def test_typo_suggests_the_intended_command(self) -> None:
        self.assertEqual(suggest("serach", COMMANDS), ["search"])
        self.assertEqual(suggest("walet", COMMANDS), ["wallet"])

    def test_nothing_beyond_distance_two(self) -> None:
        self.assertEqual(suggest("deploy", COMMANDS), [])

    def test_ties_are_all_returned(self) -> None:
        self.assertEqual(suggest("soul", ["souls", "soup"]), ["souls", "soup"])


if __name__ == "__main__":
    unittest.main()
