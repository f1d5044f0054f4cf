import io
import json
import unittest
from unittest.mock import patch

from clawget.output import OutputContext, color_enabled


class TestColor(unittest.TestCase):
    def test_no_color_env_or_flag_disables_color(self) -> None:
        self.assertTrue(color_enabled(False, {}))
        self.assertFalse(color_enabled(False, {"NO_COLOR": "1"}))
        self.assertFalse(color_enabled(True, {}))
        self.assertTrue(color_enabled(False, {"NO_COLOR": ""}))

    def test_context_without_color_has_no_color_system(self) -> None:
        ctx = OutputContext.create(env={"NO_COLOR": "1"})
        self.assertFalse(ctx.color)
        self.assertIsNone(ctx.out.color_system)


class TestRendering(unittest.TestCase):
    def test_human_error_goes_to_stderr(self) -> None:
        stdout, stderr = io.StringIO(), io.StringIO()
        with patch("sys.stdout", new=stdout), patch("sys.stderr", new=stderr):
            ctx = OutputContext.create(no_color=True, no_emoji=True, env={})
            ctx.error(code="NOT_FOUND", message="Listing not found", hint="Check the slug")
        self.assertEqual(stdout.getvalue(), "")
        self.assertEqual(stderr.getvalue().splitlines(), ["Error: Listing not found", "   Check the slug"])

    def test_json_error_is_one_object_on_stdout(self) -> None:
        stdout, stderr = io.StringIO(), io.StringIO()
        with patch("sys.stdout", new=stdout), patch("sys.stderr", new=stderr):
            ctx = OutputContext.create(json_mode=True, env={})
            ctx.tip("ignored by parsers")
            ctx.error(code="NETWORK_ERROR", message="timed out")
        self.assertEqual(
            json.loads(stdout.getvalue()),
            {"error": True, "code": "NETWORK_ERROR", "message": "timed out", "status": None},
        )
        self.assertIn("ignored by parsers", stderr.getvalue())

    def test_field_shows_na_for_missing_values(self) -> None:
        stdout = io.StringIO()
        with patch("sys.stdout", new=stdout):
            ctx = OutputContext.create(no_color=True, env={})
            ctx.field("Creator", None)
            ctx.field("Downloads", 0)
        self.assertEqual(stdout.getvalue().splitlines(), ["Creator: N/A", "Downloads: 0"])


class TestConfirm(unittest.TestCase):
    def test_yes_flag_and_json_mode_skip_prompt(self) -> None:
        with patch("builtins.input") as mock_input:
            self.assertTrue(OutputContext.create(env={}).confirm("Go?", assume_yes=True))
            self.assertTrue(OutputContext.create(json_mode=True, env={}).confirm("Go?"))
        mock_input.assert_not_called()

    def test_answers(self) -> None:
        ctx = OutputContext.create(env={})
        with patch("sys.stderr", new=io.StringIO()):
            with patch("builtins.input", return_value=" YES "):
                self.assertTrue(ctx.confirm("Go?"))
            with patch("builtins.input", return_value=""):
                self.assertFalse(ctx.confirm("Go?"))
            with patch("builtins.input", side_effect=EOFError):
                self.assertFalse(ctx.confirm("Go?"))


if __name__ == "__main__":
    unittest.main()
