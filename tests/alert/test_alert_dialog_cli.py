import contextlib
import importlib.util
import io
import unittest
from unittest.mock import patch


@unittest.skipUnless(importlib.util.find_spec("tkinter"), "tkinter is not installed")
class AlertDialogCliTests(unittest.TestCase):
    def test_prints_choice_and_joins_message_words(self) -> None:
        from alert import dialog

        stdout = io.StringIO()
        with patch.object(dialog, "show_dialog", return_value="restart") as show, \
                contextlib.redirect_stdout(stdout):
            code = dialog.main(["--silent", "--", "Tea", "is", "ready"])

        self.assertEqual(0, code)
        self.assertEqual("restart\n", stdout.getvalue())
        show.assert_called_once_with("Tea is ready", ring=False)


if __name__ == "__main__":
    unittest.main()
