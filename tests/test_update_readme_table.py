import contextlib
import io
import json
import unittest
from pathlib import Path
from tempfile import TemporaryDirectory

import update_readme_table
import valuations
from update_readme_table import TableRow

README = """# Title

<!-- VALUATION_TABLE:START -->
stale
<!-- VALUATION_TABLE:END -->

Footer
"""


def _make_certs(cert_dir, target_n, primes=(2, 5)):
    with contextlib.redirect_stdout(io.StringIO()):
        valuations.sequential_cert_run(target_n, cert_dir, primes=list(primes))


def _run_main(argv):
    buf = io.StringIO()
    with contextlib.redirect_stdout(buf):
        code = update_readme_table.main(argv)
    return code, buf.getvalue()


class TableTests(unittest.TestCase):
    def test_render_table(self):
        rows = [
            TableRow(n=4, valuations={2: 3, 3: 1}, verified=True),
            TableRow(n=5, valuations={2: 3, 3: 1}, verified=False),
        ]
        lines = update_readme_table.render_table(rows).splitlines()
        self.assertIn("| n | v_2(n!) | v_3(n!) | verified |", lines)
        self.assertIn("|---|---|---|---|", lines)
        self.assertEqual(lines[-2], "| 4 | 3 | 1 | yes |")
        self.assertEqual(lines[-1], "| 5 | 3 | 1 | **no** |")

    def test_rendered_rows_skip_header_and_prose(self):
        rows = [TableRow(n=6, valuations={2: 4}, verified=True)]
        parsed = update_readme_table.rendered_rows(update_readme_table.render_table(rows))
        self.assertEqual(parsed, {6: "| 6 | 4 | yes |"})

    def test_stale_values_reports_changed_added_and_dropped(self):
        old = "| n | v_2(n!) | verified |\n| 1 | 0 | yes |\n| 2 | 9 | yes |\n| 9 | 7 | yes |"
        new = "| n | v_2(n!) | verified |\n| 1 | 0 | yes |\n| 2 | 1 | yes |\n| 3 | 1 | yes |"
        self.assertEqual(update_readme_table.stale_values(old, new), [2, 3, 9])

    def test_split_readme_names_missing_marker(self):
        with self.assertRaisesRegex(ValueError, "START"):
            update_readme_table.split_readme("no markers here")
        with self.assertRaisesRegex(ValueError, "END"):
            update_readme_table.split_readme("<!-- VALUATION_TABLE:START -->\nbody")

    def test_tampered_certificate_fails_legendre_recheck(self):
        with TemporaryDirectory() as tmpdir:
            certs = Path(tmpdir)
            _make_certs(certs, 6)
            path = certs / "V_6.json"
            data = json.loads(path.read_text())
            data["direct"]["2"] = 5
            path.write_text(json.dumps(data))
            rows = update_readme_table.rows_from_certificates(certs)
        self.assertEqual([r.n for r in rows if not r.verified], [6])

    def test_empty_certificate_dir_is_rejected(self):
        with self.assertRaisesRegex(ValueError, "no V_"):
            update_readme_table.rows_from_certificates(Path("no-such-cert-dir"))


class MainTests(unittest.TestCase):
    def test_update_then_check_clean(self):
        with TemporaryDirectory() as tmpdir:
            root = Path(tmpdir)
            readme = root / "README.md"
            readme.write_text(README)
            _make_certs(root / "certs", 5)
            argv = ["--cert-dir", str(root / "certs"), "--readme", str(readme)]

            code, out = _run_main(argv + ["--check"])
            self.assertEqual(code, 1)
            self.assertIn("stale rows: n=[1, 2, 3, 4, 5]", out)
            self.assertEqual(readme.read_text(), README)

            self.assertEqual(_run_main(argv)[0], 0)
            code, out = _run_main(argv + ["--check"])
            self.assertEqual(code, 0)
            self.assertIn("table is current (5 rows)", out)
            text = readme.read_text()
        self.assertNotIn("stale", text)
        self.assertIn("| 5 | 3 | 1 | yes |", text)
        self.assertTrue(text.endswith("Footer\n"))

    def test_check_lists_only_new_rows(self):
        with TemporaryDirectory() as tmpdir:
            root = Path(tmpdir)
            readme = root / "README.md"
            readme.write_text(README)
            argv = ["--cert-dir", str(root / "certs"), "--readme", str(readme)]
            _make_certs(root / "certs", 3)
            _run_main(argv)
            _make_certs(root / "certs", 5)
            code, out = _run_main(argv + ["--check"])
        self.assertEqual(code, 1)
        self.assertIn("stale rows: n=[4, 5]", out)

    def test_missing_markers_exit_with_usage_error(self):
        with TemporaryDirectory() as tmpdir:
            root = Path(tmpdir)
            readme = root / "README.md"
            readme.write_text("# no table\n")
            _make_certs(root / "certs", 2)
            with self.assertRaises(SystemExit) as ctx:
                with contextlib.redirect_stderr(io.StringIO()):
                    update_readme_table.main(
                        ["--cert-dir", str(root / "certs"), "--readme", str(readme)]
                    )
        self.assertEqual(ctx.exception.code, 2)

    def test_missing_readme_exits_with_usage_error(self):
        with TemporaryDirectory() as tmpdir:
            root = Path(tmpdir)
            _make_certs(root / "certs", 2)
            with self.assertRaises(SystemExit) as ctx:
                with contextlib.redirect_stderr(io.StringIO()):
                    update_readme_table.main(
                        ["--cert-dir", str(root / "certs"), "--readme", str(root / "nope.md")]
                    )
        self.assertEqual(ctx.exception.code, 2)


if __name__ == "__main__":
    unittest.main()
