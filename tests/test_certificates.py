import json
import unittest
from pathlib import Path
from tempfile import TemporaryDirectory

from certificates import certificate_paths, load_certificate, save_certificate
from crosscheck import CrossCheck


class CertificateTests(unittest.TestCase):
    def test_save_certificate_includes_metadata(self):
        checks = [
            CrossCheck(20, 2, 18, 18, 0.0, 0.0),
            CrossCheck(20, 3, 8, 8, 0.0, 0.0),
        ]
        with TemporaryDirectory() as tmpdir:
            path = Path(tmpdir) / "cert.json"
            save_certificate(20, checks, path, runtime=1.5, factorial_digits=19)
            data = json.loads(path.read_text())
        self.assertEqual(data["n"], 20)
        self.assertEqual(data["primes"], [2, 3])
        self.assertEqual(data["direct"], {"2": 18, "3": 8})
        self.assertEqual(data["legendre"], {"2": 18, "3": 8})
        self.assertTrue(data["agree"])
        self.assertEqual(data["factorial_digits"], 19)
        self.assertEqual(data["runtime_seconds"], 1.5)

    def test_disagreement_is_recorded(self):
        checks = [CrossCheck(4, 3, 2, 1, 0.0, 0.0)]
        with TemporaryDirectory() as tmpdir:
            path = Path(tmpdir) / "V_4.json"
            save_certificate(4, checks, path, runtime=None)
            data = load_certificate(path)
        self.assertFalse(data["agree"])
        self.assertEqual(data["direct"], {3: 2})
        self.assertEqual(data["legendre"], {3: 1})
        self.assertIsNone(data["runtime_seconds"])

    def test_certificate_paths_sorted_numerically(self):
        with TemporaryDirectory() as tmpdir:
            root = Path(tmpdir)
            for n in (10, 2, 1):
                save_certificate(n, [], root / f"V_{n}.json", runtime=None)
            (root / "notes.json").write_text("{}")
            names = [p.name for p in certificate_paths(root)]
        self.assertEqual(names, ["V_1.json", "V_2.json", "V_10.json"])

    def test_certificate_paths_missing_dir(self):
        self.assertEqual(certificate_paths(Path("does-not-exist-anywhere")), [])


if __name__ == "__main__":
    unittest.main()
