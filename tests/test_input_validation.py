import unittest
import tempfile
import shutil

from test_utils import run_script, create_temp_file

class TestInputValidation(unittest.TestCase):

    def setUp(self):
        self.test_dir = tempfile.mkdtemp(prefix="ss_input_val_")
        self.sample_file = create_temp_file(self.test_dir, "sample.txt", b"content\n")

    def tearDown(self):
        shutil.rmtree(self.test_dir)

    def test_no_input_source(self):
        result = run_script([])
        self.assertEqual(result.returncode, 2)
        self.assertIn("error: one of the arguments -f/--file -d/--dir is required", result.stderr.lower())

    def test_mutually_exclusive_inputs(self):
        result = run_script(["-f", self.sample_file, "-d", self.test_dir])
        self.assertNotEqual(result.returncode, 0)
        self.assertIn("not allowed with argument", result.stderr)

    def test_negative_max_depth(self):
        result = run_script(["-d", self.test_dir, "--max-depth", "-1"])
        self.assertEqual(result.returncode, 2)
        self.assertIn("depth must be >= 0", result.stderr)

    def test_non_numeric_max_depth(self):
        result = run_script(["-d", self.test_dir, "--max-depth", "deep"])
        self.assertEqual(result.returncode, 2)
        self.assertIn("invalid depth: 'deep'", result.stderr)

    def test_invalid_report_mode(self):
        result = run_script(["-f", self.sample_file, "--report-mode", "nonexistent"])
        self.assertNotEqual(result.returncode, 0)
        self.assertIn("invalid choice: 'nonexistent'", result.stderr)

    def test_invalid_log_level(self):
        result = run_script(["-f", self.sample_file, "--log-level", "VERY_VERBOSE"])
        self.assertNotEqual(result.returncode, 0)
        self.assertIn("invalid choice: 'VERY_VERBOSE'", result.stderr)

if __name__ == "__main__":
    unittest.main()
