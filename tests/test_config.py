"""Tests for configuration loading, size parsing and validation."""
import os
import shutil
import tempfile
import unittest

from stablematch.core.config import (
    MatchingConfig,
    load_config,
    parse_size,
    validate_config,
)
from stablematch.core.errors import UsageError


class TestParseSize(unittest.TestCase):

    def test_valid(self):
        self.assertEqual(parse_size("5"), 5)
        self.assertEqual(parse_size(" 12 "), 12)
        self.assertEqual(parse_size("0"), 0)

    def test_missing(self):
        with self.assertRaises(UsageError):
            parse_size(None)

    def test_not_a_number(self):
        for text in ("abc", "3.5", ""):
            with self.assertRaises(UsageError):
                parse_size(text)

    def test_negative(self):
        with self.assertRaises(UsageError):
            parse_size("-4")


class TestLoadConfig(unittest.TestCase):

    def setUp(self):
        self.tmp = tempfile.mkdtemp(prefix="stablematch_cfg_")

    def tearDown(self):
        shutil.rmtree(self.tmp, ignore_errors=True)

    def _write(self, text):
        path = os.path.join(self.tmp, "cfg.yaml")
        with open(path, "w") as f:
            f.write(text)
        return path

    def test_yaml_sections(self):
        path = self._write(
            "n: 7\nseed: 3\nrepeats: 2\nverify: false\n"
            "engine:\n  schedule: queue\n  max_rounds: 50\n  trace: true\n"
            "unknown_key: 1\n"
        )
        cfg = load_config(path)
        self.assertEqual(cfg.n, 7)
        self.assertEqual(cfg.seed, 3)
        self.assertEqual(cfg.repeats, 2)
        self.assertFalse(cfg.verify)
        self.assertEqual(cfg.engine.schedule, "queue")
        self.assertEqual(cfg.engine.max_rounds, 50)
        self.assertTrue(cfg.engine.trace)
        self.assertFalse(hasattr(cfg, "unknown_key"))

    def test_empty_file_gives_defaults(self):
        cfg = load_config(self._write(""))
        self.assertEqual(cfg, MatchingConfig())

    def test_non_mapping_rejected(self):
        with self.assertRaises(UsageError):
            load_config(self._write("- 1\n- 2\n"))

    def test_malformed_yaml_rejected(self):
        with self.assertRaises(UsageError):
            load_config(self._write("engine: [unclosed\n"))

    def test_wrong_types_fail_validation(self):
        cfg = load_config(self._write("seed: abc\nengine:\n  max_rounds: many\n"))
        with self.assertRaises(UsageError) as ctx:
            validate_config(cfg)
        self.assertIn("seed", str(ctx.exception))

    def test_shipped_default_config(self):
        root = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
        cfg = load_config(os.path.join(root, "configs", "default.yaml"))
        validate_config(cfg)
        self.assertEqual(cfg.engine.schedule, "rounds")
        self.assertIsNone(cfg.engine.max_rounds)


class TestValidateConfig(unittest.TestCase):

    def test_defaults_valid(self):
        validate_config(MatchingConfig())

    def test_bad_values(self):
        bad = [
            MatchingConfig(n=-1),
            MatchingConfig(repeats=0),
            MatchingConfig(n=True),
            MatchingConfig(n=2.5),
            MatchingConfig(seed="x"),
            MatchingConfig(verify="yes"),
            MatchingConfig(write_outputs=1),
            MatchingConfig(output_dir=5),
            MatchingConfig(output_dir=""),
        ]
        for key, value in [
            ("schedule", "lifo"),
            ("schedule", None),
            ("max_rounds", 0),
            ("max_rounds", "many"),
            ("max_rounds", True),
            ("trace", "no"),
        ]:
            cfg = MatchingConfig()
            setattr(cfg.engine, key, value)
            bad.append(cfg)
        for c in bad:
            with self.assertRaises(UsageError):
                validate_config(c)


if __name__ == "__main__":
    unittest.main()
