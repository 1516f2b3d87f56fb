import os
import sys
import tempfile
import unittest
from pathlib import Path
from unittest.mock import patch

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from tailor_engine.core.config import scoring  # noqa: E402
from tailor_engine.core.config.scoring import (  # noqa: E402
    get_scoring_config,
    get_scoring_value,
    reset_scoring_config_cache,
)


class ScoringConfigTests(unittest.TestCase):
    def tearDown(self):
        reset_scoring_config_cache()

    def test_loader_and_value_lookup(self):
        config = get_scoring_config()
        self.assertIsInstance(config, dict)
        self.assertEqual(get_scoring_value("matching.thresholds.fuzzy"), 0.6)
        self.assertEqual(get_scoring_value("matching.thresholds.partial"), 0.3)
        self.assertEqual(get_scoring_value("matching.thresholds.strong"), 0.85)
        self.assertEqual(get_scoring_value("extraction.weights.default"), 0.7)

    def test_missing_path_returns_default(self):
        self.assertEqual(get_scoring_value("matching.unknown.key", 7), 7)
        self.assertIsNone(get_scoring_value(""))

    def test_invalid_yaml_raises_runtime_error(self):
        with tempfile.TemporaryDirectory() as tmp:
            path = Path(tmp) / "scoring.yaml"
            path.write_text("- just\n- a list\n", encoding="utf-8")
            reset_scoring_config_cache()
            with patch.object(scoring, "_scoring_config_path", return_value=path):
                with self.assertRaises(RuntimeError):
                    get_scoring_config()

    def test_missing_file_raises_runtime_error(self):
        reset_scoring_config_cache()
        missing = Path(os.sep) / "nonexistent" / "scoring.yaml"
        with patch.object(scoring, "_scoring_config_path", return_value=missing):
            with self.assertRaises(RuntimeError):
                get_scoring_config()


if __name__ == "__main__":
    unittest.main()
