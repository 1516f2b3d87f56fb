import json
import sys
import tempfile
import unittest
from pathlib import Path

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from tailor_engine.normalize.utils import canonical_key  # noqa: E402
from tailor_engine.taxonomy.local_lexicon import LocalLexicon  # noqa: E402


class LexiconTests(unittest.TestCase):
    def test_synonym_normalization_resolves_canonical_term(self):
        lexicon = LocalLexicon()
        normalized, canonical = lexicon.normalize_skill("K8s")
        self.assertEqual(normalized, "k8s")
        self.assertEqual(canonical, "Kubernetes")

    def test_alias_lookup_returns_canonical_entry(self):
        lexicon = LocalLexicon()
        entry = lexicon.lookup(canonical_key("Amazon Web Services"))
        self.assertIsNotNone(entry)
        self.assertEqual(entry.text, "AWS")
        self.assertEqual(entry.category, "tool")

    def test_tables_are_versioned_and_classified(self):
        lexicon = LocalLexicon()
        self.assertTrue(lexicon.version)
        self.assertEqual(lexicon.lookup(canonical_key("communication skills")).category, "soft-skill")
        self.assertEqual(lexicon.lookup(canonical_key("PMP")).category, "certification")
        self.assertEqual(lexicon.section_for_header("Preferred Qualifications:"), "preferred")
        self.assertIn("tool", lexicon.adjacent_categories("skill"))
        self.assertIn("nice to have", lexicon.markers("preferred"))

    def test_injected_lexicon_file(self):
        payload = {
            "version": "test-1",
            "skills": ["Widget Tuning"],
            "tools": [],
            "soft_skills": [],
            "stoplist": ["the"],
        }
        with tempfile.TemporaryDirectory() as tmp:
            path = Path(tmp) / "lexicon.json"
            path.write_text(json.dumps(payload), encoding="utf-8")
            lexicon = LocalLexicon(path)
        self.assertEqual(lexicon.version, "test-1")
        self.assertEqual(lexicon.lookup(canonical_key("widget tuning")).text, "Widget Tuning")
        self.assertEqual(lexicon.adjacent_categories("skill"), ("skill",))

    def test_missing_or_malformed_file_raises_runtime_error(self):
        with self.assertRaises(RuntimeError):
            LocalLexicon("/nonexistent/lexicon.json")
        with tempfile.TemporaryDirectory() as tmp:
            path = Path(tmp) / "broken.json"
            path.write_text("{not json", encoding="utf-8")
            with self.assertRaises(RuntimeError):
                LocalLexicon(path)


if __name__ == "__main__":
    unittest.main()
