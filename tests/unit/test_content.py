"""
Unit tests for content classification and name deduplication.
"""

import re
from unittest.mock import patch

from ziprelay.content.classifier import ContentClassifier
from ziprelay.content.naming import NameDeduplicator, add_disambiguator
from ziprelay.models.processing_models import ExtractedItem

DISAMBIGUATED = re.compile(r"^a-[0-9a-f]{8}\.xml$")


class TestContentClassifier:
    """Test keep/filter decisions and output naming."""

    def test_no_patterns_keeps_original_name(self):
        """Without patterns every item is kept under its own name."""
        classifier = ContentClassifier()
        result = classifier.classify(ExtractedItem("notes.txt", b"plain text"))

        assert result.keep is True
        assert result.name == "notes.txt"

    def test_filter_pattern_is_content_based(self):
        """Entries with matching content are filtered regardless of name."""
        classifier = ContentClassifier(filter_pattern=r"<Heartbeat")

        first = classifier.classify(ExtractedItem("a.xml", b"<Heartbeat/>"))
        second = classifier.classify(ExtractedItem("completely-different.bin", b"x<Heartbeat>"))
        kept = classifier.classify(ExtractedItem("a.xml", b"<Order/>"))

        assert first.keep is False
        assert second.keep is False
        assert kept.keep is True

    def test_filename_pattern_uses_first_group(self):
        """The first capture group becomes the name with .xml appended."""
        classifier = ContentClassifier(filename_pattern=r"<Id>(\w+)</Id><Seq>(\d+)</Seq>")
        result = classifier.classify(ExtractedItem("raw.dat", b"<Id>ORD42</Id><Seq>7</Seq>"))

        assert result.name == "ORD42.xml"

    def test_unmatched_filename_pattern_falls_back(self):
        """An unmatched naming pattern leaves the original name verbatim."""
        classifier = ContentClassifier(filename_pattern=r"<Id>(\w+)</Id>")
        result = classifier.classify(ExtractedItem("raw.dat", b"<Other/>"))

        assert result.name == "raw.dat"

    def test_pattern_without_group_falls_back(self):
        """A pattern with no capture group cannot derive a name."""
        classifier = ContentClassifier(filename_pattern=r"<Id>\w+</Id>")
        result = classifier.classify(ExtractedItem("raw.dat", b"<Id>X</Id>"))

        assert result.name == "raw.dat"

    def test_undecodable_bytes_are_tolerated(self):
        """Invalid UTF-8 does not break classification."""
        classifier = ContentClassifier(filter_pattern="never")
        result = classifier.classify(ExtractedItem("bin.dat", b"\xff\xfe\x00"))

        assert result.keep is True

    def test_classified_item_keeps_payload(self):
        """The original item travels with the decision."""
        item = ExtractedItem("a.xml", b"<a/>")
        assert ContentClassifier().classify(item).item is item


class TestNameDeduplication:
    """Test collision-safe renaming within one archive."""

    def test_add_disambiguator_before_extension(self):
        assert add_disambiguator("a.xml", "deadbeef") == "a-deadbeef.xml"
        assert add_disambiguator("archive.tar.gz", "deadbeef") == "archive.tar-deadbeef.gz"

    def test_add_disambiguator_without_extension(self):
        assert add_disambiguator("README", "deadbeef") == "README-deadbeef"
        assert add_disambiguator("v1.2/notes", "deadbeef") == "v1.2/notes-deadbeef"

    def test_first_occurrence_unchanged(self):
        """The first use of a name passes through."""
        deduplicator = NameDeduplicator()
        assert deduplicator.resolve("a.xml") == "a.xml"
        assert "a.xml" in deduplicator

    def test_duplicates_get_eight_hex_token(self):
        """Later occurrences get a random 8-hex token before the extension."""
        deduplicator = NameDeduplicator()
        names = [deduplicator.resolve("a.xml") for _ in range(5)]

        assert names[0] == "a.xml"
        assert all(DISAMBIGUATED.match(name) for name in names[1:])
        assert len(set(names)) == 5
        assert len(deduplicator) == 5

    def test_token_collision_is_retried(self):
        """A disambiguated name that is already used is regenerated."""
        deduplicator = NameDeduplicator()
        deduplicator.resolve("a.xml")
        deduplicator.resolve("a-00000000.xml")

        tokens = iter(["00000000" + "0" * 24, "11111111" + "1" * 24])
        with patch("ziprelay.content.naming.uuid.uuid4") as uuid4:
            uuid4.side_effect = lambda: type("U", (), {"hex": next(tokens)})()
            assert deduplicator.resolve("a.xml") == "a-11111111.xml"

    def test_slash_variants_collide(self):
        """Names that join to the same key are treated as duplicates."""
        deduplicator = NameDeduplicator()

        first = deduplicator.resolve("a.xml")
        second = deduplicator.resolve("/a.xml")

        assert first == "a.xml"
        assert DISAMBIGUATED.match(second)
        assert deduplicator.resolve("/b.xml/") == "b.xml"

    def test_scopes_are_independent(self):
        """A fresh deduplicator knows nothing of earlier archives."""
        NameDeduplicator().resolve("a.xml")
        assert NameDeduplicator().resolve("a.xml") == "a.xml"
