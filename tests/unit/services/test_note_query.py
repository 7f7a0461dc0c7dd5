"""Unit tests for note search, tag filtering and display ordering."""

from datetime import timedelta

from lingo.services.note_query import all_tags, filter_notes, matches, sort_for_display


class TestMatches:
    def test_query_matches_title_content_and_tags(self, make_note):
        note = make_note(title="KYC", content="Know your customer", tags=["AML"])
        assert matches(note, "kyc")
        assert matches(note, "CUSTOMER")
        assert matches(note, "aml")
        assert not matches(note, "gdpr")

    def test_tag_filter_is_exact(self, make_note):
        note = make_note(tags=["AML"])
        assert matches(note, tag="AML")
        assert not matches(note, tag="aml")

    def test_empty_query_matches_everything(self, make_note):
        assert matches(make_note())


class TestOrdering:
    def test_favorites_first_then_most_recent(self, sample_notes):
        ordered = sort_for_display(sample_notes)
        assert [note.id for note in ordered] == ["note-2", "note-3", "note-1"]

    def test_recent_edit_moves_up(self, sample_notes):
        older = sample_notes[2].model_copy(
            update={"last_modified": sample_notes[0].last_modified + timedelta(hours=1)}
        )
        ordered = sort_for_display([sample_notes[0], sample_notes[1], older])
        assert [note.id for note in ordered] == ["note-2", "note-1", "note-3"]


def test_filter_notes(sample_notes):
    assert [n.id for n in filter_notes(sample_notes, tag="GDPR")] == ["note-2"]
    assert [n.id for n in filter_notes(sample_notes, "partner")] == ["note-1"]


def test_all_tags_sorted(sample_notes):
    assert all_tags(sample_notes) == ["AML", "GDPR", "privacy"]
