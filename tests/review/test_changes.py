"""Tests for drafts and change detection."""

import pytest

from dubdesk.errors import ValidationError
from dubdesk.models import ReviewStatus, Role
from dubdesk.review.changes import (
    DIRECTOR,
    TRANSCRIBER,
    TRANSLATOR,
    VOICE_OVER,
    Draft,
    build_patch,
    has_changes,
    schema_for,
)


class TestDraft:
    """Tests for loading and editing drafts."""

    def test_fresh_draft_has_no_changes(self, records) -> None:
        """A draft loaded from a record is clean."""
        for record in records:
            assert not has_changes(Draft.from_record(record, TRANSCRIBER), record)

    def test_empty_times_render_default(self, records) -> None:
        """Empty time fields load as 00:00.000 and stay clean."""
        draft = Draft.from_record(records[3], TRANSCRIBER)
        assert draft.get("time_start") == "00:00.000"
        assert draft.get("time_end") == "00:00.000"
        assert not has_changes(draft, records[3])

    def test_numeric_times_normalized(self, records) -> None:
        """Numeric seconds compare equal to their display form."""
        draft = Draft.from_record(records[2], TRANSCRIBER)
        assert draft.get("time_start") == "00:05.250"
        draft.set("time_start", "0:5.25")
        assert not has_changes(draft, records[2])

    @pytest.mark.parametrize(
        "name,value",
        [
            ("character", "CAROL"),
            ("dialogue.original", "Hello"),
            ("time_start", "00:01.001"),
            ("time_end", 3.0),
        ],
    )
    def test_single_edit_is_a_change(self, records, name, value) -> None:
        """Any one field edit makes the draft dirty."""
        draft = Draft.from_record(records[0], TRANSCRIBER)
        draft.set(name, value)
        assert has_changes(draft, records[0])

    def test_edit_back_is_clean(self, records) -> None:
        """Reverting an edit clears the change."""
        draft = Draft.from_record(records[0], TRANSCRIBER)
        draft.set("character", "CAROL")
        draft.set("character", "ALICE")
        assert not has_changes(draft, records[0])

    def test_field_outside_schema_rejected(self, records) -> None:
        """A role cannot edit fields it does not own."""
        draft = Draft.from_record(records[0], TRANSLATOR)
        with pytest.raises(ValidationError, match="not editable"):
            draft.set("dialogue.original", "nope")

    def test_nothing_displayed(self) -> None:
        """No draft or no record means no changes."""
        assert has_changes(None, None) is False


class TestSchemas:
    """Tests for per-role field schemas."""

    def test_role_mapping(self) -> None:
        """Each role maps to its schema."""
        assert schema_for(Role.TRANSCRIBER) is TRANSCRIBER
        assert schema_for(Role.VOICE_OVER) is VOICE_OVER
        assert schema_for(Role.SR_DIRECTOR) is DIRECTOR

    def test_director_flags(self, records) -> None:
        """Requesting a revision sets flag and status."""
        draft = Draft.from_record(records[0], DIRECTOR)
        draft.set("revision_requested", True)
        draft.set("director_notes", "Too fast")
        assert has_changes(draft, records[0])

        updated = draft.apply_to(records[0])
        assert updated.revision_requested is True
        assert updated.director_notes == "Too fast"
        assert updated.status == ReviewStatus.REVISION_REQUESTED

    def test_director_clean_approves(self, records) -> None:
        """Clearing both flags approves the line."""
        draft = Draft.from_record(records[1], DIRECTOR)
        draft.set("revision_requested", False)
        assert draft.apply_to(records[1]).status == ReviewStatus.APPROVED

    def test_apply_does_not_mutate_original(self, records) -> None:
        """The saved snapshot is left untouched."""
        draft = Draft.from_record(records[0], TRANSCRIBER)
        draft.set("dialogue.original", "Changed")
        draft.apply_to(records[0])
        assert records[0].dialogue.original == "Hello there"


class TestBuildPatch:
    """Tests for build_patch."""

    def test_transcriber_patch(self, records) -> None:
        """The patch carries the edited fields under wire names plus status."""
        draft = Draft.from_record(records[0], TRANSCRIBER)
        draft.set("character", "CAROL")
        draft.set("time_end", "00:03.000")

        patch = build_patch(records[0], draft)

        assert set(patch) == {"status", "character", "characterName", "dialogue", "timeStart", "timeEnd"}
        assert patch["character"] == "CAROL"
        assert patch["characterName"] == "CAROL"
        assert patch["timeEnd"] == "00:03.000"
        assert patch["dialogue"]["translated"] == "Hola"
        assert patch["status"] == "transcribed"

    def test_voice_over_patch(self, records) -> None:
        """A recorded take marks the line as voiced."""
        draft = Draft.from_record(records[1], VOICE_OVER)
        draft.set("recorded_audio_url", "https://cdn.test/takes/2.wav")

        patch = build_patch(records[1], draft)

        assert patch["recordedAudioUrl"] == "https://cdn.test/takes/2.wav"
        assert patch["status"] == "voice-over-added"
        assert "voiceOverNotes" in patch
