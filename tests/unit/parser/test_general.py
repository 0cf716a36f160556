"""Tests for generic extraction of unclassified documents."""

from grantflow.services.parser.extract.general import extract_general


def test_meeting_notes(meeting_notes_text):
    extracted = extract_general(meeting_notes_text)

    assert [e.normalized for e in extracted.emails] == ["john@example.com"]
    assert [p.formatted for p in extracted.phones] == ["555-987-6543"]
    assert extracted.dates == []
    assert extracted.addresses == []
    assert extracted.summary.value.startswith("Document contains: ")
    assert "1 email(s)" in extracted.summary.value
    assert "1 phone(s)" in extracted.summary.value
    assert "date(s)" not in extracted.summary.value
    assert extracted.summary.confidence == 1.0


def test_nothing_found():
    extracted = extract_general("lorem ipsum dolor")

    assert extracted.summary.value == "Document parsed successfully"
    assert extracted.text_preview.value == "lorem ipsum dolor"


def test_preview_is_truncated_normalized_text():
    text = "word\n" * 200

    extracted = extract_general(text)

    preview = extracted.text_preview.value
    assert preview.endswith("...")
    assert len(preview) == 503
    assert "\n" not in preview
    assert extracted.text_preview.confidence == 1.0
