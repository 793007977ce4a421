"""Integration tests for undoing a multi-element batch across files."""

from hemingway.models.edit import EditContext
from hemingway.services.edit_session import EditRequest, EditSession

HTML = ["**/*.html"]
FEATURE = EditContext(tag_name="li", class_name="feature", parent_tag="ul")

FEATURES = (
    "<ul>\n"
    '  <li class="feature">Simple</li>\n'
    '  <li class="feature">Fast</li>\n'
    "</ul>\n"
)
HEADER = "<header><h1>Hello</h1></header>\n"


def _apply_batch(engine):
    session = EditSession(engine, HTML)
    entries = session.apply_batch([
        EditRequest("li-2", "Fast", "Go", FEATURE),
        EditRequest("h1", "Hello", "Hi", EditContext(tag_name="h1")),
        EditRequest("li-1", "Simple", "Go now", FEATURE),
    ])
    return session, entries


class TestBatchUndo:
    """Test reverse-order undo of a batch whose new texts overlap."""

    def test_forward_batch_writes_every_file(self, engine, write_file):
        features = write_file("features.html", FEATURES)
        header = write_file("header.html", HEADER)

        _, entries = _apply_batch(engine)

        assert all(entry.write_outcome.success for entry in entries)
        assert features.read_text(encoding="utf-8") == (
            "<ul>\n"
            '  <li class="feature">Go now</li>\n'
            '  <li class="feature">Go</li>\n'
            "</ul>\n"
        )
        assert header.read_text(encoding="utf-8") == "<header><h1>Hi</h1></header>\n"

    def test_undo_restores_original_bytes(self, engine, write_file):
        features = write_file("features.html", FEATURES)
        header = write_file("header.html", HEADER)
        session, _ = _apply_batch(engine)

        snapshot = session.undo()

        assert snapshot.fully_reverted
        assert features.read_text(encoding="utf-8") == FEATURES
        assert header.read_text(encoding="utf-8") == HEADER

    def test_forward_order_reversal_corrupts_file(self, engine, write_file):
        """Reversing in application order shows why undo walks backwards.

        "Go" is a prefix of "Go now", so restoring the first entry first
        rewrites the wrong list item and the last reversal finds nothing.
        """
        features = write_file("features.html", FEATURES)
        write_file("header.html", HEADER)
        session, entries = _apply_batch(engine)

        outcomes = [
            engine.rewrite(entry.new_text, entry.old_text, entry.context, HTML)
            for entry in entries
        ]

        assert features.read_text(encoding="utf-8") == (
            "<ul>\n"
            '  <li class="feature">Fast now</li>\n'
            '  <li class="feature">Go</li>\n'
            "</ul>\n"
        )
        assert not outcomes[2].success
        assert session.can_undo
