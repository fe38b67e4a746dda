"""Tests for presentation-time text normalizers."""

import pytest

from flickr_search.app import normalizers
from flickr_search.app.image_models import ImageRecord
from flickr_search.app.normalizers import (
    ShareItems,
    extract_author_name,
    format_published_date,
    image_detail,
    sanitize_description,
    share_items,
)


@pytest.fixture
def record():
    return ImageRecord(
        title="Porcupine quills",
        media_url="https://live.staticflickr.com/65535/53992870133_f00dfeed42_m.jpg",
        author='nobody@flickr.com ("Mae")',
        description="<p>Mae posted a photo:</p><p>Close &amp; sharp</p>",
        published="2024-09-16T09:30:00Z",
    )


class TestExtractAuthorName:
    @pytest.mark.parametrize(
        "raw", ["", "plain name", "nobody@flickr.com", "only ) closing", "open ( only"]
    )
    def test_passthrough_without_parenthesized_segment(self, raw):
        assert extract_author_name(raw) == raw

    @pytest.mark.parametrize(
        "prefix,name,suffix",
        [
            ("nobody@flickr.com ", "Display Name", ""),
            ("", "x", ""),
            ("a@b.c ", "", " trailing"),
            ("mail ", "Name with spaces", ") extra"),
        ],
    )
    def test_returns_segment_between_parentheses(self, prefix, name, suffix):
        assert extract_author_name(prefix + "(" + name + ")" + suffix) == name

    def test_real_feed_author_keeps_quotes(self):
        assert extract_author_name('nobody@flickr.com ("Mae")') == '"Mae"'

    def test_closing_before_opening_is_no_match(self):
        assert extract_author_name(")name(") == ")name("

    def test_uses_first_closing_after_opening(self):
        assert extract_author_name(")a(b)c)") == "b"


class TestSanitizeDescription:
    @pytest.mark.parametrize(
        "text",
        ["", "Just a caption", "  spaced   out  ", "Tom & Jerry", "5 < 6 > 4"],
    )
    def test_plain_text_is_unchanged(self, text):
        assert sanitize_description(text) == text

    def test_feed_description(self, feed_data):
        html = feed_data["items"][0]["description"]

        assert sanitize_description(html) == (
            "Wildlife Lens posted a photo:\n"
            "Climbing down a birch & looking for breakfast."
        )

    def test_entities_are_decoded(self):
        assert sanitize_description("caf&eacute; &#38; bar") == "café & bar"

    def test_line_breaks_and_script(self):
        html = "one<br/>two<script>alert(1)</script><div>three</div>"

        assert sanitize_description(html) == "one\ntwo\nthree"

    def test_unclosed_markup_does_not_raise(self):
        assert sanitize_description("<p>broken <b>bold") == "broken bold"

    def test_parser_failure_returns_original(self, mocker):
        mocker.patch.object(
            normalizers._TextExtractor, "feed", side_effect=AssertionError("boom")
        )
        html = "<p>anything</p>"

        assert sanitize_description(html) == html


class TestFormatPublishedDate:
    def test_utc_timestamp(self):
        result = format_published_date("2024-09-16T18:42:11Z", tz=None)

        assert result == "Sep 16, 2024 at 6:42 PM"

    def test_keeps_own_offset_without_display_timezone(self):
        result = format_published_date("2024-01-05T00:07:00+02:00", tz=None)

        assert result == "Jan 5, 2024 at 12:07 AM"

    def test_unknown_display_timezone_keeps_offset(self):
        result = format_published_date("2024-09-16T18:42:11Z", tz="Not/AZone")

        assert result == "Sep 16, 2024 at 6:42 PM"

    @pytest.mark.parametrize(
        "value", ["", "yesterday", "2024-13-45T99:00:00Z", "16/09/2024 18:42"]
    )
    def test_invalid_input_returned_exactly(self, value):
        assert format_published_date(value, tz=None) == value

    def test_valid_input_is_reformatted(self):
        value = "2024-09-16T09:30:00Z"

        assert format_published_date(value, tz=None) != value


class TestShareAndDetail:
    def test_share_items(self, record):
        items = share_items(record)

        assert isinstance(items, ShareItems)
        assert items == (
            "Porcupine quills",
            '"Mae"',
            "Mae posted a photo:\nClose & sharp",
            record.media_url,
        )

    def test_image_detail(self, record):
        detail = image_detail(record, tz=None)

        assert detail.id == record.id
        assert detail.author == '"Mae"'
        assert detail.byline == 'By "Mae"'
        assert detail.published == "Sep 16, 2024 at 9:30 AM"
        assert detail.published_line == "Published: Sep 16, 2024 at 9:30 AM"
        assert detail.accessibility_label == 'Porcupine quills by "Mae"'
        assert detail.share == share_items(record)

    def test_record_is_not_mutated(self, record):
        before = (record.author, record.description, record.published)

        image_detail(record, tz=None)

        assert (record.author, record.description, record.published) == before


def test_less_than_before_letter_is_parsed_as_tag():
    # "<y and y>" reads as a tag, the way a browser would render it
    assert sanitize_description("if x<y and y>z") == "if xz"
