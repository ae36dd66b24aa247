"""Tests for LinkExtractor."""

import pytest

from local_anything.extractor import LinkExtractor, get_extension, get_file_name


@pytest.fixture
def extractor():
    return LinkExtractor({".png", ".pdf"})


class TestExtensionResolution:
    """Tests for URL extension and file name helpers."""

    def test_extension_ignores_query_and_fragment(self):
        assert get_extension("https://x.test/a/Report.PDF?dl=1#page=2") == ".pdf"

    def test_extension_missing(self):
        assert get_extension("https://x.test/download") == ""

    def test_extension_uses_last_segment_only(self):
        assert get_extension("https://x.test/v1.2/download") == ""

    def test_malformed_url_falls_back_to_text(self):
        assert get_extension("http://[broken/file.PNG?x=1") == ".png"

    def test_file_name_is_cleaned(self):
        assert get_file_name("https://x.test/my%20file (1).pdf") == "my_20file_1.pdf"

    def test_file_name_uses_title(self):
        assert get_file_name("https://x.test/d.png", "diagram") == "diagram.png"

    def test_file_name_untitled(self):
        assert get_file_name("https://x.test/") == "untitled"

    def test_file_name_malformed_url(self):
        assert get_file_name("http://[broken/a b.pdf") == "a_b.pdf"


class TestExtractFromText:
    """Tests for scanning text."""

    def test_markdown_link(self, extractor):
        links = extractor.extract_from_text("See [diagram](https://x.test/d.png) here.")
        assert len(links) == 1
        link = links[0]
        assert link.original_link == "https://x.test/d.png"
        assert link.file_extension == ".png"
        assert link.file_name == "diagram.png"
        assert link.is_markdown_image is False
        assert (link.position.start, link.position.end) == (4, 35)

    def test_image_bypasses_extension_filter(self, extractor):
        links = extractor.extract_from_text("![chart](https://x.test/render?id=4)")
        assert len(links) == 1
        assert links[0].is_markdown_image is True
        assert links[0].file_extension == ""
        assert links[0].file_name == "chart"

    def test_image_filtered_when_images_disabled(self):
        extractor = LinkExtractor({".pdf"}, include_images=False)
        assert extractor.extract_from_text("![chart](https://x.test/render?id=4)") == []

    def test_bare_url(self, extractor):
        links = extractor.extract_from_text("Download https://x.test/files/report.pdf now")
        assert [link.original_link for link in links] == ["https://x.test/files/report.pdf"]
        assert links[0].file_name == "report.pdf"

    def test_bare_url_trailing_punctuation(self, extractor):
        links = extractor.extract_from_text("Get it at https://x.test/report.pdf.")
        assert links[0].original_link == "https://x.test/report.pdf"

    def test_no_extensions_selected(self):
        assert LinkExtractor(set()).extract_from_text("https://x.test/report.pdf") == []

    def test_unlisted_extension_skipped(self, extractor):
        assert extractor.extract_from_text("[app](https://x.test/setup.exe)") == []

    def test_case_insensitive_extension(self):
        extractor = LinkExtractor({".PDF"})
        assert len(extractor.extract_from_text("https://x.test/A.Pdf")) == 1

    def test_non_http_links_skipped(self, extractor):
        text = "![local](images/a.png) [doc](www.x.test/a.pdf) [f](ftp://x.test/a.pdf)"
        assert extractor.extract_from_text(text) == []

    def test_link_beats_bare_url(self, extractor):
        text = "https://x.test/a.pdf and [Annual report](https://x.test/a.pdf)"
        links = extractor.extract_from_text(text)
        assert len(links) == 1
        assert links[0].file_name == "Annual_report.pdf"
        assert links[0].position.start == text.index("[")

    def test_image_beats_link(self, extractor):
        text = "[x](https://x.test/a.png) ![pic](https://x.test/a.png)"
        links = extractor.extract_from_text(text)
        assert len(links) == 1
        assert links[0].is_markdown_image is True
        assert links[0].file_name == "pic.png"

    def test_duplicates_reported_once(self, extractor):
        text = "https://x.test/a.pdf https://x.test/a.pdf"
        assert len(extractor.extract_from_text(text)) == 1

    def test_order_is_stable(self, extractor):
        text = "https://x.test/c.pdf [b](https://x.test/b.pdf) ![a](https://x.test/a.png)"
        first = [link.original_link for link in extractor.extract_from_text(text)]
        second = [link.original_link for link in extractor.extract_from_text(text)]
        assert first == second == [
            "https://x.test/a.png",
            "https://x.test/b.pdf",
            "https://x.test/c.pdf",
        ]

    def test_link_with_title_attribute(self, extractor):
        links = extractor.extract_from_text('[doc](https://x.test/a.pdf "Quarterly")')
        assert links[0].original_link == "https://x.test/a.pdf"

    @pytest.mark.parametrize(
        "text",
        [
            "http://[::1",
            "https://x.test/%zz%.pdf",
            "[a](http://%%%)",
            "![](https://)",
            "https://.",
            "",
        ],
    )
    def test_never_raises(self, extractor, text):
        extractor.extract_from_text(text)
