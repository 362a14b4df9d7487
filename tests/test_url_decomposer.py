"""Tests for file URL decomposition."""

import pytest

from allyfilter.config import Settings
from allyfilter.models.files import FileIdentity
from allyfilter.services.url_decomposer import (
    build_file_url,
    decompose_url,
    is_local_file_url,
    relative_file_path,
)

URL_SHAPES = {
    "somecomponent": "/123/somecomponent/somearea/myfile.test",
    "label": "/123/label/somearea/0/myfile.test",
    "question": "/123/question/somearea/123/5/0/myfile.test",
}


@pytest.fixture
def settings() -> Settings:
    return Settings(_env_file=None)


class TestDecomposeUrl:
    """Tests for decompose_url."""

    @pytest.mark.parametrize("fileparam", ["", "?file="])
    @pytest.mark.parametrize("slash_arguments", [True, False])
    @pytest.mark.parametrize("component", sorted(URL_SHAPES))
    def test_component_url_shapes(self, settings, component, slash_arguments, fileparam):
        """Every known URL shape yields the same identity under both dialects."""
        url = f"http://test.com/pluginfile.php{fileparam}{URL_SHAPES[component]}"
        identity = decompose_url(url, slash_arguments, settings)

        assert identity is not None
        assert identity.as_tuple() == (123, component, "somearea", 0, "myfile.test")

    def test_label_example(self, settings):
        """The item id segment of label URLs is consumed."""
        identity = decompose_url(
            "https://www.example.com/moodle/pluginfile.php/123/label/somearea/0/myfile.test", True, settings
        )
        assert identity == FileIdentity(
            context_id=123,
            component="label",
            file_area="somearea",
            item_id=0,
            file_path="/",
            file_name="myfile.test",
        )

    def test_label_item_id(self, settings):
        """A non-zero label item id is kept."""
        identity = decompose_url("http://test.com/pluginfile.php/5/label/area/42/pic.png", True, settings)
        assert identity.item_id == 42
        assert identity.file_path == "/"

    def test_question_keeps_third_id(self, settings):
        """Question URLs skip two ids and keep the following one as item id."""
        identity = decompose_url("http://test.com/pluginfile.php/5/question/qtext/11/2/7/pic.png", True, settings)
        assert identity.item_id == 7
        assert identity.file_name == "pic.png"

    def test_other_components_keep_segments_as_path(self, settings):
        """Segments between area and file name form the file path."""
        identity = decompose_url("http://test.com/pluginfile.php/5/mod_label/intro/a/b%20c/pic.png", True, settings)
        assert identity.item_id == 0
        assert identity.file_path == "/a/b c/"
        assert identity.file_name == "pic.png"

    def test_file_name_is_url_decoded(self, settings):
        """Percent-encoded file names are decoded."""
        identity = decompose_url(
            "http://test.com/pluginfile.php/5/mod_label/intro/test%20(3%3A%3F).png", True, settings
        )
        assert identity.file_name == "test (3:?).png"

    def test_path_style_ignores_query_string(self, settings):
        """Download flags after the path do not leak into the file name."""
        identity = decompose_url("http://test.com/pluginfile.php/5/mod_label/intro/pic.png?forcedownload=1", True, settings)
        assert identity.file_name == "pic.png"

    def test_query_style_stops_at_ampersand(self, settings):
        """Extra query parameters after the file value are ignored."""
        identity = decompose_url(
            "http://test.com/pluginfile.php?file=/5/mod_label/intro/pic.png&forcedownload=1", False, settings
        )
        assert identity.file_name == "pic.png"

    def test_query_style_encoded_value(self, settings):
        """A fully encoded file value is decoded before splitting."""
        identity = decompose_url(
            "http://test.com/pluginfile.php?file=%2F5%2Fmod_label%2Fintro%2Fpic.png", False, settings
        )
        assert identity.as_tuple() == (5, "mod_label", "intro", 0, "pic.png")

    @pytest.mark.parametrize(
        "url",
        [
            "http://test.com/images/pic.png",
            "http://test.com/pluginfile.php/5/mod_label/pic.png",
            "http://test.com/pluginfile.php/abc/mod_label/intro/pic.png",
            "http://test.com/pluginfile.php/5/label/area/pic.png",
            "http://test.com/pluginfile.php/5/label/area/x/pic.png",
            "http://test.com/pluginfile.php/5/question/area/1/2/pic.png",
            "http://test.com/pluginfile.php/5/mod_label/intro/",
            "http://test.com/notpluginfile.php/5/mod_label/intro/pic.png",
            "http://test.com/pluginfile.php/\u00b2/mod_label/intro/pic.png",
            "http://test.com/pluginfile.php/\uff15/mod_label/intro/pic.png",
            "http://test.com/pluginfile.php/5/label/intro/\u0663/pic.png",
            "http://test.com/pluginfile.php/" + "9" * 5000 + "/mod_label/intro/pic.png",
        ],
    )
    def test_not_a_file_url(self, settings, url):
        """URLs that are not well-formed file URLs do not match."""
        assert decompose_url(url, True, settings) is None

    def test_custom_item_id_components(self):
        """Components with an item id segment are configurable."""
        settings = Settings(item_id_components="label,mod_forum", _env_file=None)
        identity = decompose_url("http://test.com/pluginfile.php/5/mod_forum/attachment/9/pic.png", True, settings)
        assert identity.item_id == 9


class TestRelativeFilePath:
    """Tests for relative_file_path."""

    def test_path_style(self, settings):
        path = relative_file_path("http://test.com/pluginfile.php/5/mod_forum/attachment/9/a%20b.png", True, settings)
        assert path == "5/mod_forum/attachment/9/a b.png"

    def test_query_style(self, settings):
        path = relative_file_path("http://test.com/pluginfile.php?file=/5/mod_folder/content/3/sub/x.pdf", False, settings)
        assert path == "5/mod_folder/content/3/sub/x.pdf"

    def test_not_a_file_url(self, settings):
        assert relative_file_path("http://test.com/other.php/5/x", True, settings) is None


class TestBuildFileUrl:
    """Tests for build_file_url."""

    def test_round_trips_special_characters(self, settings):
        """Built URLs decompose back to the same identity."""
        identity = FileIdentity(context_id=7, component="mod_label", file_area="intro", file_name="test (3:?).png")
        for slash_arguments in (True, False):
            url = build_file_url(identity, slash_arguments, settings)
            assert decompose_url(url, slash_arguments, settings) == identity

    def test_path_style_shape(self, settings):
        identity = FileIdentity(context_id=7, component="mod_label", file_area="intro", file_name="test (2).png")
        assert build_file_url(identity, True, settings) == "http://localhost/pluginfile.php/7/mod_label/intro/test%20(2).png"

    def test_query_style_with_revision(self, settings):
        identity = FileIdentity(context_id=7, component="mod_resource", file_area="content", file_name="doc.pdf")
        url = build_file_url(identity, False, settings, url_item_id=3)
        assert url == "http://localhost/pluginfile.php?file=/7/mod_resource/content/3/doc.pdf"


def test_is_local_file_url(settings):
    """Only URLs served by the host's own file script are local."""
    assert is_local_file_url("http://localhost/pluginfile.php/1/a/b/c.png", settings) is True
    assert is_local_file_url("http://elsewhere.org/pluginfile.php/1/a/b/c.png", settings) is False
    assert is_local_file_url("http://localhost/draftfile.php/1/a/b/c.png", settings) is False
