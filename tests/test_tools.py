#
# Descry - Tools Tests
#

# Third-party ----------------------------------------------------------------------------------------------------------
import pytest

# Local ----------------------------------------------------------------------------------------------------------------
from descry.tools import fmt_type, fmt_value, truncate


# Helpers --------------------------------------------------------------------------------------------------------------

class Widget:
    pass


class LoudRepr:
    def __repr__(self):
        return "<Loud>"


class BrokenRepr:
    def __repr__(self):
        raise ValueError("nope")


# Tests ----------------------------------------------------------------------------------------------------------------


class TestFmtType:
    @pytest.mark.parametrize(
        "obj, expected",
        [
            pytest.param(42, "<type: int>", id="instance"),
            pytest.param(dict, "<type: dict>", id="class"),
            pytest.param(None, "<type: NoneType>", id="none"),
            pytest.param(Widget(), "<type: Widget>", id="user-instance"),
        ],
    )
    def test_format(self, obj, expected):
        """Format instances and classes alike."""
        assert fmt_type(obj) == expected

    def test_max_repr(self):
        assert fmt_type(Widget, max_repr=3) == "<type: Wid...>"


class TestFmtValue:
    @pytest.mark.parametrize(
        "value, expected",
        [
            pytest.param(42, "<int: 42>", id="int"),
            pytest.param("hi", "<str: 'hi'>", id="str"),
            pytest.param([1, 2], "<list: [1, 2]>", id="list"),
            pytest.param(None, "<NoneType: None>", id="none"),
        ],
    )
    def test_basic(self, value, expected):
        assert fmt_value(value) == expected

    def test_truncation_keeps_quotes(self):
        assert fmt_value("hello world", max_repr=8) == "<str: 'hell'...>"

    def test_escapes_angle(self):
        """Nested angle brackets are escaped."""
        assert fmt_value(LoudRepr()) == "<LoudRepr: <Loud\\>>"

    def test_broken_repr(self):
        """Survive a raising __repr__."""
        assert "repr failed: ValueError" in fmt_value(BrokenRepr())


class TestTruncate:
    @pytest.mark.parametrize(
        "s, max_len, expected",
        [
            pytest.param("abc", 5, "abc", id="short"),
            pytest.param("abcdef", 3, "abc...", id="cut"),
            pytest.param("abc", 0, "", id="zero"),
            pytest.param("abc", -1, "", id="negative"),
            pytest.param("'abcdefgh'", 6, "'ab'...", id="quoted"),
            pytest.param('"abcdefgh"', 2, '"a"...', id="quoted-min"),
        ],
    )
    def test_truncate(self, s, max_len, expected):
        assert truncate(s, max_len) == expected

    def test_custom_ellipsis(self):
        assert truncate("abcdef", 2, ellipsis="…") == "ab…"
