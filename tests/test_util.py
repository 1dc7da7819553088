import pytest

from atsboost.utils.util import extract_keywords, is_valid_email, looks_like_html, sanitize_html


def test_sanitize_html_keeps_text_around_angle_brackets():
    text = sanitize_html("<div>a < b and c > d</div><p>x</p>")

    assert "b and c" in text
    assert text.splitlines()[-1] == "x"


def test_sanitize_html_drops_scripts_and_styles():
    text = sanitize_html(
        "<html><head><style>p {color: red}</style></head>"
        "<body><h1>Thandi Nkosi</h1><script>track()</script><p>Data &amp; analytics</p></body></html>"
    )

    assert text == "Thandi Nkosi\nData & analytics"


def test_looks_like_html():
    assert looks_like_html("<p>hello</p>")
    assert not looks_like_html("Salary < R30 000 and > R20 000")


@pytest.mark.parametrize(
    "value,valid",
    [
        ("thandi@example.com", True),
        ("  hr@acme.co.za ", True),
        ("a@b.c..", False),
        ("no-at-sign.example.com", False),
        ("two@@example.com", False),
        ("", False),
        (None, False),
    ],
)
def test_is_valid_email(value, valid):
    assert is_valid_email(value) is valid


def test_extract_keywords_skips_stop_words_and_numbers():
    assert extract_keywords("The Python developer with 5 years of Python and SQL") == ["python", "developer", "sql"]
