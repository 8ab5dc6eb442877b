"""Tests for SiteBar HTML pages and redirect URLs."""
from urllib.parse import parse_qs, urlsplit

from services import sitebar_renderer


def test__command_href__encodes_command_and_params() -> None:
    href = sitebar_renderer.command_href("Add Link", url="https://example.com/?a=1&b=2")
    assert href == (
        "/command.php?command=Add%20Link&url=https%3A%2F%2Fexample.com%2F%3Fa%3D1%26b%3D2"
    )


def test__login_redirect_url__wraps_add_link_callback() -> None:
    url = sitebar_renderer.login_redirect_url("https://app.example.com")

    parts = urlsplit(url)
    assert f"{parts.scheme}://{parts.netloc}{parts.path}" == "https://app.example.com/login"
    assert parse_qs(parts.query)["callbackUrl"] == ["/command.php?command=Add%20Link"]


def test__login_redirect_url__carries_page_url() -> None:
    url = sitebar_renderer.login_redirect_url(
        "https://app.example.com", url="https://example.com/page",
    )

    callback = parse_qs(urlsplit(url).query)["callbackUrl"][0]
    assert parse_qs(urlsplit(callback).query) == {
        "command": ["Add Link"],
        "url": ["https://example.com/page"],
    }


def test__search_redirect_url__with_query() -> None:
    url = sitebar_renderer.search_redirect_url("https://app.example.com", "python tips")
    assert url == "https://app.example.com/bookmarks?from=sitebar-search&q=python%20tips"


def test__search_redirect_url__empty_query_goes_to_bookmarks() -> None:
    url = sitebar_renderer.search_redirect_url("https://app.example.com", "")
    assert url == "https://app.example.com/bookmarks"


def test__render_command_list__lists_commands() -> None:
    html = sitebar_renderer.render_command_list("https://app.example.com")

    assert "Log In" in html
    assert "Add Link" in html
    assert 'href="https://app.example.com/login"' in html


def test__render_unsupported__escapes_command() -> None:
    html = sitebar_renderer.render_unsupported("<script>alert(1)</script>", "https://app")

    assert "Unsupported command" in html
    assert "<script>" not in html
    assert "&lt;script&gt;alert(1)&lt;/script&gt;" in html


def test__render_add_link_form__prefills_escaped_values() -> None:
    html = sitebar_renderer.render_add_link_form(
        url="https://example.com/?q=\"x\"",
        title="A & B",
        description="<b>desc</b>",
    )

    assert 'method="POST"' in html
    assert 'value="https://example.com/?q=&#34;x&#34;"' in html
    assert 'value="A &amp; B"' in html
    assert "&lt;b&gt;desc&lt;/b&gt;" in html


def test__render_invalid_link__shows_message() -> None:
    html = sitebar_renderer.render_invalid_link("Title and URL are required")
    assert "Title and URL are required" in html


def test__render_saved() -> None:
    html = sitebar_renderer.render_saved("https://app.example.com")
    assert "The link has been saved." in html
    assert "https://app.example.com/bookmarks" in html


def test__render_add_link_form__carries_token_in_hidden_field() -> None:
    html = sitebar_renderer.render_add_link_form(url="https://example.com", token="bm_abc-123")

    assert '<input type="hidden" name="token" value="bm_abc-123" />' in html


def test__render_add_link_form__no_token_no_hidden_field() -> None:
    html = sitebar_renderer.render_add_link_form(url="https://example.com")

    assert 'name="token"' not in html


def test__render_command_list__explains_toolbar_tokens() -> None:
    html = sitebar_renderer.render_command_list("https://app.example.com")

    assert "personal access" in html
    assert 'href="https://app.example.com/settings/tokens"' in html
