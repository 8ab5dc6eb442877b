"""
HTML pages for the SiteBar toolbar endpoint.

Legacy SiteBar browser add-ons talk to `/command.php` and display whatever HTML
comes back in a small popup. Pages are rendered from Jinja2 templates with
autoescaping on, so query and form values echoed back are always escaped.
"""
from urllib.parse import quote

from jinja2 import DictLoader, Environment, StrictUndefined

ADD_LINK_COMMAND = "Add Link"
LOG_IN_COMMAND = "Log In"

COMMAND_PATH = "/command.php"

_LAYOUT = """<!doctype html>
<html>
<head>
  <meta charset="utf-8" />
  <meta name="viewport" content="width=device-width, initial-scale=1" />
  <title>{% block title %}{% endblock %}</title>
</head>
<body style="font-family:system-ui;padding:16px;max-width:720px;margin:0 auto;">
{% block body %}{% endblock %}
</body>
</html>
"""

_COMMAND_LIST = """{% extends "layout" %}
{% block title %}SiteBar{% endblock %}
{% block body %}
  <h2>SiteBar Commands</h2>
  <p>Available commands:</p>
  <ul>
    <li><a href="{{ log_in_href }}">Log In</a> - Sign in to your account</li>
    <li><a href="{{ add_link_href }}">Add Link</a> - Add a new bookmark</li>
  </ul>
  <p><a href="{{ frontend_url }}/login">Log in via web interface</a></p>
  <p><a href="{{ frontend_url }}/bookmarks">Go to bookmarks</a></p>
  <p>
    Toolbar add-ons cannot sign in through the web login. Create a personal access
    token under <a href="{{ frontend_url }}/settings/tokens">Settings</a> and append
    <code>&amp;token=&lt;your token&gt;</code> to the Add Link URL once; the toolbar is
    remembered afterwards.
  </p>
{% endblock %}
"""

_UNSUPPORTED = """{% extends "layout" %}
{% block title %}SiteBar{% endblock %}
{% block body %}
  <h2>Unsupported command</h2>
  <p>Command: {{ command }}</p>
  <p><a href="{{ frontend_url }}/login">Log in</a></p>
{% endblock %}
"""

_ADD_LINK_FORM = """{% extends "layout" %}
{% block title %}Add Link{% endblock %}
{% block body %}
  <h2>Add Link</h2>
  <form method="POST" action="{{ add_link_href }}" style="display:grid;gap:12px;">
    {% if token %}<input type="hidden" name="token" value="{{ token }}" />{% endif %}
    <label>URL<br/>
      <input name="url" required value="{{ url }}" style="width:100%;padding:10px;" />
    </label>
    <label>Link Name<br/>
      <input name="title" required value="{{ title }}" style="width:100%;padding:10px;" />
    </label>
    <label>Description<br/>
      <input name="description" value="{{ description }}" style="width:100%;padding:10px;" />
    </label>
    <label>Tags (comma separated)<br/>
      <input name="tags" value="" style="width:100%;padding:10px;" />
    </label>
    <label style="display:flex;align-items:center;gap:8px;">
      <input type="checkbox" name="private" />
      Private
    </label>
    <button type="submit" style="padding:10px 14px;">Submit</button>
  </form>
{% endblock %}
"""

_INVALID_LINK = """{% extends "layout" %}
{% block title %}Add Link{% endblock %}
{% block body %}
  <h2>Could not save link</h2>
  <p>{{ message }}</p>
  <p><a href="{{ add_link_href }}">Back</a></p>
{% endblock %}
"""

_SAVED = """{% extends "layout" %}
{% block title %}Saved{% endblock %}
{% block body %}
  <h2>Saved</h2>
  <p>The link has been saved.</p>
  <p><a href="{{ frontend_url }}/bookmarks">Open bookmarks</a></p>
{% endblock %}
"""

_jinja_env = Environment(
    loader=DictLoader({
        "layout": _LAYOUT,
        "command_list": _COMMAND_LIST,
        "unsupported": _UNSUPPORTED,
        "add_link_form": _ADD_LINK_FORM,
        "invalid_link": _INVALID_LINK,
        "saved": _SAVED,
    }),
    autoescape=True,
    undefined=StrictUndefined,
)


def command_href(command: str, **params: str) -> str:
    """Build a `/command.php` URL for the given command and extra query params."""
    href = f"{COMMAND_PATH}?command={quote(command)}"
    for key, value in params.items():
        href += f"&{key}={quote(value, safe='')}"
    return href


def login_redirect_url(frontend_url: str, **params: str) -> str:
    """
    Build the frontend login URL that returns to the Add Link form afterwards.

    Extra params (e.g. the page `url` being bookmarked) are carried in the callback.
    """
    callback = command_href(ADD_LINK_COMMAND, **params)
    return f"{frontend_url}/login?callbackUrl={quote(callback, safe='')}"


def search_redirect_url(frontend_url: str, query: str) -> str:
    """Build the frontend bookmarks URL for a SiteBar search."""
    if not query:
        return f"{frontend_url}/bookmarks"
    return f"{frontend_url}/bookmarks?from=sitebar-search&q={quote(query, safe='')}"


def render_command_list(frontend_url: str) -> str:
    return _jinja_env.get_template("command_list").render(
        frontend_url=frontend_url,
        log_in_href=command_href(LOG_IN_COMMAND),
        add_link_href=command_href(ADD_LINK_COMMAND),
    )


def render_unsupported(command: str, frontend_url: str) -> str:
    return _jinja_env.get_template("unsupported").render(
        command=command, frontend_url=frontend_url,
    )


def render_add_link_form(
    url: str = "", title: str = "", description: str = "", token: str = "",
) -> str:
    """
    Render the Add Link form, prefilled from the add-on's query parameters.

    A personal access token that arrived in the query string is carried into a
    hidden field so the POST authenticates the same way.
    """
    return _jinja_env.get_template("add_link_form").render(
        add_link_href=command_href(ADD_LINK_COMMAND),
        url=url,
        title=title,
        description=description,
        token=token,
    )


def render_invalid_link(message: str) -> str:
    return _jinja_env.get_template("invalid_link").render(
        message=message, add_link_href=command_href(ADD_LINK_COMMAND),
    )


def render_saved(frontend_url: str) -> str:
    return _jinja_env.get_template("saved").render(frontend_url=frontend_url)
