import argparse
import logging
from pathlib import Path

from flask import Blueprint, Flask, Response, current_app, redirect, render_template_string, request, url_for

from config import Config, load_config
from credentials import CredentialStore
from documents import DocumentNotFound, DocumentStore
from gate import RequestContext, require_authenticated, with_context

logger = logging.getLogger(__name__)

bp = Blueprint("cms", __name__)


def _documents() -> DocumentStore:
    return current_app.extensions["slate.documents"]


def _users() -> CredentialStore:
    return current_app.extensions["slate.users"]


def render_page(ctx: RequestContext, template: str, status: int = 200, **context):
    # Rendering consumes the pending flash message.
    html = render_template_string(template, username=ctx.username, message=ctx.take_message(), **context)
    return html, status


def _go_home(ctx: RequestContext, message: str):
    ctx.flash(message)
    return redirect(url_for("cms.index"))


@bp.route("/")
@with_context
def index(ctx):
    return render_page(ctx, HOME_TEMPLATE, files=_documents().list())


@bp.route("/new", methods=["GET", "POST"])
@with_context
@require_authenticated
def new_document(ctx):
    if request.method == "GET":
        return render_page(ctx, NEW_TEMPLATE, entered="")
    filename = request.form.get("new_file", "").strip()
    error = _documents().create_new(filename)
    if error is not None:
        ctx.flash(error)
        return render_page(ctx, NEW_TEMPLATE, status=422, entered=filename)
    return _go_home(ctx, f"{filename} was created.")


@bp.route("/<filename>")
@with_context
def view_document(ctx, filename):
    try:
        body, mimetype = _documents().render(filename)
    except DocumentNotFound as e:
        return _go_home(ctx, str(e))
    return Response(body, mimetype=mimetype)


@bp.route("/<filename>/edit", methods=["GET", "POST"])
@with_context
@require_authenticated
def edit_document(ctx, filename):
    documents = _documents()
    if not documents.exists(filename):
        return _go_home(ctx, str(DocumentNotFound(filename)))
    if request.method == "GET":
        return render_page(ctx, EDIT_TEMPLATE, filename=filename, content=documents.read(filename))
    documents.write(filename, request.form.get("content", ""))
    logger.info(f"{ctx.username} updated {filename}")
    return _go_home(ctx, f"{filename} has been updated.")


@bp.route("/<filename>/delete", methods=["POST"])
@with_context
@require_authenticated
def delete_document(ctx, filename):
    try:
        _documents().delete(filename)
    except DocumentNotFound as e:
        return _go_home(ctx, str(e))
    return _go_home(ctx, f"{filename} was deleted.")


@bp.route("/<filename>/copy", methods=["POST"])
@with_context
@require_authenticated
def copy_document(ctx, filename):
    try:
        _documents().duplicate(filename)
    except DocumentNotFound as e:
        return _go_home(ctx, str(e))
    return _go_home(ctx, f"{filename} was duplicated.")


@bp.route("/users/signin", methods=["GET", "POST"])
@with_context
def signin(ctx):
    if request.method == "GET":
        return render_page(ctx, SIGNIN_TEMPLATE, entered="")
    username = request.form.get("username", "")
    password = request.form.get("password", "")
    if _users().verify(username, password):
        ctx.username = username
        return _go_home(ctx, "Welcome!")
    logger.warning(f"Failed sign-in attempt for {username!r}")
    ctx.flash("Invalid Credentials")
    return render_page(ctx, SIGNIN_TEMPLATE, status=422, entered=username)


@bp.route("/users/signout", methods=["POST"])
@with_context
def signout(ctx):
    ctx.username = None
    return _go_home(ctx, "You have been signed out.")


@bp.route("/users/signup", methods=["GET", "POST"])
@with_context
def signup(ctx):
    if request.method == "GET":
        return render_page(ctx, SIGNUP_TEMPLATE, entered="")
    username = request.form.get("username", "")
    password = request.form.get("password", "")
    error = _users().create(username, password)
    if error is not None:
        ctx.flash(error)
        return render_page(ctx, SIGNUP_TEMPLATE, status=422, entered=username)
    return _go_home(ctx, "Successfully signed up.")


def create_app(config: Config) -> Flask:

    app = Flask(__name__)
    app.config["SECRET_KEY"] = config.secret_key
    config.data_dir.mkdir(parents=True, exist_ok=True)
    app.extensions["slate.documents"] = DocumentStore(config.data_dir)
    app.extensions["slate.users"] = CredentialStore(config.users_file)
    app.register_blueprint(bp)
    return app


_HEAD = r"""<!DOCTYPE html>
<html lang="en">
<head>
<meta charset="utf-8">
<meta name="viewport" content="width=device-width, initial-scale=1">
<title>Slate</title>
<style>
body { max-width: 48rem; margin: 2rem auto; padding: 0 1rem; font-family: system-ui, sans-serif; line-height: 1.5; }
.message { padding: .5rem 1rem; background: #fff4d6; border: 1px solid #e8c95a; border-radius: 4px; }
ul.documents { list-style: none; padding: 0; }
ul.documents li { display: flex; gap: .75rem; align-items: center; padding: .25rem 0; }
ul.documents li > a:first-child { flex: 1; }
form.inline { display: inline; margin: 0; }
textarea { width: 100%; font-family: ui-monospace, monospace; }
label { display: block; margin-top: .5rem; }
</style>
</head>
<body>
{% if message %}<p class="message">{{ message }}</p>{% endif %}
"""

_FOOT = r"""</body>
</html>
"""

HOME_TEMPLATE = _HEAD + r"""<h1>Documents</h1>
<ul class="documents">
{% for name in files %}
  <li>
    <a href="{{ url_for('cms.view_document', filename=name) }}">{{ name }}</a>
    <a href="{{ url_for('cms.edit_document', filename=name) }}">Edit</a>
    <form class="inline" method="post" action="{{ url_for('cms.copy_document', filename=name) }}">
      <button type="submit">Copy</button>
    </form>
    <form class="inline" method="post" action="{{ url_for('cms.delete_document', filename=name) }}">
      <button type="submit">Delete</button>
    </form>
  </li>
{% else %}
  <li>No documents yet.</li>
{% endfor %}
</ul>
<p><a href="{{ url_for('cms.new_document') }}">New Document</a></p>
{% if username %}
<form method="post" action="{{ url_for('cms.signout') }}">
  <p>Signed in as {{ username }}. <button type="submit">Sign out</button></p>
</form>
{% else %}
<p>
  <a href="{{ url_for('cms.signin') }}"><button type="button">Sign in</button></a>
  <a href="{{ url_for('cms.signup') }}"><button type="button">Sign up</button></a>
</p>
{% endif %}
""" + _FOOT

NEW_TEMPLATE = _HEAD + r"""<form method="post" action="{{ url_for('cms.new_document') }}">
  <label for="new_file">Add a new document:</label>
  <input id="new_file" name="new_file" value="{{ entered }}" placeholder="example.md">
  <button type="submit">Create</button>
</form>
<p><a href="{{ url_for('cms.index') }}">Back</a></p>
""" + _FOOT

EDIT_TEMPLATE = _HEAD + r"""<p>Edit content of {{ filename }}:</p>
<form method="post" action="{{ url_for('cms.edit_document', filename=filename) }}">
  <textarea name="content" rows="20">
{{ content }}</textarea>
  <button type="submit">Save Changes</button>
</form>
<p><a href="{{ url_for('cms.index') }}">Back</a></p>
""" + _FOOT

SIGNIN_TEMPLATE = _HEAD + r"""<form method="post" action="{{ url_for('cms.signin') }}">
  <label for="username">Username</label>
  <input id="username" name="username" value="{{ entered }}">
  <label for="password">Password</label>
  <input id="password" name="password" type="password">
  <button type="submit">Sign in</button>
</form>
<p>No account? <a href="{{ url_for('cms.signup') }}">Sign up</a></p>
""" + _FOOT

SIGNUP_TEMPLATE = _HEAD + r"""<form method="post" action="{{ url_for('cms.signup') }}">
  <label for="username">Username</label>
  <input id="username" name="username" value="{{ entered }}">
  <label for="password">Password</label>
  <input id="password" name="password" type="password">
  <button type="submit">Sign up</button>
</form>
<p>Already registered? <a href="{{ url_for('cms.signin') }}">Sign in</a></p>
""" + _FOOT


def main(argv=None):
    parser = argparse.ArgumentParser(description="Serve a directory of text and markdown documents.")
    parser.add_argument("--config", type=Path, default=None, help="JSON config file")
    parser.add_argument("--host", default=None)
    parser.add_argument("--port", type=int, default=None)
    parser.add_argument("--debug", action="store_true", default=None, help="enable the reloader and debugger")
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )
    config = load_config(args.config, host=args.host, port=args.port, debug=args.debug)
    app = create_app(config)
    logger.info(f"Serving documents from {config.data_dir}")
    logger.info(f"Open http://{config.host}:{config.port}")
    app.run(host=config.host, port=config.port, debug=config.debug)


if __name__ == "__main__":
    main()
