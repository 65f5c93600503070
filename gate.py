from dataclasses import dataclass
from functools import wraps

from flask import redirect, session, url_for

SIGN_IN_REQUIRED = "You need to sign in to do that."


@dataclass
class RequestContext:
    """Identity and one-shot message for the request being handled."""

    username: str | None = None
    message: str | None = None

    @classmethod
    def from_session(cls, store) -> "RequestContext":
        return cls(username=store.get("username"), message=store.get("message"))

    def save(self, store) -> None:
        for key, value in (("username", self.username), ("message", self.message)):
            if value is None:
                store.pop(key, None)
            else:
                store[key] = value

    @property
    def is_authenticated(self) -> bool:
        return self.username is not None

    def flash(self, message: str) -> None:
        self.message = message

    def take_message(self) -> str | None:
        message, self.message = self.message, None
        return message


def with_context(view):
    # The view receives the context first; whatever it leaves there is
    # written back to the session cookie.
    @wraps(view)
    def decorated_function(*args, **kwargs):
        ctx = RequestContext.from_session(session)
        response = view(ctx, *args, **kwargs)
        ctx.save(session)
        return response
    return decorated_function


def require_authenticated(view):
    @wraps(view)
    def decorated_function(ctx, *args, **kwargs):
        if not ctx.is_authenticated:
            ctx.flash(SIGN_IN_REQUIRED)
            return redirect(url_for("cms.index"))
        return view(ctx, *args, **kwargs)
    return decorated_function
