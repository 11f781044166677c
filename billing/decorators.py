from functools import wraps
from flask import g

from billing.errors import AuthenticationError

def login_required(f):
    @wraps(f)
    def decorated_function(*args, **kwargs):
        if not getattr(g, "current_user", None):
            raise AuthenticationError("Authentication required")
        return f(*args, **kwargs)
    return decorated_function


def current_user_id():
    return g.current_user.id
