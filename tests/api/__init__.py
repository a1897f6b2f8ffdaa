def auth(user):
    """Identity header for ``user``."""
    return {"X-User-ID": str(user.id)}
