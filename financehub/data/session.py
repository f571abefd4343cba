from fastapi import Request


def get_db(request: Request):
    """Request-scoped session from the factory the app was built with."""
    db = request.app.state.session_factory()
    try:
        yield db
    finally:
        db.close()
