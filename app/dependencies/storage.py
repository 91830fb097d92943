from fastapi import Request

from app.storage import Storage


def get_storage(request: Request) -> Storage:
    """The store built at startup; tests swap it through dependency_overrides."""
    return request.app.state.storage
