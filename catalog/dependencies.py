from fastapi import Request

from catalog.repositories import Repository


def get_repository(request: Request) -> Repository:
    """
    FastAPI dependency returning the repository the application was built
    with (``app.state.repository``).

    Tests swap backends either by passing a repository to ``create_app``
    or through ``app.dependency_overrides[get_repository]``.
    """
    return request.app.state.repository
