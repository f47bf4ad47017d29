"""Dependency injection container."""

from dishka import AsyncContainer, make_async_container
from dishka.integrations.fastapi import FastapiProvider, setup_dishka
from fastapi import FastAPI

from sitesisters.util.di import PROVIDERS, get_provider


def create_container() -> AsyncContainer:
    """Build the production container.

    Invite and user repositories are backed by PostgreSQL; settings come
    from the environment.

    Returns:
        Container with every production provider plus FastAPI integration
    """
    providers = [get_provider(base, use_mock=False)() for base in PROVIDERS]
    return make_async_container(*providers, FastapiProvider())


def setup_di(app: FastAPI, container: AsyncContainer) -> None:
    """Attach the container to the app so routes can use FromDishka.

    The request scope (and with it the database transaction) closes after
    the route returns.

    Args:
        app: FastAPI application
        container: DI container
    """
    setup_dishka(container, app)
