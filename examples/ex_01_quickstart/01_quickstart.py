"""Quickstart: register tokens and resolve a wired object graph.

Classes declare their dependencies as an ordered list of tokens. Strings and
interface tokens stand in for values and abstractions.
"""

from __future__ import annotations

from tokenwire import Container, interface_token

DATABASE = interface_token("Database")


class PostgresDatabase:
    def __init__(self, host: str) -> None:
        self.host = host


class UserRepository:
    def __init__(self, database: PostgresDatabase) -> None:
        self.database = database


class UserService:
    def __init__(self, repository: UserRepository) -> None:
        self.repository = repository


def main() -> None:
    container = Container()
    container.register_value("db_host", "localhost")
    container.register_singleton(DATABASE, PostgresDatabase, injections=["db_host"])
    container.register_transient(UserRepository, injections=[DATABASE])
    container.register_transient(UserService, injections=[UserRepository])

    service = container.resolve(UserService)

    print(f"db_host={service.repository.database.host}")  # => db_host=localhost

    chain = (
        f"{type(service).__name__}"
        f">{type(service.repository).__name__}"
        f">{type(service.repository.database).__name__}"
    )
    print(f"chain={chain}")  # => chain=UserService>UserRepository>PostgresDatabase

    container.register_value("greeting", "hello")
    container.register_type("greeting_alias", "greeting")
    print(f"alias={container.resolve('greeting_alias')}")  # => alias=hello


if __name__ == "__main__":
    main()
