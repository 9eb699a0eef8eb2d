"""Errors: every failure derives from ``TokenWireError``.

Resolution errors propagate unchanged. Alias cycles are rejected when the
alias is registered, before anything is resolved.
"""

from __future__ import annotations

from tokenwire import Container, TokenProvider, TokenWireError


def main() -> None:
    container = Container(register_if_missing=False)

    try:
        container.resolve("missing")
    except TokenWireError as error:
        print(error)  # => Token not found: "missing"

    container.register("b", TokenProvider("c"))
    container.register("c", TokenProvider("a"))
    try:
        container.register("a", TokenProvider("b"))
    except TokenWireError as error:
        print(error)  # => Token registration cycle detected! "a -> b -> c -> a"

    scope = container.create_scope()
    scope.close()
    try:
        scope.resolve("anything")
    except TokenWireError as error:
        print(error)  # => The scope has been disposed.


if __name__ == "__main__":
    main()
