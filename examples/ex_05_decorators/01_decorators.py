"""Decorators: declare lifetimes and injections on the class itself.

``injectable`` only writes metadata, used when the class is resolved or
registered later. ``singleton``, ``transient`` and ``scoped`` also register
the class, into the given container or the ambient ``container_context``.
"""

from __future__ import annotations

from tokenwire import Container, Lifetime, injectable, singleton, transient


@injectable(Lifetime.SINGLETON, injections=["app_name"])
class Settings:
    def __init__(self, app_name: str) -> None:
        self.app_name = app_name


def main() -> None:
    container = Container()
    container.register_value("app_name", "shop")

    @singleton("mailer", injections=[Settings], container=container)
    class Mailer:
        def __init__(self, settings: Settings) -> None:
            self.settings = settings

    @transient(container=container)
    class Handler:
        pass

    settings = container.resolve(Settings)
    print(f"app_name={settings.app_name}")  # => app_name=shop
    print(f"settings_cached={container.resolve(Settings) is settings}")  # => settings_cached=True
    print(f"alias_shared={container.resolve('mailer') is container.resolve(Mailer)}")  # => alias_shared=True
    print(f"handler_fresh={container.resolve(Handler) is not container.resolve(Handler)}")  # => handler_fresh=True


if __name__ == "__main__":
    main()
