"""Circular dependencies resolve through lazy references.

When a token is requested again while it is still being built, the
container hands out a ``LazyReference``. It resolves the real instance on
first use and forwards every interaction to it.
"""

from __future__ import annotations

from tokenwire import Container, is_lazy_reference


class OrderService:
    def __init__(self, billing: BillingService) -> None:
        self.billing = billing

    def describe(self) -> str:
        return "orders"


class BillingService:
    def __init__(self, orders: OrderService) -> None:
        self.orders = orders


def main() -> None:
    container = Container()
    container.register_singleton(OrderService, injections=[BillingService])
    container.register_singleton(BillingService, injections=[OrderService])

    orders = container.resolve(OrderService)
    reference = orders.billing.orders

    print(f"lazy={is_lazy_reference(reference)}")  # => lazy=True
    print(f"forwarded={reference.describe()}")  # => forwarded=orders
    print(f"equal={reference == orders}")  # => equal=True
    print(f"identical={reference is orders}")  # => identical=False


if __name__ == "__main__":
    main()
