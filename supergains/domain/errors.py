# supergains/domain/errors.py


class NotFoundError(LookupError):
    pass


class ConflictError(RuntimeError):
    """Concurrent modification or a checkout already in progress."""


class AuthenticationError(Exception):
    pass


class InsufficientStockError(ValueError):
    """
    Raised when a requested quantity exceeds what can be sold.
    `lines` holds one entry per failing product so a multi-line checkout
    can report every shortfall at once.
    """

    def __init__(self, lines: list[dict], message: str = "Insufficient stock"):
        super().__init__(message)
        self.lines = lines

    @classmethod
    def for_product(cls, product_id: int, requested: int, available: int, name: str | None = None):
        line = {
            "product_id": product_id,
            "requested": requested,
            "available": max(0, available),
            "shortfall": requested - max(0, available),
        }
        if name:
            line["product"] = name
        return cls(
            [line],
            f"Insufficient stock for product {product_id}. "
            f"Available: {line['available']}, requested: {requested}",
        )
