"""
Billing cart.

Pure in-memory model of the till: adding an item twice bumps its
quantity, removing decrements and drops the line at zero.
"""

from dataclasses import dataclass, field
from typing import Any, Optional


@dataclass
class CartLine:
    item_id: str
    name: str
    price: float
    quantity: int = 1

    @property
    def line_total(self) -> float:
        return round(self.price * self.quantity, 2)


@dataclass
class Cart:
    lines: list[CartLine] = field(default_factory=list)

    def _find(self, item_id: str) -> Optional[CartLine]:
        for line in self.lines:
            if line.item_id == item_id:
                return line
        return None

    def add(self, item: dict[str, Any]) -> CartLine:
        """Add one unit of a menu item (``{id, name, price}``)."""
        line = self._find(item["id"])
        if line is not None:
            line.quantity += 1
            return line

        line = CartLine(item_id=item["id"], name=item["name"], price=float(item["price"]))
        self.lines.append(line)
        return line

    def remove(self, item_id: str) -> None:
        """Take one unit off; the line disappears when it reaches zero."""
        line = self._find(item_id)
        if line is None:
            return
        if line.quantity > 1:
            line.quantity -= 1
        else:
            self.lines.remove(line)

    def clear(self) -> None:
        self.lines.clear()

    @property
    def total(self) -> float:
        return round(sum(line.price * line.quantity for line in self.lines), 2)

    @property
    def item_count(self) -> int:
        return sum(line.quantity for line in self.lines)

    def is_empty(self) -> bool:
        return not self.lines

    def to_order_lines(self) -> list[dict[str, Any]]:
        """Lines in the shape ``create_order`` accepts."""
        return [
            {"item_id": line.item_id, "name": line.name, "price": line.price, "quantity": line.quantity}
            for line in self.lines
        ]
