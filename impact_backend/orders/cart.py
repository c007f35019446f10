"""
Logique panier pure (pas de CinetPay, pas de DB).
Panier mono-utilisateur: liste de lignes indexée par id produit,
fusion des quantités à l'ajout.
"""
from dataclasses import dataclass, asdict
from typing import Any, Dict, Iterable, List, Optional

# module impact_backend.orders.cart


@dataclass
class CartItem:
    id: str
    name: str = ""
    price: float = 0.0
    quantity: int = 1
    product_type: str = "physical"

    @property
    def total_price(self) -> float:
        return self.price * self.quantity


class Cart:
    def __init__(self, items: Optional[Iterable[CartItem]] = None):
        self.items: List[CartItem] = []
        for item in items or []:
            self.add(item, item.quantity)

    @classmethod
    def from_items(cls, raw_items: Iterable[Dict[str, Any]]) -> "Cart":
        """
        Construit un panier depuis [{id, quantity, name?, price?, product_type?}, ...].
        - Ignore les lignes invalides (id vide, quantity <= 0 ou non entière).
        - Fusionne les ids en double.
        """
        cart = cls()
        for raw in raw_items or []:
            if not isinstance(raw, dict):
                continue
            item_id = str(raw.get("id") or "").strip()
            try:
                qty = int(raw.get("quantity") or 0)
            except (TypeError, ValueError):
                continue
            if not item_id or qty <= 0:
                continue
            try:
                price = float(raw.get("price") or 0)
            except (TypeError, ValueError):
                price = 0.0
            cart.add(
                CartItem(
                    id=item_id,
                    name=str(raw.get("name") or ""),
                    price=price,
                    product_type=str(raw.get("product_type") or "physical"),
                ),
                qty,
            )
        return cart

    def get(self, item_id: str) -> Optional[CartItem]:
        for item in self.items:
            if item.id == item_id:
                return item
        return None

    def add(self, item: CartItem, quantity: int = 1) -> CartItem:
        """Ajoute ou fusionne: une ligne existante voit sa quantité augmenter."""
        if quantity <= 0:
            raise ValueError("quantity must be > 0")
        existing = self.get(item.id)
        if existing is not None:
            existing.quantity += quantity
            return existing
        line = CartItem(id=item.id, name=item.name, price=item.price, quantity=quantity, product_type=item.product_type)
        self.items.append(line)
        return line

    def update_quantity(self, item_id: str, quantity: int) -> None:
        if quantity <= 0:
            self.remove(item_id)
            return
        item = self.get(item_id)
        if item is not None:
            item.quantity = quantity

    def remove(self, item_id: str) -> None:
        self.items = [i for i in self.items if i.id != item_id]

    def clear(self) -> None:
        self.items = []

    @property
    def total_items(self) -> int:
        return sum(i.quantity for i in self.items)

    @property
    def total_price(self) -> float:
        return sum(i.total_price for i in self.items)

    @property
    def has_physical(self) -> bool:
        return any(i.product_type == "physical" for i in self.items)

    def quantities(self) -> Dict[str, int]:
        return {i.id: i.quantity for i in self.items}

    def to_list(self) -> List[Dict[str, Any]]:
        return [asdict(i) for i in self.items]

    def __len__(self) -> int:
        return len(self.items)

    def __bool__(self) -> bool:
        return bool(self.items)
