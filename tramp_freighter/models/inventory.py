"""Cargo stacks for Tramp Freighter.

A stack is one purchase lot: units of a single good bought at one price.
Buying the same good again at the same price tops the lot up; any other
price opens a new lot so profit tracking stays per purchase.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass
class CargoStack:
    """A lot of one good in the hold."""

    good: str
    qty: int
    buy_price: int
    buy_system: int | None = None
    buy_system_name: str = ""
    buy_date: int = 0

    @property
    def value(self) -> int:
        """What the lot cost to acquire."""
        return self.qty * self.buy_price

    def to_dict(self) -> dict:
        return {
            "good": self.good,
            "qty": self.qty,
            "buyPrice": self.buy_price,
            "buySystem": self.buy_system,
            "buySystemName": self.buy_system_name,
            "buyDate": self.buy_date,
        }

    @classmethod
    def from_dict(cls, d: dict) -> "CargoStack":
        return cls(
            good=d["good"],
            qty=int(d["qty"]),
            buy_price=int(d.get("buyPrice", 0)),
            buy_system=d.get("buySystem"),
            buy_system_name=d.get("buySystemName", ""),
            buy_date=int(d.get("buyDate", 0)),
        )


def cargo_used(stacks: list[CargoStack]) -> int:
    """Total units across all stacks."""
    return sum(s.qty for s in stacks)


def add_cargo(
    stacks: list[CargoStack],
    good: str,
    qty: int,
    buy_price: int,
    buy_system: int | None = None,
    buy_system_name: str = "",
    buy_date: int = 0,
) -> list[CargoStack]:
    """Return a new stack list with *qty* units added."""
    result = [CargoStack(**vars(s)) for s in stacks]
    for existing in result:
        if existing.good == good and existing.buy_price == buy_price:
            existing.qty += qty
            return result
    result.append(
        CargoStack(
            good=good,
            qty=qty,
            buy_price=buy_price,
            buy_system=buy_system,
            buy_system_name=buy_system_name,
            buy_date=buy_date,
        )
    )
    return result


def remove_from_stack(stacks: list[CargoStack], index: int, qty: int) -> list[CargoStack]:
    """Return a new stack list with *qty* taken from ``stacks[index]``.

    Stacks that reach zero are dropped so every remaining lot has qty > 0.
    """
    result = [CargoStack(**vars(s)) for s in stacks]
    result[index].qty -= qty
    if result[index].qty <= 0:
        del result[index]
    return result


def find_stack(stacks: list[CargoStack], good: str) -> int:
    """Index of the first lot of *good*, or -1."""
    for i, stack in enumerate(stacks):
        if stack.good == good:
            return i
    return -1
