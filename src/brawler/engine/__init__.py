from __future__ import annotations

from .resolver import CombatResolver, opening_order
from .simulator import BattleSimulator, resolve_battle

__all__ = ["CombatResolver", "opening_order", "BattleSimulator", "resolve_battle"]
