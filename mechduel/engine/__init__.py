# mechduel/engine/__init__.py
from .battle import Battle
from .models import Action, ActionKind, CombatantSetup, Slot

__all__ = ["Battle", "Action", "ActionKind", "CombatantSetup", "Slot"]
