"""
Key Bindings.

Resolves key identities to session actions. Defaults can be overridden
per action from the keys section of application.yaml.
"""

from collections.abc import Mapping
from enum import Enum


class Action(str, Enum):
    """What a key press asks the session to do."""

    SAVE = "save"
    QUIT = "quit"
    CANCEL = "cancel"
    BROWSE = "browse"
    COMPOSE = "compose"
    SEARCH = "search"
    UP = "up"
    DOWN = "down"
    SELECT = "select"
    DELETE = "delete"
    YES = "yes"
    NO = "no"


DEFAULT_BINDINGS: dict[Action, tuple[str, ...]] = {
    Action.SAVE: ("ctrl+s",),
    Action.QUIT: ("ctrl+q",),
    Action.CANCEL: ("escape",),
    Action.BROWSE: ("ctrl+r",),
    Action.COMPOSE: ("alt+left",),
    Action.SEARCH: ("ctrl+a",),
    Action.UP: ("up", "k"),
    Action.DOWN: ("down", "j"),
    Action.SELECT: ("enter",),
    Action.DELETE: ("ctrl+d",),
    Action.YES: ("y", "Y"),
    Action.NO: ("n", "N"),
}


class KeyMap:
    """
    Reverse lookup from key identity to action.

    A key may be bound to one action only.
    """

    def __init__(self, bindings: Mapping[Action, tuple[str, ...]] | None = None) -> None:
        self.bindings: dict[Action, tuple[str, ...]] = dict(DEFAULT_BINDINGS)
        if bindings:
            self.bindings.update(bindings)

        self._by_key: dict[str, Action] = {}
        for action, keys in self.bindings.items():
            for key in keys:
                bound = self._by_key.get(key)
                if bound is not None and bound is not action:
                    raise ValueError(
                        f"Key {key!r} is bound to both {bound.value} and {action.value}"
                    )
                self._by_key[key] = action

    @classmethod
    def from_config(cls, keys: Mapping[str, list[str]]) -> "KeyMap":
        """
        Build a key map from the application.yaml keys section.

        Raises:
            ValueError: If an action name is unknown or a key is bound twice
        """
        overrides: dict[Action, tuple[str, ...]] = {}
        for name, bound_keys in keys.items():
            try:
                action = Action(name)
            except ValueError as e:
                raise ValueError(f"Unknown key binding action: {name}") from e
            overrides[action] = tuple(bound_keys)
        return cls(overrides)

    def resolve(self, key: str) -> Action | None:
        """Action bound to key, or None."""
        return self._by_key.get(key)

    def keys_for(self, action: Action) -> tuple[str, ...]:
        return self.bindings.get(action, ())
