"""
Recoverable errors raised by the game. Broken invariants are not represented here, they fail with an AssertionError.
"""


class BuildingError(Exception):
    """An individual could not be placed in a building"""


class BuildingFullError(BuildingError):
    """The building has no free position left"""

    def __init__(self, name: str = ""):
        super().__init__(f"building {name!r} is full")


class BuildingSickError(BuildingError):
    """Sick individuals are not allowed in the buildings"""

    def __init__(self):
        super().__init__("Sick individuals are not allowed in the buildings")


class ActionError(Exception):
    """A player action could not be performed with the current population"""


class NoHealthyLeftError(ActionError):
    def __init__(self):
        super().__init__("there is no healthy individual left to immunize")


class NoImmuneLeftError(ActionError):
    def __init__(self):
        super().__init__("there is no immune individual left")
