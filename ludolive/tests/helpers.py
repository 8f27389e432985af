"""Test helpers shared across modules."""

from itertools import cycle


class ScriptedRng:
    """
    Stand-in for random.Random that rolls a fixed sequence.

    random() always clears the six bias, so every roll comes from
    randint(), which cycles through the scripted values.
    """

    def __init__(self, values):
        self._values = cycle(values)

    def random(self):
        return 0.99

    def randint(self, a, b):
        return next(self._values)


class FixedBiasRng:
    """random() returns a fixed value; randint() returns its lower bound."""

    def __init__(self, value):
        self.value = value

    def random(self):
        return self.value

    def randint(self, a, b):
        return a


class FirstChoiceRng:
    """Always picks the first element, so every generated code collides."""

    def choice(self, seq):
        return seq[0]
