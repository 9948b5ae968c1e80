from __future__ import annotations
from typing import Sequence, List
import numpy as np

def integrate_anchors(positions: Sequence[float], rates: Sequence[float], origin: float = 0.0) -> List[float]:
    """
    Kumulierte Werte an sortierten Ankern.

    Start bei Position 0 mit Wert `origin` und der Rate des ersten Ankers;
    jeder Anker i bekommt value[i-1] + (pos[i] - pos[i-1]) * rate[i-1].
    Der erste Anker wird also mit seiner eigenen Rate von 0 aus erreicht.
    """
    pos = np.asarray(positions, dtype=float)
    rate = np.asarray(rates, dtype=float)
    if pos.size == 0:
        return []
    prev_pos = np.concatenate(([0.0], pos[:-1]))
    prev_rate = np.concatenate((rate[:1], rate[:-1]))
    steps = (pos - prev_pos) * prev_rate
    # origin vorne anhängen, damit in derselben Reihenfolge wie die Schleife addiert wird
    values = np.cumsum(np.concatenate(([float(origin)], steps)))[1:]
    return [float(v) for v in values]

class PiecewiseLinear:
    """
    Stückweise lineare Abbildung über aufsteigend sortierten Ankern
    (gleiche Positionen erlaubt).

      x <  pos[0]        -> origin + x * rate[0]
      x == pos[i]        -> value[i] des ersten Ankers mit dieser Position
      pos[i] < x < ...   -> value[i] + (x - pos[i]) * rate[i]
      x >  pos[-1]       -> Extrapolation mit dem letzten Anker
    """
    def __init__(self, positions: Sequence[float], values: Sequence[float],
                 rates: Sequence[float], origin: float = 0.0):
        self.positions = np.asarray(positions, dtype=float)
        self.values = np.asarray(values, dtype=float)
        self.rates = np.asarray(rates, dtype=float)
        self.origin = float(origin)
        if self.positions.size == 0:
            raise ValueError("PiecewiseLinear needs at least one anchor")
        if not (self.positions.size == self.values.size == self.rates.size):
            raise ValueError("positions, values and rates must have the same length")

    def __len__(self) -> int:
        return int(self.positions.size)

    def __call__(self, x: float) -> float:
        x = float(x)
        pos = self.positions
        if x < pos[0]:
            return self.origin + x * float(self.rates[0])
        i = int(np.searchsorted(pos, x, side="left"))
        if i < pos.size and pos[i] == x:
            return float(self.values[i])
        j = int(np.searchsorted(pos, x, side="right")) - 1
        return float(self.values[j] + (x - pos[j]) * self.rates[j])
