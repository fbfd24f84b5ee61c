"""Seedable random source shared by band sampling and tie-breaking."""
import random


class RandomSource(random.Random):
    """random.Random plus the draws the matching engine needs.

    Pass a seed for reproducible band sampling and tie-breaks.
    """

    def normal(self, mean, sd, tail=None):
        """One draw from Normal(mean, sd).

        tail='lower' folds the draw onto the left half of the distribution,
        tail='upper' onto the right half.
        """
        z = self.gauss(0.0, 1.0)
        if tail == 'lower':
            z = -abs(z)
        elif tail == 'upper':
            z = abs(z)
        return mean + sd * z

    def pick(self, candidates):
        """Uniform pick from a non-empty sequence."""
        return candidates[self.randrange(len(candidates))]
