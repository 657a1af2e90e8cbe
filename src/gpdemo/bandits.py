"""
Bernoulli multi-armed bandits, the discrete cousin of Bayesian optimization.
Each arm pays out 1 with a fixed (hidden) probability and 0 otherwise, and a
:class:`Bandit` keeps the win and loss counts per arm along with the regret of
every pull. Arms are chosen by Thompson sampling, UCB1 or epsilon-greedy.

Like :mod:`gpdemo.sampling`, every random choice takes an explicit ``jax``
random key (or an integer seed), so a run is reproducible from its seed.
"""

from __future__ import annotations

__all__ = [
    "STRATEGIES",
    "Arm",
    "Pull",
    "Bandit",
    "thompson_scores",
    "ucb1_scores",
    "greedy_means",
    "select_arm",
]

from collections.abc import Sequence
from typing import NamedTuple

import jax
import jax.numpy as jnp
import numpy as np

from gpdemo.config import get_logger
from gpdemo.errors import InvalidHyperparameter
from gpdemo.helpers import ArrayLike, JAXArray, default_float
from gpdemo.sampling import SeedOrKey, as_key

STRATEGIES = ("thompson", "ucb", "greedy")
DEFAULT_PROBS = (0.3, 0.5, 0.7, 0.4)


class Arm(NamedTuple):
    """One arm of a Bernoulli bandit

    Args:
        prob: The probability that a pull pays out.
        wins: The number of pulls that paid out.
        losses: The number of pulls that didn't.
    """

    prob: float
    wins: int = 0
    losses: int = 0

    @property
    def pulls(self) -> int:
        return self.wins + self.losses


class Pull(NamedTuple):
    arm: int
    reward: int
    regret: float


def _counts(wins: ArrayLike, losses: ArrayLike) -> tuple[JAXArray, JAXArray]:
    dtype = default_float()
    return jnp.asarray(wins, dtype=dtype), jnp.asarray(losses, dtype=dtype)


def thompson_scores(key: SeedOrKey, wins: ArrayLike, losses: ArrayLike) -> JAXArray:
    """One draw per arm from its ``Beta(wins + 1, losses + 1)`` posterior"""
    wins, losses = _counts(wins, losses)
    return jax.random.beta(as_key(key), wins + 1, losses + 1, dtype=wins.dtype)


def ucb1_scores(wins: ArrayLike, losses: ArrayLike) -> JAXArray:
    """The UCB1 index ``mean + sqrt(2 log(N + 1) / n)``

    ``N`` is the total number of pulls and ``n`` the pulls of each arm. Arms
    that were never pulled score ``inf``.
    """
    wins, losses = _counts(wins, losses)
    n = wins + losses
    safe_n = jnp.where(n > 0, n, 1)
    bonus = jnp.sqrt(2 * jnp.log(jnp.sum(n) + 1) / safe_n)
    return jnp.where(n > 0, wins / safe_n + bonus, jnp.inf)


def greedy_means(wins: ArrayLike, losses: ArrayLike) -> JAXArray:
    """The empirical payout rate per arm, ``0.5`` for arms never pulled"""
    wins, losses = _counts(wins, losses)
    n = wins + losses
    return jnp.where(n > 0, wins / jnp.where(n > 0, n, 1), 0.5)


def select_arm(
    strategy: str,
    key: SeedOrKey,
    wins: ArrayLike,
    losses: ArrayLike,
    *,
    epsilon: float = 0.1,
) -> int:
    """Choose the next arm to pull

    Args:
        strategy: ``"thompson"``, ``"ucb"`` or ``"greedy"`` (epsilon-greedy).
        key: A ``jax`` random key or an integer seed. UCB1 ignores it.
        wins: The wins per arm.
        losses: The losses per arm.
        epsilon: The exploration rate of epsilon-greedy.

    Returns:
        The index of the chosen arm. Ties go to the lowest index.
    """
    strategy = strategy.lower()
    if strategy == "thompson":
        scores = thompson_scores(key, wins, losses)
    elif strategy == "ucb":
        scores = ucb1_scores(wins, losses)
    elif strategy == "greedy":
        explore_key, arm_key = jax.random.split(as_key(key))
        if float(jax.random.uniform(explore_key)) < epsilon:
            num_arms = jnp.shape(wins)[0]
            return int(jax.random.randint(arm_key, (), 0, num_arms))
        scores = greedy_means(wins, losses)
    else:
        raise ValueError(
            f"unknown bandit strategy {strategy!r}; expected one of {STRATEGIES}"
        )
    return int(jnp.argmax(scores))


class Bandit:
    """A Bernoulli bandit and the record of the pulls made on it

    Args:
        probs: The payout probability of each arm, each in ``[0, 1]``.
        strategy: ``"thompson"``, ``"ucb"`` or ``"greedy"``.
        epsilon: The exploration rate used by ``"greedy"``.
    """

    def __init__(
        self,
        probs: Sequence[float] = DEFAULT_PROBS,
        strategy: str = "thompson",
        epsilon: float = 0.1,
    ):
        probs = np.asarray(probs, dtype=float)
        if probs.ndim != 1 or probs.shape[0] == 0:
            raise InvalidHyperparameter("a bandit needs a non-empty list of arms")
        if not np.all((probs >= 0) & (probs <= 1)):
            raise InvalidHyperparameter(
                f"arm probabilities must be in [0, 1], got {probs.tolist()}"
            )
        if not 0 <= epsilon <= 1:
            raise InvalidHyperparameter(f"epsilon must be in [0, 1], got {epsilon}")
        if strategy.lower() not in STRATEGIES:
            raise ValueError(
                f"unknown bandit strategy {strategy!r}; expected one of {STRATEGIES}"
            )
        self.arms = [Arm(float(p)) for p in probs]
        self.strategy = strategy.lower()
        self.epsilon = epsilon
        self.history: list[Pull] = []

    @property
    def total_pulls(self) -> int:
        return len(self.history)

    @property
    def best_prob(self) -> float:
        return max(arm.prob for arm in self.arms)

    @property
    def regret(self) -> list[float]:
        """The cumulative regret after each pull"""
        return np.cumsum([pull.regret for pull in self.history]).tolist()

    @property
    def cumulative_regret(self) -> float:
        return float(sum(pull.regret for pull in self.history))

    def select_arm(self, key: SeedOrKey) -> int:
        return select_arm(
            self.strategy,
            key,
            [arm.wins for arm in self.arms],
            [arm.losses for arm in self.arms],
            epsilon=self.epsilon,
        )

    def pull(self, key: SeedOrKey) -> Pull:
        """Choose an arm, pull it and record the outcome"""
        select_key, reward_key = jax.random.split(as_key(key))
        index = self.select_arm(select_key)
        arm = self.arms[index]
        reward = int(float(jax.random.uniform(reward_key)) < arm.prob)
        self.arms[index] = arm._replace(
            wins=arm.wins + reward, losses=arm.losses + 1 - reward
        )
        pull = Pull(index, reward, self.best_prob - arm.prob)
        self.history.append(pull)
        get_logger().debug(
            "pull %d: %s chose arm %d, reward %d",
            self.total_pulls,
            self.strategy,
            index,
            reward,
        )
        return pull

    def run(self, key: SeedOrKey, num_pulls: int) -> list[Pull]:
        keys = jax.random.split(as_key(key), num_pulls)
        return [self.pull(k) for k in keys]

    def reset(self) -> None:
        self.arms = [Arm(arm.prob) for arm in self.arms]
        self.history.clear()
