# mypy: ignore-errors

import jax
import jax.numpy as jnp
import numpy as np
import pytest

from gpdemo import bandits
from gpdemo.bandits import Arm, Bandit
from gpdemo.errors import InvalidHyperparameter
from gpdemo.test_utils import assert_allclose


def test_ucb1_scores():
    scores = bandits.ucb1_scores([1, 0, 3], [1, 0, 1])
    assert_allclose(scores[0], 0.5 + np.sqrt(2 * np.log(7) / 2))
    assert scores[1] == jnp.inf
    assert_allclose(scores[2], 0.75 + np.sqrt(2 * np.log(7) / 4))


def test_greedy_means():
    assert_allclose(bandits.greedy_means([0, 2, 0], [0, 2, 3]), [0.5, 0.5, 0.0])


def test_thompson_scores():
    scores = bandits.thompson_scores(0, [0, 10, 3], [0, 1, 30])
    assert scores.shape == (3,)
    assert jnp.all((scores > 0) & (scores < 1))

    draws = jax.vmap(lambda k: bandits.thompson_scores(k, [8], [2]))(
        jax.random.split(jax.random.PRNGKey(1), 20_000)
    )
    assert abs(float(jnp.mean(draws)) - 0.75) < 0.01


def test_ucb_tries_every_arm_first():
    bandit = Bandit(strategy="ucb")
    pulls = bandit.run(0, 4)
    assert [pull.arm for pull in pulls] == [0, 1, 2, 3]
    assert all(arm.pulls == 1 for arm in bandit.arms)


def test_select_arm_is_deterministic():
    for strategy in bandits.STRATEGIES:
        first = Bandit(strategy=strategy)
        second = Bandit(strategy=strategy)
        assert first.run(jax.random.PRNGKey(3), 50) == second.run(
            jax.random.PRNGKey(3), 50
        )
        assert first.arms == second.arms


def test_select_arm_unknown_strategy():
    with pytest.raises(ValueError):
        bandits.select_arm("softmax", 0, [0, 0], [0, 0])
    with pytest.raises(ValueError):
        Bandit(strategy="softmax")


def test_greedy_without_exploration():
    bandit = Bandit(probs=(0.0, 1.0), strategy="greedy", epsilon=0.0)
    pulls = bandit.run(2, 10)
    assert [pull.arm for pull in pulls] == [0] + [1] * 9
    assert [pull.reward for pull in pulls] == [0] + [1] * 9
    assert bandit.arms == [Arm(0.0, wins=0, losses=1), Arm(1.0, wins=9, losses=0)]
    assert bandit.cumulative_regret == 1.0
    assert bandit.regret == [1.0] * 10


def test_greedy_full_exploration_visits_every_arm():
    bandit = Bandit(strategy="greedy", epsilon=1.0)
    bandit.run(4, 200)
    assert all(arm.pulls > 0 for arm in bandit.arms)
    assert sum(arm.pulls for arm in bandit.arms) == bandit.total_pulls == 200


def test_regret():
    bandit = Bandit(strategy="thompson")
    pulls = bandit.run(7, 100)
    probs = [arm.prob for arm in bandit.arms]
    expected = np.cumsum([0.7 - probs[pull.arm] for pull in pulls])
    assert_allclose(bandit.regret, expected)
    assert_allclose(bandit.cumulative_regret, expected[-1])
    assert np.all(np.diff(bandit.regret) >= 0)

    single = Bandit(probs=(0.7,))
    single.run(0, 20)
    assert single.cumulative_regret == 0.0


@pytest.mark.parametrize("strategy", ["thompson", "ucb"])
def test_learns_the_best_arm(strategy):
    bandit = Bandit(strategy=strategy)
    bandit.run(11, 500)
    counts = [arm.pulls for arm in bandit.arms]
    assert int(np.argmax(counts)) == 2
    # Picking arms uniformly at random costs 0.225 per pull on average
    assert bandit.cumulative_regret < 0.225 * 500
    if strategy == "thompson":
        assert bandit.cumulative_regret < 0.5 * 0.225 * 500


def test_reset():
    bandit = Bandit()
    bandit.run(0, 10)
    bandit.reset()
    assert bandit.total_pulls == 0
    assert bandit.regret == []
    assert all(arm.pulls == 0 for arm in bandit.arms)
    assert [arm.prob for arm in bandit.arms] == list(bandits.DEFAULT_PROBS)


def test_invalid_arms():
    with pytest.raises(InvalidHyperparameter):
        Bandit(probs=(0.5, 1.5))
    with pytest.raises(InvalidHyperparameter):
        Bandit(probs=())
    with pytest.raises(InvalidHyperparameter):
        Bandit(epsilon=-0.1)
