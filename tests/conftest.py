"""
Shared pytest fixtures for profilehmm tests.
"""
import pytest
import numpy as np


@pytest.fixture(params=['numba', 'numpy'])
def backend(request):
    """Run a test once per inference backend."""
    return request.param


@pytest.fixture
def two_state_probs():
    """
    2-state, 3-symbol model in probability space.
    The third transition column is the end probability.
    """
    return {
        'initial': np.array([0.6, 0.4]),
        'transitions': np.array([
            [0.7, 0.2, 0.1],
            [0.3, 0.6, 0.1],
        ]),
        'emissions': np.array([
            [0.5, 0.4, 0.1],  # State 0: prefers symbol 0
            [0.1, 0.3, 0.6],  # State 1: prefers symbol 2
        ]),
    }


@pytest.fixture
def two_state_model(two_state_probs, backend):
    """Known-answer model, one instance per backend."""
    from profilehmm.core.hmm import ProfileHMM

    return ProfileHMM.from_probabilities(
        two_state_probs['initial'],
        two_state_probs['transitions'],
        two_state_probs['emissions'],
        backend=backend,
    )


@pytest.fixture
def tied_probs():
    """Two indistinguishable states: every Viterbi comparison is a tie."""
    return {
        'initial': np.array([0.5, 0.5]),
        'transitions': np.array([
            [0.45, 0.45, 0.1],
            [0.45, 0.45, 0.1],
        ]),
        'emissions': np.array([
            [0.5, 0.5],
            [0.5, 0.5],
        ]),
    }


@pytest.fixture
def random_model():
    """
    Factory for random row-normalized models.

    Usage: random_model(n_states, n_symbols, seed=0, **options)
    """
    from profilehmm.core.hmm import ProfileHMM

    def _make(n_states, n_symbols, seed=0, **options):
        np.random.seed(seed)
        initial = np.random.dirichlet(np.ones(n_states))
        transitions = np.random.dirichlet(np.ones(n_states + 1), size=n_states)
        emissions = np.random.dirichlet(np.ones(n_symbols), size=n_states)
        return ProfileHMM.from_probabilities(initial, transitions, emissions, **options)

    return _make


@pytest.fixture
def simple_observations():
    """Observation sequence with clear runs of state-0 and state-1 symbols."""
    return np.array([0, 0, 0, 1, 1, 2, 2, 2, 2, 2, 1, 0, 0, 0], dtype=np.int32)
