"""
Profile HMM inference module

Provides:
1. ProfileHMM, a discrete-emission profile HMM held in log space
2. Forward, backward and Viterbi dynamic programming over one sequence
3. Numba JIT-compiled kernels (default) and vectorized numpy kernels

The transition table carries one extra "end" column per state. Only the
forward aggregate consults it; backward and Viterbi ignore it.
"""

import logging
from typing import Optional, Tuple

import numpy as np
from numba import jit

from profilehmm.core.logprob import LN_ZERO, ln_add_exp, logsumexp, to_log
from profilehmm.core.validation import validate_model, validate_observations

logger = logging.getLogger(__name__)

BACKENDS = ('numba', 'numpy')
TIE_BREAKS = ('first', 'last')


# =============================================================================
# Numba JIT-compiled HMM algorithms
# =============================================================================

@jit(nopython=True, cache=False)
def _forward_numba(obs, log_init, log_trans, log_emit):
    """
    Numba-compiled forward algorithm.

    Args:
        obs: Observation sequence (int64 array)
        log_init: (S,) log initial state probabilities
        log_trans: (S, S+1) log transitions, last column is the end state
        log_emit: (S, n_symbols) log emission probabilities

    Returns:
        alpha: (T, S) forward table
        log_prob: Log probability of the sequence, end transitions included
    """
    T = obs.shape[0]
    S = log_init.shape[0]
    alpha = np.empty((T, S))

    for s in range(S):
        alpha[0, s] = log_init[s] + log_emit[s, obs[0]]

    for t in range(1, T):
        o = obs[t]
        for s in range(S):
            acc = -np.inf
            for k in range(S):
                acc = ln_add_exp(acc, alpha[t - 1, k] + log_trans[k, s])
            alpha[t, s] = acc + log_emit[s, o]

    log_prob = -np.inf
    for s in range(S):
        log_prob = ln_add_exp(log_prob, alpha[T - 1, s] + log_trans[s, S])

    return alpha, log_prob


@jit(nopython=True, cache=False)
def _backward_numba(obs, log_trans, log_emit):
    """Numba-compiled backward algorithm. The end column is not used."""
    T = obs.shape[0]
    S = log_trans.shape[0]
    beta = np.empty((T, S))

    for s in range(S):
        beta[T - 1, s] = 0.0

    for t in range(T - 2, -1, -1):
        o = obs[t + 1]
        for s in range(S):
            acc = -np.inf
            for n in range(S):
                acc = ln_add_exp(acc, beta[t + 1, n] + log_trans[s, n] + log_emit[n, o])
            beta[t, s] = acc

    return beta


@jit(nopython=True, cache=False)
def _viterbi_numba(obs, log_init, log_trans, log_emit,
                   transition_prefer_last, termination_prefer_last):
    """
    Numba-compiled Viterbi decoding.

    Ties between predecessors go to the earliest state unless
    transition_prefer_last is set; ties between final states likewise
    follow termination_prefer_last.

    Returns:
        path: Most likely state sequence (int64)
        log_prob: Log probability of that path
    """
    T = obs.shape[0]
    S = log_init.shape[0]
    score = np.empty((T, S))
    prev = np.zeros((T, S), dtype=np.int64)

    for s in range(S):
        score[0, s] = log_init[s] + log_emit[s, obs[0]]

    for t in range(1, T):
        o = obs[t]
        for j in range(S):
            best = -np.inf
            best_k = 0
            for k in range(S):
                cand = score[t - 1, k] + log_trans[k, j]
                if cand > best or (transition_prefer_last and cand == best):
                    best = cand
                    best_k = k
            prev[t, j] = best_k
            score[t, j] = best + log_emit[j, o]

    path = np.zeros(T, dtype=np.int64)
    best = -np.inf
    final = 0
    for s in range(S):
        v = score[T - 1, s]
        if v > best or (termination_prefer_last and v == best):
            best = v
            final = s
    path[T - 1] = final
    log_prob = score[T - 1, final]

    for t in range(T - 2, -1, -1):
        path[t] = prev[t + 1, path[t + 1]]

    return path, log_prob


# =============================================================================
# Vectorized numpy HMM algorithms (one row of the table per step)
# =============================================================================

def _forward_numpy(obs, log_init, log_trans, log_emit):
    """Forward algorithm with each row merged by scipy's logsumexp."""
    T = len(obs)
    S = len(log_init)
    trans = log_trans[:, :S]
    alpha = np.empty((T, S))

    alpha[0] = log_init + log_emit[:, obs[0]]
    for t in range(1, T):
        alpha[t] = logsumexp(alpha[t - 1][:, np.newaxis] + trans, axis=0) + log_emit[:, obs[t]]

    log_prob = logsumexp(alpha[-1] + log_trans[:, S])
    return alpha, float(log_prob)


def _backward_numpy(obs, log_trans, log_emit):
    """Backward algorithm with each row merged by scipy's logsumexp."""
    T = len(obs)
    S = log_trans.shape[0]
    trans = log_trans[:, :S]
    beta = np.empty((T, S))

    beta[-1] = 0.0
    for t in range(T - 2, -1, -1):
        o = obs[t + 1]
        beta[t] = logsumexp(beta[t + 1][np.newaxis, :] + trans + log_emit[:, o][np.newaxis, :], axis=1)

    return beta


def _argmax(values: np.ndarray, prefer_last: bool, axis: Optional[int] = None):
    """argmax with an explicit tie rule (numpy's own argmax keeps the first)."""
    if not prefer_last:
        return np.argmax(values, axis=axis)
    if axis is None:
        return len(values) - 1 - np.argmax(values[::-1])
    return values.shape[axis] - 1 - np.argmax(np.flip(values, axis=axis), axis=axis)


def _viterbi_numpy(obs, log_init, log_trans, log_emit,
                   transition_prefer_last, termination_prefer_last):
    """Viterbi decoding with one vectorized max per time step."""
    T = len(obs)
    S = len(log_init)
    trans = log_trans[:, :S]
    states = np.arange(S)
    score = np.empty((T, S))
    prev = np.zeros((T, S), dtype=np.int64)

    score[0] = log_init + log_emit[:, obs[0]]
    for t in range(1, T):
        # cand[k, j]: arrive in j from k
        cand = score[t - 1][:, np.newaxis] + trans
        best_k = _argmax(cand, transition_prefer_last, axis=0)
        prev[t] = best_k
        score[t] = cand[best_k, states] + log_emit[:, obs[t]]

    path = np.zeros(T, dtype=np.int64)
    path[-1] = _argmax(score[-1], termination_prefer_last)
    log_prob = score[-1, path[-1]]

    for t in range(T - 2, -1, -1):
        path[t] = prev[t + 1, path[t + 1]]

    return path, float(log_prob)


class ProfileHMM:
    """
    Profile HMM over a discrete alphabet, stored in log space.

    Attributes:
        observation_count: Alphabet size; valid symbols are [0, observation_count)
        initial_states_prob: (S,) log initial state probabilities
        state_transitions: (S, S+1) log transition probabilities; column S
            is the probability of ending in each state
        emission_matrix: (S, observation_count) log emission probabilities

    The model is built empty and populated once by whatever trains it.
    Inference never mutates it, so one instance can serve concurrent calls.

    Options:
        backend: 'numba' (JIT loops) or 'numpy' (vectorized rows)
        transition_tie_break: Which predecessor Viterbi keeps on a tie,
            'first' (strict >) or 'last' (>=)
        termination_tie_break: Which final state Viterbi picks on a tie
    """

    def __init__(self, observation_count: int = 0,
                 initial_states_prob=None,
                 state_transitions=None,
                 emission_matrix=None,
                 backend: str = 'numba',
                 transition_tie_break: str = 'first',
                 termination_tie_break: str = 'last'):
        if backend not in BACKENDS:
            raise ValueError(f"backend must be one of {BACKENDS}, got {backend!r}")
        for name, value in (('transition_tie_break', transition_tie_break),
                            ('termination_tie_break', termination_tie_break)):
            if value not in TIE_BREAKS:
                raise ValueError(f"{name} must be one of {TIE_BREAKS}, got {value!r}")

        self.observation_count = observation_count
        self.initial_states_prob = initial_states_prob
        self.state_transitions = state_transitions
        self.emission_matrix = emission_matrix

        self.backend = backend
        self.transition_tie_break = transition_tie_break
        self.termination_tie_break = termination_tie_break

    @classmethod
    def from_probabilities(cls, initial, transitions, emissions, **options) -> 'ProfileHMM':
        """
        Build a model from probability-space tables.

        Args:
            initial: (S,) initial state probabilities
            transitions: (S, S+1) transition probabilities including the end column
            emissions: (S, n_symbols) emission probabilities
            **options: Passed through to the constructor

        Returns:
            ProfileHMM with log-space tables
        """
        log_emit = to_log(emissions)
        observation_count = log_emit.shape[1] if log_emit.ndim == 2 else 0
        return cls(
            observation_count=observation_count,
            initial_states_prob=to_log(initial),
            state_transitions=to_log(transitions),
            emission_matrix=log_emit,
            **options
        )

    @property
    def state_count(self) -> int:
        """Number of hidden states (0 while the model is unpopulated)."""
        if self.initial_states_prob is None:
            return 0
        return len(self.initial_states_prob)

    def _prepare(self, observations):
        log_init, log_trans, log_emit = validate_model(self)
        obs = validate_observations(observations, self.observation_count)
        return obs, log_init, log_trans, log_emit

    def forward(self, observations) -> Tuple[np.ndarray, float]:
        """
        Forward algorithm in log space.

        Args:
            observations: Symbol sequence, shape (T,) or (T, 1)

        Returns:
            alpha: (T, S) table; alpha[t, s] is the log probability of
                emitting observations[:t+1] and being in state s at t
            log_prob: Log probability of the whole sequence, with the end
                transition out of the final state folded in
        """
        obs, log_init, log_trans, log_emit = self._prepare(observations)
        logger.debug("forward: %d observations, %d states, backend=%s",
                     len(obs), len(log_init), self.backend)

        if self.backend == 'numba':
            alpha, log_prob = _forward_numba(obs, log_init, log_trans, log_emit)
            return alpha, float(log_prob)
        return _forward_numpy(obs, log_init, log_trans, log_emit)

    def backward(self, observations) -> np.ndarray:
        """
        Backward algorithm in log space.

        Returns:
            beta: (T, S) table; beta[t, s] is the log probability of
                observations[t+1:] given state s at t. The last row is 0.0.
        """
        obs, _, log_trans, log_emit = self._prepare(observations)
        logger.debug("backward: %d observations, %d states, backend=%s",
                     len(obs), log_trans.shape[0], self.backend)

        if self.backend == 'numba':
            return _backward_numba(obs, log_trans, log_emit)
        return _backward_numpy(obs, log_trans, log_emit)

    def viterbi(self, observations) -> Tuple[np.ndarray, float]:
        """
        Viterbi algorithm for the most likely state sequence.

        Returns:
            path: Most likely state sequence, shape (T,)
            log_prob: Log probability of the path (end column not included)
        """
        obs, log_init, log_trans, log_emit = self._prepare(observations)
        logger.debug("viterbi: %d observations, %d states, backend=%s",
                     len(obs), len(log_init), self.backend)

        transition_prefer_last = self.transition_tie_break == 'last'
        termination_prefer_last = self.termination_tie_break == 'last'

        if self.backend == 'numba':
            path, log_prob = _viterbi_numba(obs, log_init, log_trans, log_emit,
                                            transition_prefer_last, termination_prefer_last)
            return path, float(log_prob)
        return _viterbi_numpy(obs, log_init, log_trans, log_emit,
                              transition_prefer_last, termination_prefer_last)

    def score(self, observations) -> float:
        """Log probability of an observation sequence (forward aggregate)."""
        _, log_prob = self.forward(observations)
        if log_prob == LN_ZERO:
            logger.debug("score: sequence has zero probability under the model")
        return log_prob

    def path_log_prob(self, observations, path) -> float:
        """
        Log probability of emitting observations along a given state path.

        Terms are accumulated in the same order as the Viterbi recurrence,
        so the Viterbi path reproduces the Viterbi score exactly.

        Raises:
            ValueError: If the path length differs from the observations or
                a state is out of range
        """
        obs, log_init, log_trans, log_emit = self._prepare(observations)
        states = np.asarray(path).flatten()
        if len(states) != len(obs):
            raise ValueError(
                f"Path has {len(states)} states but there are {len(obs)} observations"
            )
        if states.dtype.kind not in 'iu' or (states < 0).any() or (states >= len(log_init)).any():
            raise ValueError(f"Path states must be integers in [0, {len(log_init)})")

        s = states[0]
        log_prob = log_init[s] + log_emit[s, obs[0]]
        for t in range(1, len(obs)):
            s_prev, s = s, states[t]
            log_prob = log_prob + log_trans[s_prev, s]
            log_prob = log_prob + log_emit[s, obs[t]]
        return float(log_prob)
