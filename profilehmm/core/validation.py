"""Eager validation of model tables and observation sequences.

Every public inference method runs these checks before any dynamic
programming loop, so bad input fails with a typed error instead of an
IndexError halfway through a table. Probability normalization is not
checked; the tables are assumed to come from a trusted builder.
"""

from typing import Tuple

import numpy as np

from profilehmm.errors import (
    EmptyObservationSequence,
    MalformedModel,
    ObservationOutOfRange,
)


def _as_table(values, name: str, ndim: int) -> np.ndarray:
    if values is None:
        raise MalformedModel("table is not populated", table=name)
    try:
        table = np.ascontiguousarray(values, dtype=np.float64)
    except (TypeError, ValueError) as e:
        raise MalformedModel(f"not a rectangular numeric table ({e})", table=name) from e
    if table.ndim != ndim:
        raise MalformedModel(f"expected {ndim}D table, got {table.ndim}D", table=name)
    if np.isnan(table).any():
        raise MalformedModel("table contains NaN", table=name)
    return table


def validate_model(model) -> Tuple[np.ndarray, np.ndarray, np.ndarray]:
    """
    Check that a ProfileHMM is populated and its tables agree in shape.

    Args:
        model: A ProfileHMM (anything with the four model attributes)

    Returns:
        (initial_states_prob, state_transitions, emission_matrix) as
        contiguous float64 arrays

    Raises:
        MalformedModel: If a table is missing, ragged, NaN-bearing or
            mis-shaped with respect to the others
    """
    observation_count = model.observation_count
    if isinstance(observation_count, (bool, np.bool_)) or \
            not isinstance(observation_count, (int, np.integer)) or observation_count < 1:
        raise MalformedModel(
            f"must be a positive integer, got {observation_count!r}",
            table='observation_count'
        )

    log_init = _as_table(model.initial_states_prob, 'initial_states_prob', 1)
    log_trans = _as_table(model.state_transitions, 'state_transitions', 2)
    log_emit = _as_table(model.emission_matrix, 'emission_matrix', 2)

    n_states = log_init.shape[0]
    if n_states == 0:
        raise MalformedModel("model has no states", table='initial_states_prob')
    if log_trans.shape != (n_states, n_states + 1):
        raise MalformedModel(
            f"expected shape ({n_states}, {n_states + 1}) including the end column, "
            f"got {log_trans.shape}",
            table='state_transitions'
        )
    if log_emit.shape != (n_states, observation_count):
        raise MalformedModel(
            f"expected shape ({n_states}, {observation_count}), got {log_emit.shape}",
            table='emission_matrix'
        )

    return log_init, log_trans, log_emit


def validate_observations(observations, observation_count: int) -> np.ndarray:
    """
    Flatten and check an observation sequence.

    Accepts shape (T,) or (T, 1). Floats are accepted when integral.

    Returns:
        Observations as a contiguous int64 array

    Raises:
        EmptyObservationSequence: If there are no observations
        ObservationOutOfRange: If a symbol is non-integral or outside
            [0, observation_count)
        TypeError: If the observations are not numeric
    """
    obs = np.asarray(observations).flatten()
    if obs.size == 0:
        raise EmptyObservationSequence()

    kind = obs.dtype.kind
    if kind in 'iub':
        invalid = (obs < 0) | (obs >= observation_count)
    elif kind == 'f':
        invalid = ~np.isfinite(obs) | (obs != np.trunc(obs))
        invalid |= (obs < 0) | (obs >= observation_count)
    else:
        raise TypeError(
            f"Observations must be integer symbols, got dtype {obs.dtype}"
        )

    if invalid.any():
        position = int(np.argmax(invalid))
        raise ObservationOutOfRange(position, obs[position].item(), observation_count)

    return np.ascontiguousarray(obs, dtype=np.int64)
