"""Core Profile HMM algorithms and log-space primitives."""

from profilehmm.core.hmm import ProfileHMM
from profilehmm.core.logprob import LN_ONE, LN_ZERO, ln_add_exp, logsumexp, to_log
from profilehmm.core.validation import validate_model, validate_observations
