"""
profilehmm - log-space forward, backward and Viterbi inference for
Profile Hidden Markov Models over discrete alphabets.
"""

__version__ = "1.0.0"

from profilehmm.core.hmm import ProfileHMM
from profilehmm.core.logprob import LN_ONE, LN_ZERO, ln_add_exp, logsumexp, to_log
from profilehmm.errors import (
    EmptyObservationSequence,
    MalformedModel,
    ObservationOutOfRange,
    ProfileHMMError,
)
