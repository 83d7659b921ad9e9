"""optadapt.instrument: option terms, orders, payoff and expiry calendar."""

from optadapt.instrument.expiry import is_valid_expiry as is_valid_expiry
from optadapt.instrument.expiry import next_expiry as next_expiry
from optadapt.instrument.orders import SwapOrder as SwapOrder
from optadapt.instrument.payoff import CallPayoutBasis as CallPayoutBasis
from optadapt.instrument.payoff import compute_exercise_profit as compute_exercise_profit
from optadapt.instrument.payoff import minted_amount as minted_amount
from optadapt.instrument.terms import ExercisePhase as ExercisePhase
from optadapt.instrument.terms import OptionTerms as OptionTerms
from optadapt.instrument.terms import OptionToken as OptionToken
from optadapt.instrument.terms import OptionType as OptionType
from optadapt.instrument.terms import Position as Position
from optadapt.instrument.terms import Vault as Vault
