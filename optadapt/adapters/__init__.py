"""optadapt.adapters: the uniform options adapter and its variants."""

from optadapt.adapters.events import Exercised as Exercised
from optadapt.adapters.events import Purchased as Purchased
from optadapt.adapters.events import ShortCreated as ShortCreated
from optadapt.adapters.exercise import ExerciseEngine as ExerciseEngine
from optadapt.adapters.exercise import exercise_phase as exercise_phase
from optadapt.adapters.gamma import GammaAdapter as GammaAdapter
from optadapt.adapters.legacy import LegacyAdapter as LegacyAdapter
from optadapt.adapters.protocols import OptionsAdapter as OptionsAdapter
from optadapt.adapters.quoting import ConstantProductPremium as ConstantProductPremium
from optadapt.adapters.quoting import ExternalPremium as ExternalPremium
from optadapt.adapters.resolver import FactoryResolver as FactoryResolver
from optadapt.adapters.resolver import RegistryResolver as RegistryResolver
from optadapt.adapters.shorts import ShortPositionManager as ShortPositionManager
from optadapt.adapters.swap import validate_order as validate_order
