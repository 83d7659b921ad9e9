"""optadapt.infra: collaborator protocols, in-memory doubles, configuration."""

from optadapt.infra.atomic import atomically as atomically
from optadapt.infra.config import ADAPTER_TOPICS as ADAPTER_TOPICS
from optadapt.infra.config import TOPIC_EXERCISES as TOPIC_EXERCISES
from optadapt.infra.config import TOPIC_PURCHASES as TOPIC_PURCHASES
from optadapt.infra.config import TOPIC_SHORTS as TOPIC_SHORTS
from optadapt.infra.config import GammaConfig as GammaConfig
from optadapt.infra.config import LegacyConfig as LegacyConfig
from optadapt.infra.config import ZeroProfitPolicy as ZeroProfitPolicy
from optadapt.infra.memory_adapter import InMemoryChain as InMemoryChain
from optadapt.infra.memory_adapter import InMemoryConstantProductExchange as InMemoryConstantProductExchange
from optadapt.infra.memory_adapter import InMemoryController as InMemoryController
from optadapt.infra.memory_adapter import InMemoryEventBus as InMemoryEventBus
from optadapt.infra.memory_adapter import InMemoryOracle as InMemoryOracle
from optadapt.infra.memory_adapter import InMemoryOTokenFactory as InMemoryOTokenFactory
from optadapt.infra.memory_adapter import InMemorySwapVenue as InMemorySwapVenue
from optadapt.infra.memory_adapter import InMemoryWrappedNative as InMemoryWrappedNative
from optadapt.infra.protocols import Clock as Clock
from optadapt.infra.protocols import ConstantProductExchange as ConstantProductExchange
from optadapt.infra.protocols import Controller as Controller
from optadapt.infra.protocols import EventBus as EventBus
from optadapt.infra.protocols import Journal as Journal
from optadapt.infra.protocols import OTokenFactory as OTokenFactory
from optadapt.infra.protocols import PriceOracle as PriceOracle
from optadapt.infra.protocols import SwapVenue as SwapVenue
from optadapt.infra.protocols import TokenBank as TokenBank
from optadapt.infra.protocols import WrappedNative as WrappedNative
