"""optadapt.core: results, errors, value types, fixed-point scaling."""

from optadapt.core.errors import AdapterError as AdapterError
from optadapt.core.errors import ArithmeticOverflowError as ArithmeticOverflowError
from optadapt.core.errors import CollateralTooSmallError as CollateralTooSmallError
from optadapt.core.errors import InsufficientFundsError as InsufficientFundsError
from optadapt.core.errors import InsufficientLiquidityError as InsufficientLiquidityError
from optadapt.core.errors import InvalidOptionError as InvalidOptionError
from optadapt.core.errors import NotYetExpiredError as NotYetExpiredError
from optadapt.core.errors import OptionExpiredError as OptionExpiredError
from optadapt.core.errors import OrderMismatchError as OrderMismatchError
from optadapt.core.errors import PersistenceError as PersistenceError
from optadapt.core.errors import ResidualBalanceError as ResidualBalanceError
from optadapt.core.errors import SettlementError as SettlementError
from optadapt.core.errors import StaleOrderError as StaleOrderError
from optadapt.core.errors import TransferError as TransferError
from optadapt.core.errors import UnauthorizedError as UnauthorizedError
from optadapt.core.errors import UnknownOptionError as UnknownOptionError
from optadapt.core.errors import ZeroProfitError as ZeroProfitError
from optadapt.core.result import Err as Err
from optadapt.core.result import Ok as Ok
from optadapt.core.result import Result as Result
from optadapt.core.result import sequence as sequence
from optadapt.core.result import unwrap as unwrap
from optadapt.core.scaling import UINT256_MAX as UINT256_MAX
from optadapt.core.scaling import WAD as WAD
from optadapt.core.scaling import WAD_DECIMALS as WAD_DECIMALS
from optadapt.core.scaling import checked_mul as checked_mul
from optadapt.core.scaling import from_wad as from_wad
from optadapt.core.scaling import scale_amount as scale_amount
from optadapt.core.scaling import to_wad as to_wad
from optadapt.core.scaling import wdiv as wdiv
from optadapt.core.scaling import wmul as wmul
from optadapt.core.serialization import canonical_bytes as canonical_bytes
from optadapt.core.serialization import content_hash as content_hash
from optadapt.core.serialization import derive_address as derive_address
from optadapt.core.types import NATIVE as NATIVE
from optadapt.core.types import Address as Address
from optadapt.core.types import FrozenMap as FrozenMap
from optadapt.core.types import UtcDatetime as UtcDatetime
