"""optadapt.ledger: token balance ledger."""

from optadapt.ledger.engine import LedgerSnapshot as LedgerSnapshot
from optadapt.ledger.engine import TokenLedger as TokenLedger
from optadapt.ledger.transactions import Balance as Balance
from optadapt.ledger.transactions import ExecuteResult as ExecuteResult
from optadapt.ledger.transactions import Move as Move
from optadapt.ledger.transactions import Transaction as Transaction
