"""Constants and defaults.

Note: Keep constants here to avoid magic numbers spread across code.
"""

from decimal import Decimal

DEFAULT_HISTORY_LIMIT = 200
MAX_REPAYMENT_PERCENTAGE = Decimal("100")
MONEY_QUANTUM = Decimal("0.01")
RECEIPT_PREFIX = "RCP"
CURRENCY_LABEL = "Rs."
