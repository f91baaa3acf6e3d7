from .inventory import StockTransactionError, compute_new_stock, record_stock_transaction
from .scheduling import StatusTransitionError, check_status_change
