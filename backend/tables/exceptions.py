class TableClosingError(Exception):
    """Base class for table closing errors surfaced to staff clients."""

    code = "TABLE_CLOSING_ERROR"


class TableLockBusy(TableClosingError):
    """Another close of the same table is in progress."""

    code = "TABLE_LOCK_BUSY"

    def __init__(self, table):
        self.table = table
        super().__init__(f"Table {table.number} is already being closed; try again shortly")


class NothingToClose(TableClosingError):
    """The table (or the selected customer) has no active orders."""

    code = "NOTHING_TO_CLOSE"


class PartialCloseFailure(TableClosingError):
    """
    Some orders of the bill could not be delivered. Orders that did close
    stay closed; `result` names both sets.
    """

    code = "PARTIAL_CLOSE_FAILURE"

    def __init__(self, result):
        self.result = result
        super().__init__(
            f"Closed {len(result.closed_order_ids)} order(s); "
            f"{len(result.failed_order_ids)} could not be closed"
        )

    @property
    def closed_order_ids(self):
        return self.result.closed_order_ids

    @property
    def failed_order_ids(self):
        return self.result.failed_order_ids
