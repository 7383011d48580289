from django.dispatch import Signal

# Sent after a table close has released its lock.
# kwargs: table, result (ClosingResult)
table_closed = Signal()
