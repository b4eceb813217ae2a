from .inventory import Product, ProgressEvent, PRODUCT_STATUSES, STATUS_LABELS, STATUS_LABELS_ES
from .history import ArchivedSale, ARCHIVE_ACTIONS

__all__ = [
    'Product', 'ProgressEvent', 'PRODUCT_STATUSES', 'STATUS_LABELS', 'STATUS_LABELS_ES',
    'ArchivedSale', 'ARCHIVE_ACTIONS',
]
