"""
Column layouts for each transaction table.

Column order is display order. Sort keys are model field names so the query
endpoints can whitelist them.
"""

from .config import ColumnConfig as Col, TableConfig


UNFULFILLED = TableConfig(
    name='unfulfilled',
    columns=(
        Col('orderDate', 'Order Imported', 15, 3, sortable=True, sort_key='order_imported_at', tinted=True),
        Col('shipmentId', 'Shipment ID', 11, 11, tinted=True),
        Col('status', 'Status', 12, 2, tinted=True),
        Col('orderId', 'Order ID', 9, 1, default_visible=False),
        Col('customerName', 'Customer', 11, 4),
        Col('channelName', 'Channel', 6, 10, align='center'),
        Col('storeOrderId', 'Store ID', 8, 9, align='center', max_width=130),
        Col('itemCount', 'Picks', 6, 6, align='center'),
        Col('orderType', 'Type', 6, 8, align='center'),
        Col('age', 'Age', 4, 5, align='center'),
        Col('slaDate', 'SLA Date', 12, 7),
        Col('totalShipments', '# Shipments', 6, 12, default_visible=False),
        Col('destCountry', 'Dest. Country', 8, 13, default_visible=False),
        Col('shipOption', 'Ship Option', 12, 14, default_visible=False),
    ),
    breakpoints={'xl': 11, 'lg': 8, 'md': 6, 'sm': 4, 'xs': 3},
    default_sort='order_imported_at',
)

SHIPMENTS = TableConfig(
    name='shipments',
    columns=(
        Col('labelCreated', 'Label Created', 12, 10, sortable=True, sort_key='label_created_at', tinted=True),
        Col('shipmentId', 'Shipment ID', 10, 12, tinted=True),
        Col('status', 'Status', 12, 2, tinted=True),
        Col('orderId', 'Order ID', 10, 1, default_visible=False),
        Col('customerName', 'Customer', 11, 5, sortable=True, sort_key='customer_name'),
        Col('carrier', 'Carrier', 9, 9, sortable=True, sort_key='carrier'),
        Col('trackingId', 'Tracking ID', 10, 3, max_width=160, default_visible=False),
        Col('charge', 'Charge', 6, 4, align='center', shrink_to_fit=True),
        Col('qty', 'Qty', 5, 8, align='center', shrink_to_fit=True),
        Col('transitTimeDays', 'Transit', 6, 7, align='center', sortable=True,
            sort_key='transit_time_days', shrink_to_fit=True),
        Col('age', 'Age', 5, 11, align='center', sortable=True, sort_key='label_created_at', shrink_to_fit=True),
        Col('actions', '', 10, 1, shrink_to_fit=True, tinted=True),
        Col('orderType', 'Type', 6, 13, default_visible=False),
        Col('channelName', 'Channel', 5, 14, default_visible=False),
        Col('destCountry', 'Dest. Country', 8, 15, default_visible=False),
        Col('orderDate', 'Order Date', 12, 16, default_visible=False),
        Col('fcName', 'FC', 10, 17, default_visible=False),
        Col('shipOption', 'Ship Option', 12, 18, default_visible=False),
        Col('deliveredDate', 'Delivered On', 12, 19, default_visible=False),
        Col('storeOrderId', 'Store Order', 10, 20, max_width=130, default_visible=False),
    ),
    breakpoints={'xl': 20, 'lg': 12, 'md': 6, 'sm': 4, 'xs': 3},
    default_sort='label_created_at',
)

ADDITIONAL_SERVICES = TableConfig(
    name='additional_services',
    columns=(
        Col('transactionDate', 'Date', 15, 1, sortable=True, sort_key='transaction_date'),
        Col('referenceId', 'Reference ID', 14, 3),
        Col('status', 'Status', 14, 6),
        Col('feeType', 'Fee Type', 18, 4),
        Col('charge', 'Charge', 13, 5, sortable=True, sort_key='amount'),
        Col('invoiceNumber', 'Invoice', 14, 2),
    ),
    breakpoints={'xl': 6, 'lg': 5, 'md': 4, 'sm': 3, 'xs': 3},
    default_sort='transaction_date',
)

RETURNS = TableConfig(
    name='returns',
    columns=(
        Col('returnCreationDate', 'Created', 10, 1, sortable=True, sort_key='transaction_date'),
        Col('invoiceNumber', 'Invoice', 14, 2),
        Col('returnId', 'Return ID', 8, 3),
        Col('returnStatus', 'Return Status', 10, 4),
        Col('returnType', 'Return Type', 15, 5),
        Col('charge', 'Charge', 7, 6),
        Col('originalShipmentId', 'Original Shipment', 10, 7),
        Col('trackingNumber', 'Tracking #', 18, 8, max_width=160),
        Col('fcName', 'FC', 11, 9, default_visible=False),
    ),
    breakpoints={'xl': 8, 'lg': 6, 'md': 5, 'sm': 4, 'xs': 3},
    default_sort='transaction_date',
)

RECEIVING = TableConfig(
    name='receiving',
    columns=(
        Col('transactionDate', 'Date', 11, 1, sortable=True, sort_key='transaction_date'),
        Col('wroId', 'WRO ID', 8, 2),
        Col('feeType', 'Fee Type', 12, 3),
        Col('invoiceNumber', 'Invoice', 14, 4),
        Col('charge', 'Charge', 9, 5),
        Col('receivingStatus', 'Status', 12, 6),
        Col('contents', 'Contents', 31, 7),
    ),
    breakpoints={'xl': 7, 'lg': 5, 'md': 4, 'sm': 3, 'xs': 3},
    default_sort='transaction_date',
)

STORAGE = TableConfig(
    name='storage',
    columns=(
        Col('chargeStartDate', 'Date', 12, 1, sortable=True, sort_key='transaction_date'),
        Col('invoiceNumber', 'Invoice', 16, 2),
        Col('inventoryId', 'Inventory ID', 10, 3),
        Col('fcName', 'FC Name', 14, 4),
        Col('locationType', 'Location Type', 12, 5),
        Col('charge', 'Charge', 10, 6),
        Col('status', 'Status', 12, 7),
        Col('comment', 'Comment', 12, 8, default_visible=False),
    ),
    breakpoints={'xl': 7, 'lg': 6, 'md': 5, 'sm': 4, 'xs': 3},
    default_sort='transaction_date',
)

CREDITS = TableConfig(
    name='credits',
    columns=(
        Col('transactionDate', 'Date', 11, 1, sortable=True, sort_key='transaction_date'),
        Col('creditInvoiceNumber', 'Invoice', 14, 2),
        Col('status', 'Status', 12, 3),
        Col('referenceId', 'Reference ID', 12, 4),
        Col('ticket', 'Ticket', 12, 5),
        Col('creditAmount', 'Credit', 8, 6),
        Col('creditReason', 'Credit Reason', 23, 7),
    ),
    breakpoints={'xl': 7, 'lg': 5, 'md': 4, 'sm': 3, 'xs': 3},
    default_sort='transaction_date',
)

SHIPPED = TableConfig(
    name='shipped',
    columns=(
        Col('orderId', 'Order ID', 8, 1),
        Col('storeOrderId', 'Store Order', 12, 9, max_width=130),
        Col('customerName', 'Customer', 13, 4, max_width=160),
        Col('status', 'Status', 11, 2),
        Col('carrier', 'Carrier', 12, 5),
        Col('trackingId', 'Tracking', 12, 6, max_width=160),
        Col('shippedDate', 'Shipped', 11, 3, sortable=True, sort_key='label_created_at'),
        Col('deliveredDate', 'Delivered', 11, 7),
        Col('itemCount', 'Items', 6, 8),
        Col('charge', 'Charge', 8, 10),
    ),
    breakpoints={'xl': 10, 'lg': 8, 'md': 6, 'sm': 4, 'xs': 3},
    default_sort='label_created_at',
)

INVOICES = TableConfig(
    name='invoices',
    columns=(
        Col('client', '', 3, 1),
        Col('invoiceDate', 'Date', 7, 1, sortable=True, sort_key='invoice_date'),
        Col('invoiceNumber', 'Invoice #', 7, 1),
        Col('billingPeriod', 'Period', 8, 1),
        Col('shipments', 'Orders', 5, 2, sortable=True, sort_key='shipment_count'),
        Col('cost', 'Cost', 6, 2, sortable=True, sort_key='subtotal'),
        Col('profit', 'Profit', 6, 2),
        Col('transactions', 'Transactions', 5, 3),
        Col('amount', 'Total', 7, 1, sortable=True, sort_key='total_amount'),
        Col('status', 'Status', 5, 1),
        Col('download', '', 3, 1, align='center'),
    ),
    breakpoints={'xl': 2, 'lg': 2, 'md': 1, 'sm': 1, 'xs': 1},
    default_sort='invoice_date',
)

TABLE_CONFIGS = {
    config.name: config
    for config in (
        UNFULFILLED, SHIPMENTS, ADDITIONAL_SERVICES, RETURNS, RECEIVING,
        STORAGE, CREDITS, SHIPPED, INVOICES,
    )
}
