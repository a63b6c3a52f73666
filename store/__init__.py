"""
Store settings application.

Holds the single StoreSettings row (store name, currency, tax percentage,
low stock threshold, social links) read by invoicing and dashboards.
"""
