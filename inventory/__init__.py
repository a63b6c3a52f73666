"""
Inventory Management Application

MODELS:
- Category: Product categories
- Size / Color: Lookup tables with a sort order
- Product: Garments with selling price, cost and a stock counter
- ProductSizePrice: Price override for one product in one size
- StockEntry: Audit trail for every stock change

BUSINESS LOGIC:
- Stock is moved only through inventory.stock (deduct_stock / restore_stock),
  which locks the product row and records a StockEntry
- Stock never goes below zero; deductions are clamped
- Low stock means quantity_in_stock <= StoreSettings.low_stock_threshold

USAGE:
    from inventory.models import Product
    from inventory.stock import deduct_stock, restore_stock

    deducted = deduct_stock(product, 3, reference_id="INV-20240101-0001")
    restore_stock(product, deducted, reference_id="INV-20240101-0001")
"""
