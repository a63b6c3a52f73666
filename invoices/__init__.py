"""Invoicing: pricing, the sale and cancellation workflow, and sales reports."""
