"""Storefront: checkout, payment verification and order fulfillment.

Turns a priced shopping cart into a pending order bound to a payment gateway
transaction, verifies the gateway's signed confirmation, and applies the paid
order's stock and cart side effects as one unit.
"""
