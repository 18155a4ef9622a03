"""Hosted-checkout payment relay.

Creates orders with Cashfree, PhonePe and PayPal, relays their status
objects, and verifies their webhooks.
"""
