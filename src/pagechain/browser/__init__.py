"""Playwright session management.

Launching and tearing down the browser lives here; the action queue only
ever borrows the resulting page.
"""
