"""
HTTP routes for the portfolio stats API
"""
