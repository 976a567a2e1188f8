"""
Data backends feeding raw series into requests.
"""
