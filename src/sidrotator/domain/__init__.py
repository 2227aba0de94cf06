"""
Domain layer - rotation rules.

This package contains:
- Errors: the rotation failure taxonomy and its HTTP mapping
- Gates: the ordered eligibility and certificate checks
"""
