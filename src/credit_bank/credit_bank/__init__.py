"""Academic Bank of Credits backend package.

Organized by feature modules (users, attendance, analytics) with a thin Flask
controller layer over service/repository layers.
"""
