"""Connect Hub package.

This package is organized by feature modules (users, groups, attendance, reports, ...)
with a thin Flask controller layer on top of service/repository layers.
"""
