"""Class Attendance package.

Feature modules (roster, attendance, reports, notifications) follow the same
shape: frozen dataclass models, Protocol repositories with MySQL adapters,
service classes holding the rules, and a thin Flask controller layer.
"""
