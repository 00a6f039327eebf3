"""Attendance Ledger package.

Feature modules (attendance, leave, scope, reports, ...) each carry their own
model, repository protocol, MySQL repository and service. Callers pass an
explicit ``Actor`` into scoped operations; nothing reads session state.
"""
