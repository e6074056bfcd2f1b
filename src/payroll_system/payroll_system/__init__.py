"""Fee & Payroll package.

This package is organized by feature modules (teachers, loans, payroll, attendance, fees)
with a thin Flask controller layer and SOLID service/repository layers.
The payroll engine itself is a set of pure functions (see ``payroll.engine``).
"""
