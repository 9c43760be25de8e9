"""Settlement Engine package.

Feature modules (fees, payroll, billing, scoring) each carry a model,
a repository protocol with a MySQL implementation, a service holding the
business rules, and a thin Flask controller.
"""
