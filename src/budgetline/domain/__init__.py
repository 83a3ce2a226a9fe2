"""Domain layer for budgetline application.

Services are imported from their modules directly (for example
``budgetline.domain.balance``) so the database layer can import entities
without pulling in the services that depend on it.
"""
