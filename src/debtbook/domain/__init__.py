"""Domain layer for debtbook application.

Services are imported from their modules (``debtbook.domain.account`` and so
on) so that the database layer can import entities without loading them.
"""
