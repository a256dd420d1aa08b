"""
Shared code for the people services: configuration, logging,
Redis/PostgreSQL clients and data models.
"""
