"""
Generic, registry-driven CRUD over the hike tracker tables.
"""
