"""Repository layer: generic record operations (SQL text, execution, reading).

Keep functions thin; the services layer adds logging and policy.
"""
