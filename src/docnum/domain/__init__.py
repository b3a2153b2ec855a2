"""Domain layer — pure numbering models and rules.

Nothing here touches storage, the network, or the clock.
"""
