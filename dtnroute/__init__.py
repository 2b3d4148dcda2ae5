"""
dtnroute - congestion-aware epidemic routing and tabular Q-learning for
delay-tolerant network simulators.
"""

__version__ = "0.1.0"
