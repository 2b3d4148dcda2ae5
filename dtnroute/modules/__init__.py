"""
Algorithm modules for dtnroute.

- rl: Tabular Q-learning engine and exploration policies
- routing: Congestion-aware epidemic routing with delivery receipts
"""
