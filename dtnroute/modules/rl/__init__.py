"""
Reinforcement Learning Module.

Provides a reusable tabular decision primitive for routing policies: a
Q-learning table with visit-decayed updates and pluggable exploration
(Boltzmann softmax, epsilon-greedy). It has no dependency on any router.

Key Components:
- algorithms: QLearning and exploration policies
- errors: RL exception hierarchy
"""
