"""Leaderless DAG consensus building blocks: keys, hashing, transfers, events, committee, trust scoring, gossip encoding and vault watching."""

__version__ = "0.1.0"