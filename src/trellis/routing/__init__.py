"""Routing — groups, endpoints and a compiled trie for request matching.

Groups collect endpoints while the engine is being set up; the trie is
frozen before the first request and matched in O(path-depth).
"""
