"""Tearing down the resources of a created cluster.

The platform a cluster runs on is read from its metadata and used to select a
destroyer from a :class:`~igniter.destroy.providers.DestroyerRegistry`.
"""
